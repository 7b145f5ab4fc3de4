"""Scan result data structures."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

REQUEST_CREATION_FAILED = "Request creation failed"
REQUEST_FAILED = "Request failed"
INSECURE_ORIGIN_FINDING = "Wildcard or insecure Origin allowed"


@dataclass(frozen=True)
class ScanResult:
    """Outcome of probing a single URL."""
    url: str
    cors_headers: Dict[str, str] = field(default_factory=dict)
    misconfigurations: List[str] = field(default_factory=list)

    @property
    def vulnerable(self) -> bool:
        return bool(self.misconfigurations)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "cors_headers": dict(self.cors_headers),
            "misconfigurations": list(self.misconfigurations),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanResult":
        """Rebuild a result from its JSON representation.

        Raises:
            KeyError: If ``url`` is missing
        """
        return cls(
            url=data["url"],
            cors_headers=dict(data.get("cors_headers") or {}),
            misconfigurations=list(data.get("misconfigurations") or []),
        )
