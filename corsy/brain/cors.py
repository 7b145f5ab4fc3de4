from typing import Dict, List

from corsy.models import INSECURE_ORIGIN_FINDING

DEFAULT_ORIGIN = "https://evil.com"
ALLOW_ORIGIN_HEADER = "Access-Control-Allow-Origin"


def canonical_header_name(name: str) -> str:
    """Return ``name`` in canonical MIME form, e.g. ``Access-Control-Allow-Origin``."""
    return "-".join(part.capitalize() for part in name.split("-"))


def analyze_cors(headers: Dict[str, str], origin: str = DEFAULT_ORIGIN) -> List[str]:
    findings = []

    # Keys are expected in canonical form, see canonical_header_name()
    aco = headers.get(ALLOW_ORIGIN_HEADER)
    if aco is None:
        return findings

    # Wildcard, or the forged origin reflected back verbatim
    if aco == "*" or aco == origin:
        findings.append(INSECURE_ORIGIN_FINDING)

    return findings
