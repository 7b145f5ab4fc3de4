"""Configuration loader and validator."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse
import os

import yaml

from corsy.brain.cors import DEFAULT_ORIGIN

DEFAULT_CONFIG_PATH = "corsy.yaml"
DEFAULT_TIMEOUT = 10
DEFAULT_CONCURRENCY = 1


class ConfigError(ValueError):
    """Raised when a configuration file is malformed."""


class Config:
    """Load and validate corsy.yaml configuration."""

    def __init__(self, config_path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> None:
        """Initialize config loader.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}

    def load(self) -> Dict[str, Any]:
        """Load and validate configuration.

        Returns:
            Validated configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigError: If configuration is invalid
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}\n"
                "Run 'corsy init' to create one."
            )

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing YAML file: {e}") from e

        if self._config is None:
            self._config = {}

        if not isinstance(self._config, dict):
            raise ConfigError("Configuration root must be a mapping/object")

        self._expand_env_vars(self._config)
        self._validate()

        return self._config

    def _expand_env_vars(self, obj: Any) -> None:
        """Recursively expand ${VAR} environment variables."""
        if isinstance(obj, dict):
            for key, value in obj.items():
                if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
                    obj[key] = os.environ.get(value[2:-1], "")
                elif isinstance(value, (dict, list)):
                    self._expand_env_vars(value)
        elif isinstance(obj, list):
            for i, item in enumerate(obj):
                if isinstance(item, str) and item.startswith("${") and item.endswith("}"):
                    obj[i] = os.environ.get(item[2:-1], "")
                else:
                    self._expand_env_vars(item)

    def _validate(self) -> None:
        """Validate configuration."""
        for section in ("targets", "output", "probe"):
            if not isinstance(self._config.get(section, {}), dict):
                raise ConfigError(f"'{section}' must be a mapping")

        for section, key in (("targets", "url"), ("targets", "input_file"),
                             ("output", "file"), ("output", "log_file")):
            value = getattr(self, section).get(key)
            if value is not None and not isinstance(value, str):
                raise ConfigError(f"{section}.{key} must be a string")

        probe = self.probe
        for key in ("timeout", "concurrency"):
            if key in probe:
                value = probe[key]
                if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                    raise ConfigError(f"probe.{key} must be a positive integer")

        if "origin" in probe:
            try:
                validate_origin(probe["origin"])
            except ValueError as e:
                raise ConfigError(f"probe.origin: {e}") from e

    @property
    def targets(self) -> Dict[str, Any]:
        """Get targets configuration."""
        return self._config.get("targets") or {}

    @property
    def output(self) -> Dict[str, Any]:
        """Get output configuration."""
        return self._config.get("output") or {}

    @property
    def probe(self) -> Dict[str, Any]:
        """Get probe configuration."""
        return self._config.get("probe") or {}


def validate_origin(origin: Any) -> str:
    """Ensure origin is an http(s) origin string."""
    if not isinstance(origin, str) or not origin:
        raise ValueError("origin must be a non-empty string")
    parsed = urlparse(origin)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid origin: {origin!r}. Expected e.g. 'https://evil.com'.")
    return origin


@dataclass(frozen=True)
class ScanConfig:
    """Settings for a single scan run."""
    url: Optional[str] = None
    input_file: Optional[str] = None
    output_file: Optional[str] = None
    timeout: int = DEFAULT_TIMEOUT
    origin: str = DEFAULT_ORIGIN
    concurrency: int = DEFAULT_CONCURRENCY
    log_file: Optional[str] = None

    @property
    def has_targets(self) -> bool:
        return bool(self.url or self.input_file)

    @classmethod
    def from_sources(cls, file_config: Optional[Config] = None, **overrides: Any) -> "ScanConfig":
        """Merge config file values with command-line overrides.

        Overrides set to None fall back to the config file, then to defaults.
        """
        values: Dict[str, Any] = {}
        if file_config is not None:
            values.update({
                "url": file_config.targets.get("url"),
                "input_file": file_config.targets.get("input_file"),
                "output_file": file_config.output.get("file"),
                "log_file": file_config.output.get("log_file"),
                "timeout": file_config.probe.get("timeout"),
                "origin": file_config.probe.get("origin"),
                "concurrency": file_config.probe.get("concurrency"),
            })
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**{k: v for k, v in values.items() if v is not None and v != ""})
