"""
Configuration for stack lifecycle operations.

Settings come from defaults, an optional YAML file and STACKUP_* environment
variables, in that order of precedence (lowest first).
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "stackup.yaml"


@dataclass
class StackupConfig:
    """Settings shared by every stack operation."""

    # AWS session
    region: Optional[str] = None
    profile: Optional[str] = None

    # Polling
    poll_interval: float = 2.0
    max_wait: Optional[float] = None

    # Mutation flags
    capabilities: List[str] = field(default_factory=lambda: ["CAPABILITY_IAM"])
    disable_rollback: bool = True

    def __post_init__(self) -> None:
        if self.poll_interval < 0:
            raise ValueError(f"poll_interval must not be negative: {self.poll_interval}")
        if self.max_wait is not None and self.max_wait <= 0:
            raise ValueError(f"max_wait must be positive: {self.max_wait}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StackupConfig":
        """Create config from dictionary."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)


ENV_OVERRIDES = {
    "STACKUP_REGION": ("region", str),
    "STACKUP_PROFILE": ("profile", str),
    "STACKUP_POLL_INTERVAL": ("poll_interval", float),
    "STACKUP_MAX_WAIT": ("max_wait", float),
}


def _read_config_file(path: Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    return data


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> StackupConfig:
    """
    Load configuration.

    Args:
        path: YAML file to read; defaults to stackup.yaml in the working
            directory when it exists
        environ: Environment to read overrides from (defaults to os.environ)

    Returns:
        Merged configuration
    """
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}

    if path is not None:
        config_file = Path(path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")
    else:
        config_file = Path.cwd() / DEFAULT_CONFIG_FILE

    if config_file.exists():
        logger.debug(f"Loading configuration from {config_file}")
        data.update(_read_config_file(config_file))

    for var, (key, convert) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            try:
                data[key] = convert(value)
            except ValueError:
                raise ValueError(f"Invalid value for {var}: {value!r}") from None

    return StackupConfig.from_dict(data)
