"""Configuration management for create-tools.

Loads configuration from:
1. create-tools.toml (defaults)
2. Environment variables (overrides)
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from dotenv import load_dotenv

from scaffolding.generator import PAYLOAD_DIR
from scaffolding.registry import (
    DEFAULT_REGISTRY_URL,
    DEFAULT_SEARCH_SIZE,
    DEFAULT_SEARCH_TEXT,
    DEFAULT_TIMEOUT,
)
from scaffolding.target import DEFAULT_TARGET_DIR

# Load .env file if present
load_dotenv()

CONFIG_FILE_NAME = "create-tools.toml"


@dataclass
class RegistryConfig:
    """Template registry configuration."""

    url: str = DEFAULT_REGISTRY_URL
    timeout: float = DEFAULT_TIMEOUT
    search_text: str = DEFAULT_SEARCH_TEXT  # Keyword that identifies templates
    search_size: int = DEFAULT_SEARCH_SIZE


@dataclass
class ScaffoldConfig:
    """Project generation configuration."""

    default_target_dir: str = DEFAULT_TARGET_DIR
    scratch_dir: str = ""  # Empty = <tmp>/create-tools-boilerplate
    payload_dir: str = PAYLOAD_DIR
    keep_scratch: bool = False  # Leave extracted templates behind for debugging


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"


@dataclass
class Config:
    """Main configuration container."""

    registry: RegistryConfig = field(default_factory=RegistryConfig)
    scaffold: ScaffoldConfig = field(default_factory=ScaffoldConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        return cls(
            registry=RegistryConfig(**data.get("registry", {})),
            scaffold=ScaffoldConfig(**data.get("scaffold", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    @property
    def scratch_path(self) -> Path | None:
        return Path(self.scaffold.scratch_dir).expanduser() if self.scaffold.scratch_dir else None


def find_config_file() -> Path | None:
    """Find create-tools.toml in current or parent directories.

    Returns:
        Path to create-tools.toml or None if not found.
    """
    current = Path.cwd()

    for directory in [current, *current.parents]:
        config_path = directory / CONFIG_FILE_NAME
        if config_path.exists():
            return config_path

    return None


def load_config(config_path: Path | str | None = None) -> Config:
    """Load configuration from file and environment.

    Args:
        config_path: Optional explicit path to create-tools.toml

    Returns:
        Config object with merged settings.
    """
    config_data: dict[str, Any] = {}

    if config_path is None:
        config_path = find_config_file()

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path, "rb") as f:
                config_data = tomllib.load(f)

    env_overrides = {
        "registry": {
            "url": os.getenv("CREATE_TOOLS_REGISTRY") or os.getenv("npm_config_registry"),
            "timeout": _float_or_none(os.getenv("CREATE_TOOLS_TIMEOUT")),
        },
        "scaffold": {
            "scratch_dir": os.getenv("CREATE_TOOLS_SCRATCH_DIR"),
        },
        "logging": {
            "level": os.getenv("LOG_LEVEL"),
        },
    }

    # Merge env overrides (only non-None values)
    for section, values in env_overrides.items():
        if section not in config_data:
            config_data[section] = {}
        for key, value in values.items():
            if value is not None:
                config_data[section][key] = value

    return Config.from_dict(config_data)


def _float_or_none(value: str | None) -> float | None:
    """Convert string to float, or return None."""
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config object (loaded once, cached).
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config
