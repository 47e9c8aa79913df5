"""Configuration management for the module system.

Loads configuration from:
1. botmodules.toml (defaults)
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

from botmodules.catalog import DEFAULT_CATALOG_URL, FETCH_TIMEOUT
from botmodules.manifest import DEFAULT_PACKAGE_PREFIXES
from botmodules.presentation import ContributorInfo
from botmodules.resolve import DEFAULT_PACKAGES_DIR

# Load .env file if present
load_dotenv()

CONFIG_FILE = "botmodules.toml"


@dataclass
class ModulesConfig:
    """Where the host project lives and how extensions are found."""

    project_location: str = "."
    data_location: str = "./data"
    # None = derive from NODE_ENV (anything but "production" is developing)
    developing: bool | None = None
    packages_dir: str = DEFAULT_PACKAGES_DIR
    package_prefixes: list[str] = field(default_factory=lambda: list(DEFAULT_PACKAGE_PREFIXES))

    def is_developing(self) -> bool:
        if self.developing is not None:
            return self.developing
        return os.getenv("NODE_ENV", "development") != "production"


@dataclass
class CatalogConfig:
    """Community catalog settings."""

    url: str = DEFAULT_CATALOG_URL
    timeout: float = FETCH_TIMEOUT
    freshness_minutes: int = 30


@dataclass
class HeroConfig:
    """Contributor shown when the catalog has nobody to feature."""

    username: str = "danyfs"
    github: str = "https://github.com/danyfs"
    avatar: str = "https://avatars1.githubusercontent.com/u/5629987?v=3"
    contributions: str = "many"
    module: str = "botpress"

    def to_contributor(self) -> ContributorInfo:
        return ContributorInfo(
            username=self.username,
            github=self.github,
            avatar=self.avatar,
            contributions=self.contributions,
            module=self.module,
        )


@dataclass
class LoggingConfig:
    """Logging settings for the CLI."""

    level: str = "INFO"


@dataclass
class Config:
    """Main configuration container."""

    modules: ModulesConfig = field(default_factory=ModulesConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    hero: HeroConfig = field(default_factory=HeroConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        return cls(
            modules=ModulesConfig(**data.get("modules", {})),
            catalog=CatalogConfig(**data.get("catalog", {})),
            hero=HeroConfig(**data.get("hero", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )


def find_config_file() -> Path | None:
    """Find botmodules.toml in current or parent directories.

    Returns:
        Path to botmodules.toml or None if not found.
    """
    current = Path.cwd()

    for directory in [current, *current.parents]:
        config_path = directory / CONFIG_FILE
        if config_path.exists():
            return config_path

    return None


def load_config(config_path: Path | str | None = None) -> Config:
    """Load configuration from file and environment.

    Args:
        config_path: Optional explicit path to botmodules.toml

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
        "modules": {
            "project_location": os.getenv("BOTMODULES_PROJECT"),
            "data_location": os.getenv("BOTMODULES_DATA"),
            "developing": _bool_or_none(os.getenv("BOTMODULES_DEVELOPING")),
        },
        "catalog": {
            "url": os.getenv("BOTMODULES_CATALOG_URL"),
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


def _bool_or_none(value: str | None) -> bool | None:
    """Convert an environment flag to bool, or return None."""
    if value is None or not value.strip():
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


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

