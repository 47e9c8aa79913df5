"""Per-module configuration.

Extensions declare their options in their capability bundle's ``config``
mapping. Values are resolved from, highest priority first:

1. The environment variable named by the option's ``env``
2. The saved file ``<project>/<modulesConfigDir>/<module>.json``
3. The option's ``default``
"""

from __future__ import annotations

import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, Field, ValidationError, model_validator

from botmodules.helpers import read_json, write_json

DEFAULT_MODULES_CONFIG_DIR = "config"


class ConfigurationError(Exception):
    """Raised when module option definitions or values are invalid."""

    pass


class OptionType(str, Enum):
    """Type of a module option."""

    STRING = "string"
    BOOL = "bool"
    ANY = "any"
    CHOICE = "choice"


class OptionDefinition(BaseModel):
    """Schema for a single module option."""

    type: OptionType = Field(..., description="Option type: string, bool, any, choice")
    required: bool = Field(False, description="Whether a value must be provided")
    default: Any = Field(None, description="Default value")
    env: str | None = Field(None, description="Environment variable override")
    validation: list[Any] | None = Field(None, description="Allowed values for choice options")

    @model_validator(mode="after")
    def validate_choices(self) -> OptionDefinition:
        """Choice options need a non-empty list of allowed values."""
        if self.type == OptionType.CHOICE:
            if not self.validation:
                raise ValueError("choice options require a 'validation' list")
            if self.default is not None and self.default not in self.validation:
                raise ValueError(f"default {self.default!r} is not one of {self.validation}")
        return self

    def coerce(self, value: Any) -> Any:
        """Convert a raw (often string) value to this option's type."""
        if value is None:
            return None

        if self.type == OptionType.STRING:
            return str(value)

        if self.type == OptionType.BOOL:
            if isinstance(value, bool):
                return value
            return str(value).strip().lower() in ("1", "true", "yes", "on")

        if self.type == OptionType.CHOICE:
            if value not in self.validation:
                raise ConfigurationError(f"Invalid choice {value!r}, expected one of {self.validation}")
            return value

        return value


def _botfile_value(botfile: Any, key: str, default: Any) -> Any:
    """Read a key from a botfile given as a mapping or an object."""
    if botfile is None:
        return default
    if isinstance(botfile, Mapping):
        return botfile.get(key, default)
    return getattr(botfile, key, default)


class ModuleConfiguration:
    """Materialized configuration for one module."""

    def __init__(
        self,
        name: str,
        options: dict[str, OptionDefinition],
        config_file: Path,
        kvs: Any = None,
    ) -> None:
        self.name = name
        self.options = options
        self.config_file = config_file
        self.kvs = kvs

    def _load_saved(self) -> dict[str, Any]:
        """Values saved in the module's config file."""
        if not self.config_file.exists():
            return {}
        try:
            data = read_json(self.config_file)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {self.config_file}: {e}")
        return data if isinstance(data, dict) else {}

    def load_all(self) -> dict[str, Any]:
        """Resolve every declared option.

        Raises:
            ConfigurationError: If a required option has no value.
        """
        saved = self._load_saved()
        values: dict[str, Any] = {}

        for key, option in self.options.items():
            value = option.default
            if key in saved:
                value = saved[key]
            if option.env and os.environ.get(option.env) is not None:
                value = os.environ[option.env]

            if value is None and option.required:
                raise ConfigurationError(f"Missing required option '{key}' for module {self.name}")

            values[key] = option.coerce(value)

        return values

    def get(self, key: str) -> Any:
        """Resolve a single option."""
        if key not in self.options:
            raise KeyError(key)
        return self.load_all()[key]

    def set(self, key: str, value: Any) -> None:
        """Persist a single option value."""
        if key not in self.options:
            raise KeyError(key)
        saved = self._load_saved()
        saved[key] = self.options[key].coerce(value)
        write_json(self.config_file, saved)

    def save_all(self, values: dict[str, Any]) -> None:
        """Persist every declared option present in ``values``."""
        saved = self._load_saved()
        for key, value in values.items():
            if key in self.options:
                saved[key] = self.options[key].coerce(value)
        write_json(self.config_file, saved)

    def __repr__(self) -> str:
        return f"ModuleConfiguration(name={self.name!r}, options={list(self.options)!r})"


def create_config(
    kvs: Any,
    name: str,
    botfile: Any,
    project_location: Path | str,
    options: Mapping[str, Any] | None = None,
) -> ModuleConfiguration:
    """Build the configuration object for a module.

    Args:
        kvs: Key-value store handle, kept on the configuration.
        name: Module name.
        botfile: Host botfile (mapping or object) giving ``modulesConfigDir``.
        project_location: Host project root.
        options: The module's declared option definitions.

    Returns:
        ModuleConfiguration for the module.

    Raises:
        ConfigurationError: If an option definition is invalid.
    """
    definitions: dict[str, OptionDefinition] = {}

    for key, raw in (options or {}).items():
        if isinstance(raw, OptionDefinition):
            definitions[key] = raw
            continue
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"Option '{key}' must be a mapping")
        try:
            definitions[key] = OptionDefinition.model_validate(dict(raw))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid definition for option '{key}': {e}")

    config_dir = _botfile_value(botfile, "modulesConfigDir", DEFAULT_MODULES_CONFIG_DIR)
    config_file = Path(project_location) / config_dir / f"{name}.json"

    return ModuleConfiguration(name, definitions, config_file, kvs=kvs)
