"""Package manifest schema.

Defines the subset of ``package.json`` that the module system reads from
the host project and from each installed extension package.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

MANIFEST_FILE = "package.json"

# Default naming convention for host-extension packages
DEFAULT_PACKAGE_PREFIXES = ("botpress-", "@botpress/")


class ManifestError(Exception):
    """Raised when manifest parsing or validation fails."""

    pass


class PackageManifest(BaseModel):
    """A package manifest (package.json)."""

    name: str = Field("", description="Package name")
    version: str = Field("", description="Semantic version")
    description: str = Field("", description="Package description")
    homepage: str | None = Field(None, description="Documentation URL")
    main: str | None = Field(None, description="Entry point relative to the package root")

    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(
        default_factory=dict,
        alias="devDependencies",
    )

    # Extension-declaration section; its presence marks a genuine extension
    botpress: dict[str, Any] | None = Field(None, description="Extension settings")

    class Config:
        populate_by_name = True
        extra = "allow"

    @field_validator("dependencies", "dev_dependencies", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        """A null dependency map means no dependencies."""
        if value is None:
            return {}
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value

    @field_validator("name", "version", "description", mode="before")
    @classmethod
    def scalar_as_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("homepage", "main", mode="before")
    @classmethod
    def scalar_as_optional_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @classmethod
    def from_json(cls, json_path: Path) -> PackageManifest:
        """Load manifest from a package.json file.

        Args:
            json_path: Path to package.json.

        Returns:
            Parsed PackageManifest.

        Raises:
            ManifestError: If file is missing or invalid.
        """
        if not json_path.exists():
            raise ManifestError(f"Manifest not found: {json_path}")

        try:
            with open(json_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ManifestError(f"Invalid JSON in {json_path}: {e}")
        except OSError as e:
            raise ManifestError(f"Could not read {json_path}: {e}")

        if not isinstance(data, dict):
            raise ManifestError(f"Manifest must be a JSON object: {json_path}")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PackageManifest:
        """Create manifest from a dictionary.

        Raises:
            ManifestError: If fields have the wrong shape.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ManifestError(f"Invalid manifest data: {e}")

    @property
    def is_extension(self) -> bool:
        """Whether the package declares itself as a host extension."""
        return self.botpress is not None

    def merged_dependencies(self, include_dev: bool = False) -> dict[str, str]:
        """Production dependencies, optionally united with dev dependencies.

        Production entries win on conflict and keep their position; dev-only
        names are appended in their own order.
        """
        deps = dict(self.dependencies)
        if include_dev:
            for name, version in self.dev_dependencies.items():
                deps.setdefault(name, version)
        return deps


def build_package_predicate(prefixes: tuple[str, ...] | list[str] = DEFAULT_PACKAGE_PREFIXES):
    """Build a naming-convention predicate for extension package names."""
    pattern = re.compile(
        "^(" + "|".join(re.escape(p) for p in prefixes) + ")",
        re.IGNORECASE,
    )

    def predicate(name: str) -> bool:
        return bool(name) and pattern.match(name) is not None

    return predicate


is_extension_package = build_package_predicate()
