"""Filesystem resolution of installed packages and project files."""

from __future__ import annotations

import json
from pathlib import Path

from botmodules.manifest import MANIFEST_FILE, ManifestError

DEFAULT_PACKAGES_DIR = "node_modules"
DEFAULT_ENTRY_FILES = ("index.py", "__init__.py")


def resolve_from_dir(
    from_dir: Path | str,
    name: str,
    packages_dir: str = DEFAULT_PACKAGES_DIR,
) -> Path | None:
    """Resolve the entry file of an installed package.

    Looks for ``<dir>/<packages_dir>/<name>`` starting at ``from_dir`` and
    walking up through its parents, the way a package manager lays out
    nested installs.

    Args:
        from_dir: Directory to resolve from (usually the project root).
        name: Package name, possibly scoped (``@scope/name``).
        packages_dir: Name of the installed-packages directory.

    Returns:
        Absolute path to the entry file, or None if it cannot be resolved.
    """
    start = Path(from_dir).resolve()

    for directory in [start, *start.parents]:
        package_dir = directory / packages_dir / name
        if package_dir.is_dir():
            entry = _entry_for_package(package_dir)
            if entry is not None:
                return entry

    return None


def _entry_for_package(package_dir: Path) -> Path | None:
    """Find the loadable entry file for a package directory."""
    main = None
    manifest_path = package_dir / MANIFEST_FILE
    if manifest_path.exists():
        try:
            data = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            return None
        if isinstance(data, dict) and isinstance(data.get("main"), str):
            main = data["main"]

    if main:
        target = (package_dir / main).resolve()
        if target.is_file():
            return target
        if target.is_dir() and (target / "__init__.py").is_file():
            return target / "__init__.py"
        if target.with_suffix(".py").is_file():
            return target.with_suffix(".py")
        return None

    for filename in DEFAULT_ENTRY_FILES:
        candidate = package_dir / filename
        if candidate.is_file():
            return candidate.resolve()

    return None


def resolve_module_root_path(entry: Path | str) -> Path | None:
    """Find the root of the package that contains ``entry``.

    The root is the nearest ancestor directory holding a package.json.
    """
    path = Path(entry).resolve()
    start = path if path.is_dir() else path.parent

    for directory in [start, *start.parents]:
        if (directory / MANIFEST_FILE).is_file():
            return directory

    return None


def resolve_project_file(
    file: str,
    project_location: Path | str,
    throw_if_missing: bool = False,
) -> Path | None:
    """Resolve a file relative to the project directory.

    Raises:
        ManifestError: If the file is missing and ``throw_if_missing`` is set.
    """
    path = Path(project_location) / file
    if path.exists():
        return path

    if throw_if_missing:
        raise ManifestError(f"Could not find project file: {path}")

    return None
