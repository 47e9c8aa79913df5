"""Manifest scanner.

Reads the host project's package.json and turns its extension
dependencies into candidate descriptors for the loader.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from botmodules.manifest import (
    MANIFEST_FILE,
    ManifestError,
    PackageManifest,
    is_extension_package,
)
from botmodules.resolve import (
    DEFAULT_PACKAGES_DIR,
    resolve_from_dir,
    resolve_module_root_path,
)


@dataclass(frozen=True)
class CandidateDescriptor:
    """An installed package that declares itself as a host extension."""

    name: str
    root: Path
    version: str
    entry: Path
    homepage: str | None = None
    settings: dict[str, Any] = field(default_factory=dict)


class ManifestScanner:
    """Discover extension packages declared by a host project.

    Example:
        >>> scanner = ManifestScanner(Path("./my-bot"))
        >>> [d.name for d in scanner.scan()]
        ['botpress-analytics']
    """

    def __init__(
        self,
        project_location: Path | str,
        developing: bool = False,
        predicate: Callable[[str], bool] = is_extension_package,
        packages_dir: str = DEFAULT_PACKAGES_DIR,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            project_location: Host project root (holds package.json).
            developing: Also consider devDependencies.
            predicate: Naming convention for extension packages.
            packages_dir: Installed-packages directory name.
            logger: Logger to report through (default: module logger).
        """
        self.project_location = Path(project_location)
        self.developing = developing
        self.predicate = predicate
        self.packages_dir = packages_dir
        self.logger = logger or logging.getLogger(__name__)

    def scan(self) -> list[CandidateDescriptor]:
        """Scan the project manifest for installed extensions.

        Returns:
            Descriptors in dependency order. Empty if the project has no
            package.json.
        """
        package_path = self.project_location / MANIFEST_FILE

        if not package_path.exists():
            self.logger.warning(
                "No package.json found at project root, "
                "which means botpress can't load any module for the bot."
            )
            return []

        try:
            bot_package = PackageManifest.from_json(package_path)
        except ManifestError as e:
            self.logger.error("Could not read project manifest: %s", e)
            return []

        deps = bot_package.merged_dependencies(include_dev=self.developing)

        descriptors: list[CandidateDescriptor] = []
        for name in deps:
            descriptor = self._describe(name)
            if descriptor is not None:
                descriptors.append(descriptor)

        return descriptors

    def _describe(self, name: str) -> CandidateDescriptor | None:
        """Build a descriptor for one dependency, or None to skip it."""
        if not self.predicate(name):
            return None

        entry = resolve_from_dir(self.project_location, name, self.packages_dir)
        if entry is None:
            return None

        root = resolve_module_root_path(entry)
        if root is None:
            return None

        try:
            module_package = PackageManifest.from_json(root / MANIFEST_FILE)
        except ManifestError as e:
            self.logger.debug("Skipping %s: %s", name, e)
            return None

        if not module_package.is_extension:
            return None

        return CandidateDescriptor(
            name=name,
            root=root,
            homepage=module_package.homepage,
            settings=dict(module_package.botpress or {}),
            version=module_package.version,
            entry=entry,
        )
