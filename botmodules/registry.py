"""Registration table of extension capability bundles.

Bundles are registered explicitly at startup, either in code or from the
``botmodules.extensions`` entry-point group of installed distributions.
Descriptors without a registered bundle fall back to importing their entry
file.
"""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import sys
from importlib.metadata import entry_points
from pathlib import Path
from typing import Any

from botmodules.scanner import CandidateDescriptor

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "botmodules.extensions"


class ExtensionLoadError(Exception):
    """Raised when an extension's capability bundle cannot be resolved."""

    pass


class ExtensionRegistry:
    """Map extension package names to their capability bundles.

    Example:
        >>> registry = ExtensionRegistry()
        >>> registry.register("botpress-hello", {"init": setup})
        >>> registry.resolve(descriptor)
        {'init': <function setup ...>}
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._bundles: dict[str, Any] = {}

    def register(self, name: str, bundle: Any) -> None:
        """Register a bundle under a package name.

        Raises:
            ValueError: If a bundle with the same name is already registered.
        """
        if name in self._bundles:
            raise ValueError(f"Extension '{name}' is already registered")

        self._bundles[name] = bundle
        logger.debug("Registered extension bundle: %s", name)

    def unregister(self, name: str) -> bool:
        """Remove a registered bundle.

        Returns:
            True if it was removed, False if not found.
        """
        return self._bundles.pop(name, None) is not None

    def register_entry_points(self, group: str = ENTRY_POINT_GROUP) -> list[str]:
        """Register every bundle advertised by installed distributions.

        Entry points that fail to load are logged and skipped.

        Returns:
            Names that were registered.
        """
        registered: list[str] = []

        for ep in entry_points(group=group):
            if ep.name in self._bundles:
                continue
            try:
                self.register(ep.name, ep.load())
                registered.append(ep.name)
            except Exception as e:
                logger.warning("Failed to load entry point %s: %s", ep.name, e)

        return registered

    def resolve(self, descriptor: CandidateDescriptor) -> Any:
        """Resolve the capability bundle for a descriptor.

        Raises:
            ExtensionLoadError: If the entry file cannot be imported.
        """
        if descriptor.name in self._bundles:
            return self._bundles[descriptor.name]

        module = self._load_module(descriptor.name, descriptor.entry)
        return getattr(module, "extension", module)

    def _load_module(self, name: str, file_path: Path) -> Any:
        """Dynamically load a Python module from file.

        Args:
            name: Package name the module belongs to.
            file_path: Path to the Python file.

        Returns:
            Loaded module.
        """
        # Sanitized names can collide; the entry path digest keeps keys distinct
        digest = hashlib.sha1(str(file_path.resolve()).encode("utf-8")).hexdigest()[:12]
        module_name = "botmodules_ext_" + "".join(
            c if c.isalnum() else "_" for c in name
        ) + "_" + digest

        search_locations = None
        if file_path.name == "__init__.py":
            search_locations = [str(file_path.parent)]

        spec = importlib.util.spec_from_file_location(
            module_name, file_path, submodule_search_locations=search_locations
        )
        if spec is None or spec.loader is None:
            raise ExtensionLoadError(f"Could not load module spec from {file_path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise ExtensionLoadError(str(e)) from e

        return module

    def __len__(self) -> int:
        return len(self._bundles)

    def __contains__(self, name: str) -> bool:
        return name in self._bundles
