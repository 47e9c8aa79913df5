"""Extension loader.

Imports each discovered extension, builds its configuration and runs its
``init`` hook, one extension at a time.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Mapping, Protocol

from botmodules.configurator import create_config
from botmodules.helpers import helpers as default_helpers
from botmodules.registry import ExtensionRegistry
from botmodules.scanner import CandidateDescriptor


class HostContext(Protocol):
    """What the loader needs from the host application."""

    botfile: Any


@dataclass
class LoadedExtension:
    """An extension that went through the loading sequence."""

    descriptor: CandidateDescriptor
    handlers: Any
    configuration: Any = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def version(self) -> str:
        return self.descriptor.version


def is_capability_bundle(value: Any) -> bool:
    """Check that an entry point evaluated to an object-shaped bundle."""
    if isinstance(value, (ModuleType, Mapping)):
        return True
    if value is None or isinstance(value, (str, bytes, int, float, bool, list, tuple, set)):
        return False
    if isinstance(value, type) or callable(value):
        return False
    return True


def get_hook(bundle: Any, name: str, default: Any = None) -> Any:
    """Read a hook or property from a bundle (mapping or object)."""
    if isinstance(bundle, Mapping):
        return bundle.get(name, default)
    return getattr(bundle, name, default)


class ExtensionLoader:
    """Load scanned extensions into the host.

    Extensions are processed strictly in order: each one is imported,
    configured and initialized before the next is touched, so an extension
    can rely on whatever earlier ones registered on the host.

    Example:
        >>> loader = ExtensionLoader(project_location=Path("./my-bot"))
        >>> loaded = await loader.load(scanner.scan(), bot)
        >>> loaded["botpress-analytics"].version
        '1.2.0'
    """

    def __init__(
        self,
        project_location: Path | str,
        kvs: Any = None,
        registry: ExtensionRegistry | None = None,
        config_factory: Callable[..., Any] = create_config,
        helpers: Any = default_helpers,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            project_location: Host project root.
            kvs: Key-value store handle passed to the config factory.
            registry: Bundle registration table (default: empty).
            config_factory: Builds each extension's configuration.
            helpers: Helper bundle passed to ``init`` hooks.
            logger: Logger to report through (default: module logger).
        """
        self.project_location = Path(project_location)
        self.kvs = kvs
        self.registry = registry or ExtensionRegistry()
        self.config_factory = config_factory
        self.helpers = helpers
        self.logger = logger or logging.getLogger(__name__)

    async def load(
        self,
        descriptors: list[CandidateDescriptor],
        host: HostContext,
    ) -> dict[str, LoadedExtension]:
        """Load every descriptor, skipping the ones that fail to import.

        Args:
            descriptors: Output of the manifest scanner.
            host: Host application; passed to ``init`` hooks.

        Returns:
            Loaded extensions keyed by name.
        """
        loaded: dict[str, LoadedExtension] = {}

        for descriptor in descriptors:
            extension = await self._load_one(descriptor, host)
            if extension is None:
                continue
            loaded[descriptor.name] = extension
            self.logger.info("Loaded %s, version %s", descriptor.name, descriptor.version)

        if loaded:
            self.logger.info("Loaded %d modules", len(loaded))

        return loaded

    async def _load_one(
        self, descriptor: CandidateDescriptor, host: HostContext
    ) -> LoadedExtension | None:
        """Run the loading sequence for one extension."""
        try:
            bundle = self.registry.resolve(descriptor)
        except Exception as e:
            self.logger.error('Error loading module "%s": %s', descriptor.name, e)
            return None

        if not is_capability_bundle(bundle):
            self.logger.warning(
                "Ignoring module %s. Invalid entry point signature.", descriptor.name
            )
            return None

        extension = LoadedExtension(descriptor=descriptor, handlers=bundle)

        try:
            extension.configuration = self.config_factory(
                kvs=self.kvs,
                name=descriptor.name,
                botfile=getattr(host, "botfile", None),
                project_location=self.project_location,
                options=get_hook(bundle, "config") or {},
            )
        except Exception as e:
            self.logger.error(
                "Invalid module configuration in module %s: %s", descriptor.name, e
            )

        init = get_hook(bundle, "init")
        if callable(init):
            try:
                result = init(host, extension.configuration, self.helpers)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.warning(
                    "Error during module initialization of %s: %s", descriptor.name, e
                )

        return extension
