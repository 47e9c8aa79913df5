"""Module manager: the interface the host application talks to."""

from __future__ import annotations

import logging
import random
from datetime import timedelta
from pathlib import Path
from typing import Any

from botmodules.cache import RegistryCache
from botmodules.catalog import CatalogClient
from botmodules.config import Config
from botmodules.loader import ExtensionLoader, HostContext, LoadedExtension
from botmodules.manifest import (
    MANIFEST_FILE,
    ManifestError,
    PackageManifest,
    build_package_predicate,
)
from botmodules.presentation import (
    ContributorInfo,
    DisplayModule,
    PresentationMapper,
    pick_contributor,
)
from botmodules.registry import ExtensionRegistry
from botmodules.resolve import resolve_project_file
from botmodules.scanner import CandidateDescriptor, ManifestScanner


class ModuleManager:
    """Discover and load extensions, and list community modules.

    Example:
        >>> manager = create_module_manager(logger, "./my-bot", "./my-bot/data", kvs)
        >>> loaded = await manager._load(manager._scan(), bot)
        >>> manager.list_all_community_modules()[0].name
        'botpress-analytics'
    """

    def __init__(
        self,
        project_location: Path | str,
        data_location: Path | str,
        kvs: Any = None,
        config: Config | None = None,
        client: CatalogClient | None = None,
        registry: ExtensionRegistry | None = None,
        logger: logging.Logger | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            project_location: Host project root.
            data_location: Directory for the modules cache.
            kvs: Key-value store handle passed to module configuration.
            config: Settings (default: built-in defaults).
            client: Catalog client (default: built from config).
            registry: Bundle registration table (default: empty).
            logger: Logger every component reports through.
            rng: Random source for contributor sampling.
        """
        self.config = config or Config()
        self.project_location = Path(project_location)
        self.data_location = Path(data_location)
        self.kvs = kvs
        self.logger = logger or logging.getLogger(__name__)
        self.rng = rng or random.Random()

        modules_config = self.config.modules
        self.is_extension_package = build_package_predicate(modules_config.package_prefixes)

        self.scanner = ManifestScanner(
            self.project_location,
            developing=modules_config.is_developing(),
            predicate=self.is_extension_package,
            packages_dir=modules_config.packages_dir,
            logger=self.logger,
        )
        self.loader = ExtensionLoader(
            self.project_location,
            kvs=kvs,
            registry=registry,
            logger=self.logger,
        )

        catalog = self.config.catalog
        self.cache = RegistryCache(
            self.data_location,
            client
            or CatalogClient(url=catalog.url, timeout=catalog.timeout, logger=self.logger),
            freshness=timedelta(minutes=catalog.freshness_minutes),
            logger=self.logger,
        )
        self.mapper = PresentationMapper(self.list_installed)

    def list_installed(self) -> list[str]:
        """Extension packages among the project's production dependencies."""
        package_path = resolve_project_file(MANIFEST_FILE, self.project_location)
        if package_path is None:
            self.logger.debug("No package.json in %s", self.project_location)
            return []

        try:
            manifest = PackageManifest.from_json(package_path)
        except ManifestError as e:
            self.logger.debug("Could not read %s: %s", package_path, e)
            return []

        return [name for name in manifest.dependencies if self.is_extension_package(name)]

    def list_all_community_modules(self) -> list[DisplayModule]:
        """Every catalog module, shaped for display."""
        return self.cache.list_all(self.mapper.map_for_display)

    def get_random_community_hero(self) -> ContributorInfo:
        """A random contributor to one of the catalog's modules."""
        self.list_all_community_modules()
        modules, _ = self.cache.read()
        return pick_contributor(modules, self.config.hero.to_contributor(), rng=self.rng)

    def _scan(self) -> list[CandidateDescriptor]:
        return self.scanner.scan()

    async def _load(
        self,
        descriptors: list[CandidateDescriptor],
        host: HostContext,
    ) -> dict[str, LoadedExtension]:
        return await self.loader.load(descriptors, host)


def create_module_manager(
    logger: logging.Logger | None,
    project_location: Path | str,
    data_location: Path | str,
    kvs: Any = None,
    **kwargs: Any,
) -> ModuleManager:
    """Build a ModuleManager the way the host wires it up."""
    return ModuleManager(
        project_location,
        data_location,
        kvs=kvs,
        logger=logger,
        **kwargs,
    )
