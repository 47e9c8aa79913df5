"""Module system for botpress-style bots.

Discovers extension packages declared in a bot project's package.json,
loads and initializes them, and keeps a cached copy of the community
module catalog.

Extensions are packages named ``botpress-*`` (or scoped ``@botpress/*``)
whose own package.json has a ``botpress`` section.
"""

from botmodules.cache import RegistryCache
from botmodules.catalog import CatalogClient, CatalogError
from botmodules.configurator import ConfigurationError, ModuleConfiguration, create_config
from botmodules.loader import ExtensionLoader, LoadedExtension
from botmodules.manager import ModuleManager, create_module_manager
from botmodules.manifest import ManifestError, PackageManifest, is_extension_package
from botmodules.presentation import ContributorInfo, DisplayModule, PresentationMapper
from botmodules.registry import ExtensionLoadError, ExtensionRegistry
from botmodules.scanner import CandidateDescriptor, ManifestScanner

__version__ = "0.1.0"

__all__ = [
    "CandidateDescriptor",
    "CatalogClient",
    "CatalogError",
    "ConfigurationError",
    "ContributorInfo",
    "DisplayModule",
    "ExtensionLoadError",
    "ExtensionLoader",
    "ExtensionRegistry",
    "LoadedExtension",
    "ManifestError",
    "ManifestScanner",
    "ModuleConfiguration",
    "ModuleManager",
    "PackageManifest",
    "PresentationMapper",
    "RegistryCache",
    "create_config",
    "create_module_manager",
    "is_extension_package",
]
