"""Local cache of the community module catalog.

The cache lives in ``<data_location>/modules-cache.json``::

    {"modules": [...], "updated": "2024-01-01T00:00:00+00:00"}

``updated`` is null until the first refresh. The file is read and rewritten
without locking; a single owning process is assumed.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

from botmodules.catalog import CatalogClient
from botmodules.helpers import read_json, write_json

CACHE_FILE = "modules-cache.json"
FRESHNESS_WINDOW = timedelta(minutes=30)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; None if absent or malformed."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class RegistryCache:
    """Serve the community catalog from disk, refreshing it when stale.

    Example:
        >>> cache = RegistryCache(Path("./data"), CatalogClient())
        >>> modules = cache.get_modules()
    """

    def __init__(
        self,
        data_location: Path | str,
        client: CatalogClient,
        freshness: timedelta = FRESHNESS_WINDOW,
        clock: Callable[[], datetime] = _utcnow,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            data_location: Directory holding the cache file.
            client: Catalog client used for refreshes.
            freshness: How long a refresh stays valid.
            clock: Returns the current aware datetime.
            logger: Logger to report through (default: module logger).
        """
        self.data_location = Path(data_location)
        self.client = client
        self.freshness = freshness
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    @property
    def path(self) -> Path:
        return self.data_location / CACHE_FILE

    def ensure(self) -> None:
        """Create an empty, never-refreshed cache file if there is none."""
        if not self.path.exists():
            write_json(self.path, {"modules": [], "updated": None})

    def read(self) -> tuple[list[Any], datetime | None]:
        """Read the cached modules and their refresh time."""
        self.ensure()
        try:
            data = read_json(self.path)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self.logger.warning("Ignoring corrupt modules cache %s: %s", self.path, e)
            return [], None

        if not isinstance(data, dict):
            return [], None

        modules = data.get("modules")
        if not isinstance(modules, list):
            modules = []
        return modules, parse_timestamp(data.get("updated"))

    def write(self, modules: list[Any]) -> None:
        """Replace the cached modules and stamp the refresh time."""
        write_json(
            self.path,
            {"modules": modules, "updated": self.clock().isoformat()},
        )

    def is_fresh(self, updated: datetime | None) -> bool:
        if updated is None:
            return False
        return self.clock() - updated <= self.freshness

    def get_modules(self) -> list[Any]:
        """Return the catalog's modules, refreshing the cache if stale.

        A failed or empty fetch never clears a non-empty cache; the cached
        modules are served instead.
        """
        modules, updated = self.read()

        if self.is_fresh(updated):
            return modules

        new_modules = self.client.fetch_all()

        if not isinstance(new_modules, list) or not new_modules:
            if modules:
                self.logger.debug(
                    "Fetched invalid modules. Serving %d cached modules.", len(modules)
                )
                return modules
            new_modules = []

        self.write(new_modules)
        return new_modules

    def list_all(self, mapper: Callable[[list[Any]], list[Any]]) -> list[Any]:
        """Return the catalog's modules transformed by ``mapper``."""
        return mapper(self.get_modules())

    def invalidate(self) -> None:
        """Mark the cache stale without dropping its modules."""
        modules, _ = self.read()
        write_json(self.path, {"modules": modules, "updated": None})
