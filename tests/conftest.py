"""Shared fixtures for building bot projects on disk."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest


def write_package(directory: Path, data: dict[str, Any]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "package.json"
    path.write_text(json.dumps(data))
    return path


class BotProject:
    """A bot project laid out under a temporary directory."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.data = root / "data"

    def write_manifest(
        self,
        dependencies: dict[str, str] | None = None,
        dev_dependencies: dict[str, str] | None = None,
    ) -> Path:
        data: dict[str, Any] = {"name": "my-bot", "version": "1.0.0"}
        if dependencies is not None:
            data["dependencies"] = dependencies
        if dev_dependencies is not None:
            data["devDependencies"] = dev_dependencies
        return write_package(self.root, data)

    def install(
        self,
        name: str,
        version: str = "1.0.0",
        botpress: dict[str, Any] | None = None,
        code: str = "",
        homepage: str | None = None,
        main: str | None = None,
    ) -> Path:
        """Install a package into node_modules with an index.py entry."""
        package_dir = self.root / "node_modules" / name
        data: dict[str, Any] = {"name": name, "version": version}
        if botpress is not None:
            data["botpress"] = botpress
        if homepage is not None:
            data["homepage"] = homepage
        if main is not None:
            data["main"] = main
        write_package(package_dir, data)
        (package_dir / (main or "index.py")).write_text(code)
        return package_dir


@pytest.fixture
def project(tmp_path):
    """An empty bot project."""
    return BotProject(tmp_path / "my-bot")


class FakeCatalog:
    """Stands in for CatalogClient and counts fetches."""

    def __init__(self, result: Any = None) -> None:
        self.result = result
        self.calls = 0

    def fetch_all(self) -> Any:
        self.calls += 1
        return self.result


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def catalog_entry(name: str, contributors: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    """A catalog entry shaped like the published module list."""
    return {
        "name": name,
        "title": name.replace("botpress-", "").title(),
        "description": f"The {name} module",
        "homepage": f"https://github.com/botpress/{name}",
        "keywords": ["botpress"],
        "license": "AGPL-3.0",
        "category": "utilities",
        "featured": False,
        "popular": True,
        "official": True,
        "author": {"name": "Botpress, Inc.", "email": "hello@botpress.io"},
        "dist-tags": {"latest": "2.1.0"},
        "github": {
            "stargazers_count": 12,
            "forks_count": 3,
            "full_name": f"botpress/{name}",
            "updated_at": "2024-04-01T00:00:00Z",
            "open_issues_count": 1,
        },
        "package": {"botpress": {"menuIcon": "view_module"}},
        "contributors": contributors
        if contributors is not None
        else [
            {
                "login": "alice",
                "html_url": "https://github.com/alice",
                "avatar_url": "https://avatars.example/alice",
                "contributions": 42,
            }
        ],
    }
