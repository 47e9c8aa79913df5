"""Display projections of catalog entries."""

from __future__ import annotations

import random
from dataclasses import asdict, dataclass
from typing import Any, Callable, Mapping


@dataclass(frozen=True)
class DisplayModule:
    """A catalog entry shaped for the modules UI."""

    name: str | None
    stars: int | None
    forks: int | None
    doc_link: str | None
    version: str | None
    keywords: list[str] | None
    full_name: str | None
    updated: str | None
    issues: int | None
    icon: str | None
    description: str | None
    installed: bool
    license: str | None
    author: Any
    title: str | None
    category: str | None
    featured: bool | None
    popular: bool | None
    official: bool | None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the keys the UI expects."""
        data = asdict(self)
        data["docLink"] = data.pop("doc_link")
        data["fullName"] = data.pop("full_name")
        return data


@dataclass(frozen=True)
class ContributorInfo:
    """A community contributor to feature."""

    username: str
    github: str
    avatar: str
    contributions: Any
    module: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _dig(data: Any, *keys: str) -> Any:
    """Follow nested mapping keys, returning None at the first gap."""
    for key in keys:
        if not isinstance(data, Mapping):
            return None
        data = data.get(key)
    return data


def _author_name(author: Any) -> Any:
    if isinstance(author, Mapping) and author.get("name"):
        return author["name"]
    return author


def to_display_module(entry: Mapping[str, Any], installed: set[str]) -> DisplayModule:
    """Project one raw catalog entry."""
    name = entry.get("name")
    return DisplayModule(
        name=name,
        stars=_dig(entry, "github", "stargazers_count"),
        forks=_dig(entry, "github", "forks_count"),
        doc_link=entry.get("homepage"),
        version=_dig(entry, "dist-tags", "latest"),
        keywords=entry.get("keywords"),
        full_name=_dig(entry, "github", "full_name"),
        updated=_dig(entry, "github", "updated_at"),
        issues=_dig(entry, "github", "open_issues_count"),
        icon=_dig(entry, "package", "botpress", "menuIcon"),
        description=entry.get("description"),
        installed=name in installed,
        license=entry.get("license"),
        author=_author_name(entry.get("author")),
        title=entry.get("title"),
        category=entry.get("category"),
        featured=entry.get("featured"),
        popular=entry.get("popular"),
        official=entry.get("official"),
    )


class PresentationMapper:
    """Turn raw catalog entries into display modules.

    ``list_installed`` is called once per mapping to flag the entries the
    host project already depends on.
    """

    def __init__(self, list_installed: Callable[[], list[str]]) -> None:
        self.list_installed = list_installed

    def map_for_display(self, raw_modules: list[Any]) -> list[DisplayModule]:
        installed = set(self.list_installed())
        return [
            to_display_module(entry, installed)
            for entry in raw_modules
            if isinstance(entry, Mapping)
        ]


def pick_contributor(
    modules: list[Any],
    fallback: ContributorInfo,
    rng: random.Random | None = None,
) -> ContributorInfo:
    """Sample a module, then one of its contributors, uniformly.

    Only modules listing at least one contributor are sampled. Returns
    ``fallback`` when there is none.
    """
    rng = rng or random.Random()

    candidates = [
        module
        for module in modules
        if isinstance(_dig(module, "contributors"), list) and _dig(module, "contributors")
    ]
    if not candidates:
        return fallback

    module = rng.choice(candidates)
    hero = rng.choice(module["contributors"])
    return ContributorInfo(
        username=_dig(hero, "login"),
        github=_dig(hero, "html_url"),
        avatar=_dig(hero, "avatar_url"),
        contributions=_dig(hero, "contributions"),
        module=_dig(module, "name"),
    )
