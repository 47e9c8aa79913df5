"""Community CLI commands.

Browse the community module catalog.
"""

from pathlib import Path
from typing import Optional

import typer

community_app = typer.Typer(
    name="community",
    help="Browse the community module catalog.",
)


def get_manager(project: Optional[Path] = None):
    """Get module manager."""
    from cli.botmodules.cli import get_manager as build_manager

    return build_manager(project)


@community_app.command("list")
def list_modules(
    refresh: bool = typer.Option(
        False,
        "--refresh",
        "-r",
        help="Ignore the cache freshness window and refetch",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print raw JSON",
    ),
    project: Optional[Path] = typer.Option(
        None,
        "--project",
        "-p",
        help="Bot project path (default: from config)",
    ),
) -> None:
    """List community modules.

    Examples:
        botmodules community list
        botmodules community list --refresh --json
    """
    from cli.botmodules.output import print_community_modules, print_json

    manager = get_manager(project)

    if refresh:
        manager.cache.invalidate()

    modules = manager.list_all_community_modules()

    if as_json:
        print_json([module.to_dict() for module in modules])
        return

    print_community_modules(modules)


@community_app.command("hero")
def hero(
    project: Optional[Path] = typer.Option(
        None,
        "--project",
        "-p",
        help="Bot project path (default: from config)",
    ),
) -> None:
    """Feature a random community contributor.

    Example:
        botmodules community hero
    """
    from cli.botmodules.output import print_contributor

    manager = get_manager(project)
    print_contributor(manager.get_random_community_hero())
