"""botmodules CLI.

Inspect and load the extensions of a bot project.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import typer

from cli.botmodules.output import (
    print_descriptors,
    print_error,
    print_info,
    print_loaded,
    print_success,
)

app = typer.Typer(
    name="botmodules",
    help="botmodules - discover, load and browse bot extensions",
    no_args_is_help=True,
)

# Register sub-apps
from cli.commands.community import community_app

app.add_typer(community_app, name="community")


@dataclass
class CliHost:
    """Minimal host handed to extension init hooks when loading from the CLI."""

    botfile: dict[str, Any] = field(default_factory=dict)


def get_manager(project: Optional[Path] = None):
    """Build a module manager from configuration."""
    from botmodules.config import get_config
    from botmodules.manager import ModuleManager
    from botmodules.registry import ExtensionRegistry

    config = get_config()
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )

    project_location = project or Path(config.modules.project_location)
    if not project_location.exists():
        print_error(f"Project path does not exist: {project_location}")
        raise typer.Exit(1)

    registry = ExtensionRegistry()
    registry.register_entry_points()

    return ModuleManager(
        project_location,
        Path(config.modules.data_location),
        config=config,
        registry=registry,
    )


@app.command()
def scan(
    project: Optional[Path] = typer.Option(
        None,
        "--project",
        "-p",
        help="Bot project path (default: from config)",
    ),
) -> None:
    """List the extensions a project declares and has installed.

    Example:
        botmodules scan --project ./my-bot
    """
    manager = get_manager(project)
    print_descriptors(manager._scan())


@app.command()
def load(
    project: Optional[Path] = typer.Option(
        None,
        "--project",
        "-p",
        help="Bot project path (default: from config)",
    ),
) -> None:
    """Scan, load and initialize a project's extensions.

    Example:
        botmodules load --project ./my-bot
    """
    manager = get_manager(project)
    descriptors = manager._scan()
    loaded = asyncio.run(manager._load(descriptors, CliHost()))
    print_loaded(loaded)

    if loaded:
        print_success(f"Loaded {len(loaded)} of {len(descriptors)} extensions")


@app.command()
def installed(
    project: Optional[Path] = typer.Option(
        None,
        "--project",
        "-p",
        help="Bot project path (default: from config)",
    ),
) -> None:
    """List extension packages among the project's dependencies.

    Example:
        botmodules installed
    """
    manager = get_manager(project)
    names = manager.list_installed()

    if not names:
        print_info("No extensions installed.")
        return

    for name in names:
        typer.echo(name)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
