"""Rich console output utilities for the botmodules CLI."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from botmodules.loader import LoadedExtension
from botmodules.presentation import ContributorInfo, DisplayModule
from botmodules.scanner import CandidateDescriptor

console = Console()
error_console = Console(stderr=True)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]→[/blue] {message}")


def print_json(data: Any) -> None:
    """Print formatted JSON."""
    console.print_json(json.dumps(data, indent=2, default=str))


def print_descriptors(descriptors: list[CandidateDescriptor]) -> None:
    """Print scanned extensions as a table."""
    if not descriptors:
        print_info("No extensions found.")
        return

    table = Table(title="Discovered Extensions")
    table.add_column("Name", style="cyan")
    table.add_column("Version")
    table.add_column("Entry")
    table.add_column("Homepage", style="dim")

    for descriptor in descriptors:
        table.add_row(
            descriptor.name,
            descriptor.version or "-",
            str(descriptor.entry),
            descriptor.homepage or "-",
        )

    console.print(table)


def print_loaded(loaded: dict[str, LoadedExtension]) -> None:
    """Print loaded extensions as a table."""
    if not loaded:
        print_warning("No extensions were loaded.")
        return

    table = Table(title="Loaded Extensions")
    table.add_column("Name", style="cyan")
    table.add_column("Version")
    table.add_column("Configured", justify="center")

    for extension in loaded.values():
        configured = "[green]✓[/green]" if extension.configuration is not None else "[red]✗[/red]"
        table.add_row(extension.name, extension.version or "-", configured)

    console.print(table)


def print_community_modules(modules: list[DisplayModule]) -> None:
    """Print community modules as a table."""
    if not modules:
        print_info("No community modules available.")
        return

    table = Table(title="Community Modules")
    table.add_column("Name", style="cyan")
    table.add_column("Version")
    table.add_column("Stars", justify="right")
    table.add_column("Author")
    table.add_column("Flags", style="yellow")
    table.add_column("Description")

    for module in modules:
        flags = []
        if module.installed:
            flags.append("installed")
        if module.official:
            flags.append("official")
        if module.featured:
            flags.append("featured")
        desc = module.description or ""
        desc = desc[:40] + "..." if len(desc) > 40 else desc

        table.add_row(
            module.name or "-",
            module.version or "-",
            str(module.stars) if module.stars is not None else "-",
            str(module.author) if module.author else "-",
            ", ".join(flags),
            desc,
        )

    console.print(table)


def print_contributor(hero: ContributorInfo) -> None:
    """Print a contributor as a panel."""
    console.print(
        Panel(
            f"[bold]{hero.username}[/bold]\n"
            f"{hero.github}\n\n"
            f"Contributions: {hero.contributions}\n"
            f"Module: [cyan]{hero.module}[/cyan]",
            title="Community Hero",
            border_style="green",
        )
    )
