"""CLI command modules for botmodules."""

from cli.commands.community import community_app

__all__ = ["community_app"]
