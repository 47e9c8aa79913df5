"""botmodules CLI.

Command-line interface for the bot module system.
"""

__version__ = "0.1.0"

from cli.botmodules.cli import app, main

__all__ = ["__version__", "app", "main"]
