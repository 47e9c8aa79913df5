"""Helper utilities handed to extension ``init`` hooks.

The same bundle is used internally for JSON file access.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import SimpleNamespace
from typing import Any

from botmodules.manifest import is_extension_package


def read_json(path: Path | str) -> Any:
    """Read and parse a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path | str, data: Any) -> None:
    """Serialize ``data`` to a JSON file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def get_logger(module_name: str) -> logging.Logger:
    """Logger namespaced under the module system for an extension."""
    return logging.getLogger(f"botmodules.ext.{module_name}")


helpers = SimpleNamespace(
    read_json=read_json,
    write_json=write_json,
    get_logger=get_logger,
    is_extension_package=is_extension_package,
)
