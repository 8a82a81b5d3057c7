"""Default configuration values and paths."""

from __future__ import annotations

from pathlib import Path

CONFIG_FILE_NAMES = [
    "atosym.yaml",
    "atosym.yml",
    ".atosym.yaml",
    ".atosym.yml",
]

CONFIG_SEARCH_PATHS = [
    Path.cwd(),
    Path.home() / ".config" / "atosym",
    Path.home(),
]

DEFAULT_ADDRESS_MODE = "virtual"
DEFAULT_LOG_LEVEL = "WARNING"
