"""atosym — atos-style address symbolication for Mach-O and ELF images."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from atosym.version import __version__

if TYPE_CHECKING:
    from atosym.config.models import AtosConfig


@dataclass
class AtosContext:
    """Per-invocation CLI state: the loaded configuration and global flags."""

    config: AtosConfig | None = None
    verbose: bool = False

    def ensure_config(self) -> AtosConfig:
        if self.config is None:
            from atosym.config.loader import load_config

            self.config = load_config()
        return self.config


__all__ = ["AtosContext", "__version__"]
