"""Per-address resolution outcomes and their text rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ResolvedSymbol:
    display_name: str
    image_name: str
    offset: int

    def render(self) -> str:
        return f"{self.display_name} (in {self.image_name}) + {self.offset}"


@dataclass(frozen=True)
class ResolvedLine:
    display_name: str
    image_name: str
    source_file: str
    line: int

    def render(self) -> str:
        return f"{self.display_name} (in {self.image_name}) ({self.source_file}:{self.line})"


@dataclass(frozen=True)
class Unresolved:
    reason: str

    def render(self) -> str:
        return f"N/A - {self.reason}"


ResolutionOutcome = Union[ResolvedLine, ResolvedSymbol, Unresolved]
