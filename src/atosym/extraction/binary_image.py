"""Frozen dataclasses describing a parsed object file."""

from __future__ import annotations

import zlib
from dataclasses import dataclass, field
from functools import cached_property


@dataclass(frozen=True)
class Segment:
    name: str
    vmaddr: int
    vmsize: int
    fileoff: int = 0
    filesize: int = 0


@dataclass(frozen=True)
class Section:
    name: str
    segment: str
    address: int
    size: int
    offset: int
    compressed: bool = False


@dataclass(frozen=True)
class Symbol:
    name: str
    address: int


@dataclass(frozen=True)
class BinaryImage:
    """One object image backed by a read-only byte buffer.

    ``data`` is a view into the mapped file (or into the enclosing fat
    container); sections and symbols are offsets into it.
    """

    data: memoryview = field(repr=False)
    file_format: str
    architecture: str
    uuid: bytes | None = None
    little_endian: bool = True
    address_size: int = 8
    segments: tuple[Segment, ...] = ()
    sections: tuple[Section, ...] = ()
    symbols: tuple[Symbol, ...] = field(default=(), repr=False)

    def section_by_name(self, name: str) -> Section | None:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def has_section(self, name: str) -> bool:
        return self.section_by_name(name) is not None

    def section_data(self, section: Section) -> bytes:
        """Return the section contents, inflating ``__zdebug``-style payloads."""
        end = section.offset + section.size
        if section.offset < 0 or end > len(self.data):
            return b""
        raw = bytes(self.data[section.offset:end])
        if not section.compressed:
            return raw
        # "ZLIB" + 8-byte big-endian uncompressed size + zlib stream
        if raw[:4] != b"ZLIB" or len(raw) < 12:
            return raw
        return zlib.decompress(raw[12:])

    @property
    def text_vmaddr(self) -> int:
        for segment in self.segments:
            if segment.name == "__TEXT":
                return segment.vmaddr
        return 0

    @cached_property
    def sorted_symbols(self) -> tuple[Symbol, ...]:
        # sorted() is stable, so equal addresses keep table order
        return tuple(sorted(self.symbols, key=lambda sym: sym.address))

    @cached_property
    def symbol_addresses(self) -> tuple[int, ...]:
        return tuple(sym.address for sym in self.sorted_symbols)
