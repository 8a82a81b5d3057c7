"""ELF reader using pyelftools."""

from __future__ import annotations

import io

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile
from elftools.elf.sections import SymbolTableSection

from atosym.errors import ParseError
from atosym.extraction.binary_image import BinaryImage, Section, Segment, Symbol
from atosym.resolution.arch import elf_arch_name
from atosym.utils.logging import get_logger

log = get_logger(__name__)

ELF_MAGIC = b"\x7fELF"

_SKIPPED_SYMBOL_TYPES = ("STT_SECTION", "STT_FILE")


def is_elf(data: bytes | memoryview) -> bool:
    return bytes(data[:4]) == ELF_MAGIC


def open_elf(data: memoryview) -> ELFFile:
    """Open *data* as an ELFFile over an in-memory stream."""
    try:
        return ELFFile(io.BytesIO(bytes(data)))
    except ELFError as exc:
        raise ParseError(f"malformed ELF file: {exc}") from exc


def _get_sections(elf: ELFFile) -> list[Section]:
    sections: list[Section] = []
    for section in elf.iter_sections():
        if not section.name:
            continue
        sections.append(
            Section(
                name=section.name,
                segment="",
                address=section["sh_addr"],
                size=section["sh_size"],
                offset=section["sh_offset"],
                compressed=section.compressed or section.name.startswith(".zdebug_"),
            )
        )
    return sections


def _get_segments(elf: ELFFile) -> list[Segment]:
    # Program headers carry no names
    return [
        Segment(
            name="",
            vmaddr=segment["p_vaddr"],
            vmsize=segment["p_memsz"],
            fileoff=segment["p_offset"],
            filesize=segment["p_filesz"],
        )
        for segment in elf.iter_segments()
        if segment["p_type"] == "PT_LOAD"
    ]


def _get_symbols(elf: ELFFile) -> list[Symbol]:
    """Defined symbols from .symtab, or .dynsym for stripped files."""
    table = elf.get_section_by_name(".symtab")
    if not isinstance(table, SymbolTableSection):
        table = elf.get_section_by_name(".dynsym")
    if not isinstance(table, SymbolTableSection):
        return []

    symbols: list[Symbol] = []
    for sym in table.iter_symbols():
        if not sym.name:
            continue
        if sym.entry.st_shndx == "SHN_UNDEF":
            continue
        if sym.entry.st_info.type in _SKIPPED_SYMBOL_TYPES:
            continue
        symbols.append(Symbol(name=sym.name, address=sym.entry.st_value))
    return symbols


def load_elf(data: memoryview) -> BinaryImage:
    """Parse an ELF image from *data*."""
    data = memoryview(data)
    elf = open_elf(data)
    try:
        architecture = elf_arch_name(elf.header.e_machine)
        sections = _get_sections(elf)
        segments = _get_segments(elf)
        symbols = _get_symbols(elf)
    except ELFError as exc:
        raise ParseError(f"malformed ELF file: {exc}") from exc

    log.debug(
        "elf_loaded",
        arch=architecture,
        sections=len(sections),
        symbols=len(symbols),
    )

    return BinaryImage(
        data=data,
        file_format="elf",
        architecture=architecture,
        uuid=None,
        little_endian=elf.little_endian,
        address_size=elf.elfclass // 8,
        segments=tuple(segments),
        sections=tuple(sections),
        symbols=tuple(symbols),
    )
