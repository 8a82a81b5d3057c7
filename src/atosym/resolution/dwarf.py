"""
Resolve an address to its subprogram name, source file and line through DWARF.

Walk, for one search address:
  1. .debug_aranges: first entry whose [begin, begin+length) holds the address.
  2. The compilation unit at that entry's .debug_info offset.
  3. The first DW_TAG_subprogram in the unit whose [low_pc, high_pc) holds
     the address and that carries a DW_AT_name. high_pc is either an
     address (DW_FORM_addr*) or a size relative to low_pc (constant forms).
  4. The unit's line program, replayed in order (see ``_find_line``).

All three of name, file and line must be found; otherwise the caller falls
back to the symbol table. Mach-O images have their __DWARF sections fed to
pyelftools directly; ELF images go through ELFFile.get_dwarf_info().
"""

from __future__ import annotations

import io
from typing import Optional

from elftools.dwarf.compileunit import CompileUnit
from elftools.dwarf.die import DIE
from elftools.dwarf.dwarfinfo import DebugSectionDescriptor, DwarfConfig, DWARFInfo
from elftools.dwarf.lineprogram import LineProgram

from atosym.errors import ParseError
from atosym.extraction.binary_image import BinaryImage
from atosym.extraction.elf_loader import open_elf
from atosym.resolution.demangle import demangle
from atosym.resolution.outcome import ResolvedLine
from atosym.utils.logging import get_logger

log = get_logger(__name__)

# DWARFInfo keyword -> Mach-O section name (section names are cut at 16 chars)
_MACHO_DWARF_SECTIONS = {
    "debug_info_sec": "__debug_info",
    "debug_aranges_sec": "__debug_aranges",
    "debug_abbrev_sec": "__debug_abbrev",
    "debug_str_sec": "__debug_str",
    "debug_loc_sec": "__debug_loc",
    "debug_ranges_sec": "__debug_ranges",
    "debug_line_sec": "__debug_line",
    "debug_pubtypes_sec": "__debug_pubtypes",
    "debug_pubnames_sec": "__debug_pubnames",
    "debug_addr_sec": "__debug_addr",
    "debug_str_offsets_sec": "__debug_str_offs",
    "debug_line_str_sec": "__debug_line_str",
    "debug_loclists_sec": "__debug_loclists",
    "debug_rnglists_sec": "__debug_rnglists",
}

# Unused by this resolver; pyelftools still expects the keywords
_UNUSED_SECTIONS = (
    "debug_frame_sec",
    "eh_frame_sec",
    "debug_sup_sec",
    "gnu_debugaltlink_sec",
    "debug_types_sec",
)

_ADDRESS_FORMS = frozenset(
    {"DW_FORM_addr", "DW_FORM_addrx", "DW_FORM_addrx1", "DW_FORM_addrx2",
     "DW_FORM_addrx3", "DW_FORM_addrx4"}
)
_CONSTANT_FORMS = frozenset(
    {"DW_FORM_data1", "DW_FORM_data2", "DW_FORM_data4", "DW_FORM_data8",
     "DW_FORM_udata", "DW_FORM_sdata", "DW_FORM_implicit_const"}
)

_MACHINE_ARCH = {
    "x86_64": "x64",
    "x86_64h": "x64",
    "i386": "x86",
    "arm64": "AArch64",
    "arm64e": "AArch64",
}


def _machine_arch(architecture: str) -> str:
    if architecture in _MACHINE_ARCH:
        return _MACHINE_ARCH[architecture]
    if architecture.startswith("arm"):
        return "ARM"
    return architecture


def _macho_dwarf(image: BinaryImage) -> DWARFInfo:
    sections: dict[str, Optional[DebugSectionDescriptor]] = {}
    for keyword, section_name in _MACHO_DWARF_SECTIONS.items():
        section = image.section_by_name(section_name)
        if section is None:
            sections[keyword] = None
            continue
        payload = image.section_data(section)
        sections[keyword] = DebugSectionDescriptor(
            stream=io.BytesIO(payload),
            name=section_name,
            global_offset=section.offset,
            size=len(payload),
            address=section.address,
        )
    for keyword in _UNUSED_SECTIONS:
        sections[keyword] = None

    if sections["debug_info_sec"] is None or sections["debug_abbrev_sec"] is None:
        raise ParseError("image has no __debug_info/__debug_abbrev sections")

    return DWARFInfo(
        config=DwarfConfig(
            little_endian=image.little_endian,
            machine_arch=_machine_arch(image.architecture),
            default_address_size=image.address_size,
        ),
        **sections,
    )


def load_dwarf(image: BinaryImage) -> DWARFInfo:
    """Build a DWARFInfo over *image*'s debug sections."""
    if image.file_format == "elf":
        elf = open_elf(image.data)
        if not elf.has_dwarf_info():
            raise ParseError("ELF image has no DWARF sections")
        return elf.get_dwarf_info()
    return _macho_dwarf(image)


def _find_unit_offset(dwarfinfo: DWARFInfo, search_address: int) -> int | None:
    aranges = dwarfinfo.get_aranges()
    if aranges is None:
        return None
    # entries come back sorted by begin_addr, not in section order
    for entry in aranges.entries:
        if entry.begin_addr <= search_address < entry.begin_addr + entry.length:
            return entry.info_offset
    return None


def _decode(raw: object) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return str(raw)


def _subprogram_range(die: DIE) -> tuple[int, int] | None:
    """[low, high) of a subprogram, or None if it lacks low_pc/high_pc."""
    attrs = die.attributes
    low_attr = attrs.get("DW_AT_low_pc")
    high_attr = attrs.get("DW_AT_high_pc")
    if low_attr is None or high_attr is None:
        return None
    if low_attr.form not in _ADDRESS_FORMS:
        return None
    low = low_attr.value
    if high_attr.form in _ADDRESS_FORMS:
        return low, high_attr.value
    if high_attr.form in _CONSTANT_FORMS:
        return low, low + high_attr.value
    return None


def _find_subprogram_name(cu: CompileUnit, search_address: int) -> str | None:
    for die in cu.iter_DIEs():
        if die.tag != "DW_TAG_subprogram":
            continue
        pc_range = _subprogram_range(die)
        if pc_range is None:
            continue
        low, high = pc_range
        log.debug("subprogram_range", low=hex(low), high=hex(high))
        if low <= search_address < high and "DW_AT_name" in die.attributes:
            return _decode(die.attributes["DW_AT_name"].value)
    return None


def _file_name(lineprog: LineProgram, file_index: int) -> str | None:
    """File table entry name; DWARF < 5 indexes from 1, DWARF 5 from 0."""
    entries = lineprog.header.get("file_entry", [])
    version = lineprog.header.get("version", 4)
    idx = file_index if version >= 5 else file_index - 1
    if idx < 0 or idx >= len(entries):
        return None
    return _decode(entries[idx].name)


def _find_line(lineprog: LineProgram, search_address: int) -> tuple[str | None, int] | None:
    """Replay the line program and return (file, line) for *search_address*.

    The answer is the state accumulated as of the last row before the first
    row (normal or end_sequence) whose address exceeds the search address.
    A zero line does not count as an answer and scanning continues. The
    accumulated state carries across end_sequence rows, so an address in
    the gap before the next sequence maps to the previous sequence's last row.
    """
    last: tuple[str | None, int] | None = None
    for entry in lineprog.get_entries():
        state = entry.state
        if state is None:
            continue
        if search_address < state.address and last is not None and last[1] > 0:
            return last
        if state.end_sequence:
            continue
        last = (_file_name(lineprog, state.file), state.line or 0)
    return None


def resolve_line(
    dwarfinfo: DWARFInfo,
    image_name: str,
    search_address: int,
) -> ResolvedLine | None:
    """Resolve *search_address* through DWARF, or None if anything is missing."""
    unit_offset = _find_unit_offset(dwarfinfo, search_address)
    if unit_offset is None:
        log.debug("arange_not_found", address=hex(search_address))
        return None
    log.debug("debug_info_header", offset=hex(unit_offset))

    cu = dwarfinfo.get_CU_at(unit_offset)
    name = _find_subprogram_name(cu, search_address)
    log.debug("found_symbol_name", name=name)

    found = None
    lineprog = dwarfinfo.line_program_for_CU(cu)
    if lineprog is not None:
        found = _find_line(lineprog, search_address)
    log.debug("found_line", result=found)

    if name is None or found is None:
        return None
    source_file, line = found
    if source_file is None:
        return None
    return ResolvedLine(
        display_name=demangle(name),
        image_name=image_name,
        source_file=source_file,
        line=line,
    )
