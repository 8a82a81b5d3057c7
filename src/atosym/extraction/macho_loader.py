"""Thin Mach-O reader: header, segments, sections, LC_UUID and LC_SYMTAB."""

from __future__ import annotations

import struct
from collections.abc import Iterator

from atosym.errors import ParseError
from atosym.extraction import macho_constants as mc
from atosym.extraction.binary_image import BinaryImage, Section, Segment, Symbol
from atosym.resolution.arch import macho_arch_name
from atosym.utils.logging import get_logger

log = get_logger(__name__)


def is_macho(data: bytes | memoryview) -> bool:
    if len(data) < 4:
        return False
    magic = struct.unpack_from("<I", data, 0)[0]
    return magic in (mc.MH_MAGIC, mc.MH_CIGAM, mc.MH_MAGIC_64, mc.MH_CIGAM_64)


def _header(data: memoryview) -> tuple[str, bool, int, int, int, int]:
    """Return (byte order prefix, is_64, cputype, cpusubtype, ncmds, first command offset)."""
    if len(data) < mc.MACH_HEADER_SIZE:
        raise ParseError("truncated Mach-O header")
    magic = struct.unpack_from("<I", data, 0)[0]
    if magic in (mc.MH_MAGIC, mc.MH_MAGIC_64):
        order = "<"
    elif magic in (mc.MH_CIGAM, mc.MH_CIGAM_64):
        order = ">"
    else:
        raise ParseError(f"not a Mach-O file (magic 0x{magic:08x})")
    is_64 = magic in (mc.MH_MAGIC_64, mc.MH_CIGAM_64)
    cputype, cpusubtype, _filetype, ncmds = struct.unpack_from(order + "iIII", data, 4)
    start = mc.MACH_HEADER_64_SIZE if is_64 else mc.MACH_HEADER_SIZE
    return order, is_64, cputype & 0xFFFFFFFF, cpusubtype, ncmds, start


def _iter_load_commands(data: memoryview, order: str, ncmds: int, offset: int) -> Iterator[tuple[int, int]]:
    """Yield (cmd, offset) for every load command."""
    for _ in range(ncmds):
        if offset + 8 > len(data):
            raise ParseError("load command extends past end of file")
        cmd, cmdsize = struct.unpack_from(order + "II", data, offset)
        if cmdsize < 8:
            raise ParseError(f"invalid load command size {cmdsize}")
        yield cmd, offset
        offset += cmdsize


def _cstring(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


def _read_uuid(data: memoryview, offset: int) -> bytes:
    if offset + 24 > len(data):
        raise ParseError("truncated LC_UUID")
    return bytes(data[offset + 8:offset + 24])


def read_uuid(data: memoryview) -> bytes | None:
    """Read only the LC_UUID of a Mach-O image (no segment/symbol work)."""
    try:
        order, _is_64, _cpu, _sub, ncmds, start = _header(data)
        for cmd, offset in _iter_load_commands(data, order, ncmds, start):
            if cmd == mc.LC_UUID:
                return _read_uuid(data, offset)
    except struct.error as exc:
        raise ParseError(f"malformed Mach-O load commands: {exc}") from exc
    return None


def _read_segment(
    data: memoryview, order: str, offset: int, is_64: bool
) -> tuple[Segment, list[Section]]:
    if is_64:
        segname, vmaddr, vmsize, fileoff, filesize, _maxprot, _initprot, nsects, _flags = (
            struct.unpack_from(order + "16sQQQQiiII", data, offset + 8)
        )
        cursor = offset + mc.SEGMENT_COMMAND_64_SIZE
    else:
        segname, vmaddr, vmsize, fileoff, filesize, _maxprot, _initprot, nsects, _flags = (
            struct.unpack_from(order + "16sIIIIiiII", data, offset + 8)
        )
        cursor = offset + mc.SEGMENT_COMMAND_SIZE

    segment = Segment(
        name=_cstring(segname),
        vmaddr=vmaddr,
        vmsize=vmsize,
        fileoff=fileoff,
        filesize=filesize,
    )

    sections: list[Section] = []
    for _ in range(nsects):
        if is_64:
            sectname, sect_segname, addr, size, sect_offset = struct.unpack_from(
                order + "16s16sQQI", data, cursor
            )
            cursor += mc.SECTION_64_SIZE
        else:
            sectname, sect_segname, addr, size, sect_offset = struct.unpack_from(
                order + "16s16sIII", data, cursor
            )
            cursor += mc.SECTION_SIZE
        name = _cstring(sectname)
        compressed = name.startswith("__zdebug_")
        if compressed:
            name = "__debug_" + name[len("__zdebug_"):]
        sections.append(
            Section(
                name=name,
                segment=_cstring(sect_segname),
                address=addr,
                size=size,
                offset=sect_offset,
                compressed=compressed,
            )
        )
    return segment, sections


def _read_symbols(
    data: memoryview, order: str, offset: int, is_64: bool
) -> list[Symbol]:
    symoff, nsyms, stroff, strsize = struct.unpack_from(order + "IIII", data, offset + 8)
    if stroff + strsize > len(data):
        raise ParseError("string table extends past end of file")
    strtab = bytes(data[stroff:stroff + strsize])

    entry_size = mc.NLIST_64_SIZE if is_64 else mc.NLIST_SIZE
    entry_fmt = order + ("IBBHQ" if is_64 else "IBBHI")
    if symoff + nsyms * entry_size > len(data):
        raise ParseError("symbol table extends past end of file")

    symbols: list[Symbol] = []
    for index in range(nsyms):
        n_strx, n_type, _n_sect, _n_desc, n_value = struct.unpack_from(
            entry_fmt, data, symoff + index * entry_size
        )
        if n_type & mc.N_STAB:
            continue
        if n_type & mc.N_TYPE != mc.N_SECT:
            continue
        if n_strx >= len(strtab):
            continue
        name = _cstring(strtab[n_strx:])
        if not name:
            continue
        symbols.append(Symbol(name=name, address=n_value))
    return symbols


def load_macho(data: memoryview) -> BinaryImage:
    """Parse a thin Mach-O image from *data*."""
    data = memoryview(data)
    segments: list[Segment] = []
    sections: list[Section] = []
    symbols: list[Symbol] = []
    uuid: bytes | None = None

    try:
        order, is_64, cputype, cpusubtype, ncmds, start = _header(data)
        for cmd, offset in _iter_load_commands(data, order, ncmds, start):
            if cmd in (mc.LC_SEGMENT, mc.LC_SEGMENT_64):
                segment, segment_sections = _read_segment(
                    data, order, offset, cmd == mc.LC_SEGMENT_64
                )
                segments.append(segment)
                sections.extend(segment_sections)
            elif cmd == mc.LC_SYMTAB:
                symbols.extend(_read_symbols(data, order, offset, is_64))
            elif cmd == mc.LC_UUID:
                uuid = _read_uuid(data, offset)
    except struct.error as exc:
        raise ParseError(f"malformed Mach-O load commands: {exc}") from exc

    architecture = macho_arch_name(cputype, cpusubtype)
    log.debug(
        "macho_loaded",
        arch=architecture,
        segments=len(segments),
        sections=len(sections),
        symbols=len(symbols),
    )

    return BinaryImage(
        data=data,
        file_format="macho",
        architecture=architecture,
        uuid=uuid,
        little_endian=order == "<",
        address_size=8 if is_64 else 4,
        segments=tuple(segments),
        sections=tuple(sections),
        symbols=tuple(symbols),
    )
