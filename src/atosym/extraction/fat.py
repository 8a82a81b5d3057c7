"""Universal (fat) Mach-O containers.

Only the slice table, each slice's architecture and its LC_UUID are read up
front. The full parse of a slice is deferred until it has been selected.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from atosym.errors import ParseError
from atosym.extraction import macho_constants as mc
from atosym.extraction.binary_image import BinaryImage
from atosym.extraction.macho_loader import is_macho, load_macho, read_uuid
from atosym.resolution.arch import macho_arch_name
from atosym.resolution.identifiers import format_optional_uuid


@dataclass(frozen=True)
class FatSlice:
    architecture: str
    uuid: bytes | None
    offset: int
    size: int
    container: memoryview = field(repr=False, compare=False)

    @property
    def data(self) -> memoryview:
        return self.container[self.offset:self.offset + self.size]

    def describe(self) -> str:
        return f"- arch={self.architecture} uuid={format_optional_uuid(self.uuid)}"

    def load(self) -> BinaryImage:
        return load_macho(self.data)


def fat_magic(data: bytes | memoryview) -> int | None:
    if len(data) < 8:
        return None
    magic = struct.unpack_from(">I", data, 0)[0]
    if magic in (mc.FAT_MAGIC, mc.FAT_MAGIC_64):
        return magic
    return None


def is_fat(data: bytes | memoryview) -> bool:
    return fat_magic(data) is not None


def parse_fat(data: memoryview) -> tuple[FatSlice, ...]:
    """Enumerate the slices of a fat container in table order."""
    data = memoryview(data)
    magic = fat_magic(data)
    if magic is None:
        raise ParseError("not a fat Mach-O file")

    nfat_arch = struct.unpack_from(">I", data, 4)[0]
    if nfat_arch > mc.FAT_MAX_ARCHS:
        raise ParseError(f"implausible fat slice count {nfat_arch}")

    is_64 = magic == mc.FAT_MAGIC_64
    entry_size = mc.FAT_ARCH_64_SIZE if is_64 else mc.FAT_ARCH_SIZE
    if 8 + nfat_arch * entry_size > len(data):
        raise ParseError("fat slice table extends past end of file")

    slices: list[FatSlice] = []
    for index in range(nfat_arch):
        cursor = 8 + index * entry_size
        if is_64:
            cputype, cpusubtype, offset, size = struct.unpack_from(">IIQQ", data, cursor)
        else:
            cputype, cpusubtype, offset, size = struct.unpack_from(">IIII", data, cursor)
        if offset + size > len(data):
            raise ParseError(
                f"fat slice {index} (offset {offset}, size {size}) extends past end of file"
            )
        slice_data = data[offset:offset + size]
        uuid = read_uuid(slice_data) if is_macho(slice_data) else None
        slices.append(
            FatSlice(
                architecture=macho_arch_name(cputype, cpusubtype),
                uuid=uuid,
                offset=offset,
                size=size,
                container=data,
            )
        )
    return tuple(slices)
