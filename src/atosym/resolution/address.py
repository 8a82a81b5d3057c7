"""Map runtime addresses into the address space an image is searched in."""

from __future__ import annotations

from enum import Enum

from atosym.errors import InvalidAddress

ADDRESS_MAX = (1 << 64) - 1


class AddressMode(str, Enum):
    VIRTUAL = "virtual"
    FILE_OFFSET = "file_offset"


def parse_address(value: str) -> int:
    """Parse ``0x``-prefixed hex or plain decimal into a 64-bit address."""
    text = value.strip()
    try:
        if text.lower().startswith("0x"):
            address = int(text[2:], 16)
        else:
            address = int(text, 10)
    except ValueError:
        raise InvalidAddress(f"invalid address: '{value}'") from None
    if address < 0 or address > ADDRESS_MAX:
        raise InvalidAddress(f"address out of 64-bit range: '{value}'")
    return address


def to_search_address(
    query_address: int,
    load_address: int,
    code_segment_base: int,
    mode: AddressMode = AddressMode.VIRTUAL,
) -> int:
    """Translate *query_address* for a binary loaded at *load_address*.

    ``virtual``: ``query - load + code_segment_base`` (link-time address).
    ``file_offset``: ``query - load``.
    """
    if query_address < load_address:
        raise InvalidAddress("address is smaller than load address")
    base = query_address - load_address
    if mode is AddressMode.FILE_OFFSET:
        return base
    search = base + code_segment_base
    if search > ADDRESS_MAX:
        raise InvalidAddress("address overflow while applying __TEXT vmaddr")
    return search
