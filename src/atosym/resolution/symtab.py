"""Nearest-symbol lookup in an image's symbol table."""

from __future__ import annotations

from bisect import bisect_left, bisect_right

from atosym.extraction.binary_image import BinaryImage, Symbol
from atosym.resolution.demangle import demangle
from atosym.resolution.outcome import ResolvedSymbol


def nearest_symbol(image: BinaryImage, search_address: int) -> Symbol | None:
    """Symbol with the greatest address <= *search_address*.

    When several symbols share that address the first one in table order wins.
    """
    addresses = image.symbol_addresses
    index = bisect_right(addresses, search_address) - 1
    if index < 0:
        return None
    index = bisect_left(addresses, addresses[index])
    return image.sorted_symbols[index]


def resolve_symbol(image: BinaryImage, image_name: str, search_address: int) -> ResolvedSymbol | None:
    symbol = nearest_symbol(image, search_address)
    if symbol is None:
        return None
    return ResolvedSymbol(
        display_name=demangle(symbol.name),
        image_name=image_name,
        offset=search_address - symbol.address,
    )
