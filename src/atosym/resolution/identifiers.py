"""Parse and render 128-bit image identifiers (Mach-O LC_UUID)."""

from __future__ import annotations

import string

from atosym.errors import InvalidIdentifier

_HEX_DIGITS = frozenset(string.hexdigits)


def parse_uuid(value: str) -> bytes:
    """Parse 32 hex digits, with or without ``-`` separators, into 16 bytes."""
    digits = value.replace("-", "")
    if len(digits) != 32 or not all(c in _HEX_DIGITS for c in digits):
        raise InvalidIdentifier(
            f"invalid uuid format: '{value}', expected 32 hex chars (with or without '-')"
        )
    return bytes.fromhex(digits)


def format_uuid(raw: bytes) -> str:
    """Render 16 bytes as uppercase ``8-4-4-4-12`` hex."""
    h = raw.hex().upper()
    return f"{h[0:8]}-{h[8:12]}-{h[12:16]}-{h[16:20]}-{h[20:32]}"


def format_optional_uuid(raw: bytes | None) -> str:
    return format_uuid(raw) if raw is not None else "-"
