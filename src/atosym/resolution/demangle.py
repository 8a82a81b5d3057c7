"""Best-effort symbol demangling.

Rust names (v0 ``_R...`` and legacy ``_ZN...17h<hash>E``) go through
rust_demangler, everything else starting with ``_Z`` through
itanium_demangler. Names neither library accepts come back unchanged.
"""

from __future__ import annotations

import re

from itanium_demangler import parse as parse_itanium
from rust_demangler import demangle as demangle_rust

from atosym.utils.logging import get_logger

log = get_logger(__name__)

# Rust legacy mangling ends in a 17-character "h<hash>" path segment
_RUST_LEGACY = re.compile(r"^_ZN.*17h[0-9a-f]{16}E$")
_RUST_HASH = re.compile(r"::h[0-9a-f]{16}$")


def _strip_macho_underscore(name: str) -> str:
    # Mach-O prefixes C symbols with "_", so "_Z..." arrives as "__Z..."
    if name.startswith(("__Z", "__R")):
        return name[1:]
    return name


def _rust(name: str) -> str | None:
    try:
        result = demangle_rust(name)
    except Exception as exc:
        log.debug("rust_demangle_failed", symbol=name, error=str(exc))
        return None
    if not result or result == name:
        return None
    return _RUST_HASH.sub("", result)


def _itanium(name: str) -> str | None:
    try:
        node = parse_itanium(name)
    except Exception as exc:
        log.debug("demangle_failed", symbol=name, error=str(exc))
        return None
    if node is None:
        return None
    return _RUST_HASH.sub("", str(node))


def demangle(raw: str) -> str:
    """Return a display name for *raw*; unrecognized names come back unchanged."""
    name = _strip_macho_underscore(raw)

    if name.startswith("_R"):
        return _rust(name) or raw
    if not name.startswith("_Z"):
        return raw
    if _RUST_LEGACY.match(name):
        demangled = _rust(name)
        if demangled is not None:
            return demangled
    return _itanium(name) or raw
