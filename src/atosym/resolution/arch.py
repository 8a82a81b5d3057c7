"""Architecture tokens: naming from headers, normalization, alias-aware matching."""

from __future__ import annotations

from atosym.extraction import macho_constants as mc

# Each group is one architecture under several spellings (already normalized).
_ALIAS_GROUPS: tuple[frozenset[str], ...] = (
    frozenset({"arm64", "aarch64"}),
    frozenset({"x8664", "amd64", "x64"}),
    frozenset({"i386", "x86"}),
)

_ARM_SUBTYPES = {
    mc.CPU_SUBTYPE_ARM_V7: "armv7",
    mc.CPU_SUBTYPE_ARM_V7F: "armv7f",
    mc.CPU_SUBTYPE_ARM_V7S: "armv7s",
    mc.CPU_SUBTYPE_ARM_V7K: "armv7k",
    mc.CPU_SUBTYPE_ARM_V8: "armv8",
}

_ELF_MACHINES = {
    "EM_X86_64": "x86_64",
    "EM_386": "i386",
    "EM_AARCH64": "arm64",
    "EM_ARM": "arm",
}


def normalize_arch(value: str) -> str:
    """Lowercase and drop everything that is not ASCII alphanumeric."""
    return "".join(c for c in value if c.isascii() and c.isalnum()).lower()


def arch_matches(actual: str, requested: str) -> bool:
    """True when two architecture tokens name the same architecture.

    Symmetric. ``arm64e`` is its own architecture and never matches ``arm64``.
    """
    a = normalize_arch(actual)
    b = normalize_arch(requested)
    if not a or not b:
        return False
    if a == b:
        return True
    return any(a in group and b in group for group in _ALIAS_GROUPS)


def macho_arch_name(cputype: int, cpusubtype: int) -> str:
    subtype = cpusubtype & ~mc.CPU_SUBTYPE_MASK & 0xFFFFFFFF
    if cputype == mc.CPU_TYPE_ARM64:
        return "arm64e" if subtype == mc.CPU_SUBTYPE_ARM64E else "arm64"
    if cputype == mc.CPU_TYPE_ARM64_32:
        return "arm64_32"
    if cputype == mc.CPU_TYPE_ARM:
        return _ARM_SUBTYPES.get(subtype, "arm")
    if cputype == mc.CPU_TYPE_X86_64:
        return "x86_64h" if subtype == mc.CPU_SUBTYPE_X86_64_H else "x86_64"
    if cputype == mc.CPU_TYPE_X86:
        return "i386"
    return f"cputype{cputype}_subtype{subtype}"


def elf_arch_name(machine: str | int) -> str:
    if isinstance(machine, int):
        return f"em{machine}"
    if machine in _ELF_MACHINES:
        return _ELF_MACHINES[machine]
    return machine.lower().removeprefix("em_")
