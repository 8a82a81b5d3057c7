"""Shared test fixtures: hand-assembled Mach-O, fat and DWARF images."""

from __future__ import annotations

import pytest

from atosym.config.models import AtosConfig, LoggingConfig, ResolutionConfig
from images import (
    CPU_TYPE_ARM64,
    CPU_TYPE_X86_64,
    UUID_ARM64,
    UUID_X86_64,
    DwarfLayout,
    MachOLayout,
    Subprogram,
    build_dwarf,
    build_fat,
    build_macho,
)


@pytest.fixture
def sample_config() -> AtosConfig:
    return AtosConfig(
        resolution=ResolutionConfig(address_mode="file_offset", architecture="arm64"),
        logging=LoggingConfig(level="DEBUG"),
    )


@pytest.fixture
def symtab_image() -> bytes:
    """arm64 executable, symbol table only, __TEXT at 0x100000000."""
    return build_macho(
        MachOLayout(
            uuid=UUID_ARM64,
            symbols=[
                ("_main", 0x100001000),
                ("__ZN3foo3barEv", 0x100001100),
                ("_helper", 0x100002000),
            ],
        )
    )


@pytest.fixture
def dwarf_sections() -> dict[str, bytes]:
    return build_dwarf(
        DwarfLayout(
            subprograms=[
                Subprogram("compute", 0x100001000, 0x100001040),
                Subprogram("finish", 0x100001040, 0x100001060, absolute_high=True),
            ],
            rows=[
                (0x100001000, 1, 10),
                (0x100001010, 1, 12),
                (0x100001040, 2, 30),
                (0x100001050, 2, 0),
                (0x100001058, 2, 34),
            ],
            end_address=0x100001060,
            aranges=[(0x100001000, 0x60)],
        )
    )


@pytest.fixture
def dwarf_image(dwarf_sections) -> bytes:
    """arm64 image with DWARF for [0x100001000, 0x100001060) and symbols beyond it."""
    return build_macho(
        MachOLayout(
            uuid=UUID_ARM64,
            symbols=[("_compute", 0x100001000), ("_helper", 0x100002000)],
            dwarf=dwarf_sections,
        )
    )


@pytest.fixture
def fat_image() -> bytes:
    arm64 = build_macho(MachOLayout(uuid=UUID_ARM64, symbols=[("_main", 0x100001000)]))
    x86_64 = build_macho(
        MachOLayout(cputype=CPU_TYPE_X86_64, cpusubtype=3, uuid=UUID_X86_64, symbols=[("_start", 0x100000f00)])
    )
    return build_fat([(CPU_TYPE_ARM64, 0, arm64), (CPU_TYPE_X86_64, 3, x86_64)])
