"""Tests for the DWARF line resolver."""

import pytest

from atosym.errors import ParseError
from atosym.extraction.macho_loader import load_macho
from atosym.resolution.dwarf import load_dwarf, resolve_line
from images import DwarfLayout, MachOLayout, Subprogram, build_dwarf, build_macho


@pytest.fixture
def dwarfinfo(dwarf_image):
    return load_dwarf(load_macho(memoryview(dwarf_image)))


def test_address_on_row_boundary(dwarfinfo):
    outcome = resolve_line(dwarfinfo, "App", 0x100001000)
    assert outcome.render() == "compute (in App) (main.c:10)"


def test_address_between_rows_takes_previous_row(dwarfinfo):
    outcome = resolve_line(dwarfinfo, "App", 0x100001014)
    assert outcome.display_name == "compute"
    assert outcome.source_file == "main.c"
    assert outcome.line == 12


def test_absolute_high_pc_and_file_switch(dwarfinfo):
    outcome = resolve_line(dwarfinfo, "App", 0x100001044)
    assert outcome.render() == "finish (in App) (util.c:30)"


def test_zero_line_rows_are_skipped(dwarfinfo):
    # the row at 0x100001050 has line 0; scanning continues to the next crossing
    outcome = resolve_line(dwarfinfo, "App", 0x100001052)
    assert outcome.render() == "finish (in App) (util.c:34)"


def test_address_outside_aranges(dwarfinfo):
    assert resolve_line(dwarfinfo, "App", 0x100002008) is None
    assert resolve_line(dwarfinfo, "App", 0x100000FFF) is None


def test_unnamed_range_without_subprogram_fails():
    sections = build_dwarf(
        DwarfLayout(
            subprograms=[Subprogram("only", 0x2000, 0x2010)],
            rows=[(0x1000, 1, 5)],
            end_address=0x1020,
            aranges=[(0x1000, 0x20)],
        )
    )
    dwarfinfo = load_dwarf(load_macho(memoryview(build_macho(MachOLayout(dwarf=sections)))))
    assert resolve_line(dwarfinfo, "App", 0x1004) is None


def test_missing_debug_info_raises():
    image = load_macho(memoryview(build_macho(MachOLayout(dwarf={"__debug_line": b"\x00" * 4}))))
    with pytest.raises(ParseError, match="__debug_info"):
        load_dwarf(image)


def test_gap_between_sequences_keeps_previous_row():
    sections = build_dwarf(
        DwarfLayout(
            subprograms=[Subprogram("stitched", 0x1000, 0x1030)],
            rows=[(0x1000, 1, 5)],
            end_address=0x1010,
            aranges=[(0x1000, 0x30)],
            more_sequences=[([(0x1020, 1, 9)], 0x1030)],
        )
    )
    dwarfinfo = load_dwarf(load_macho(memoryview(build_macho(MachOLayout(dwarf=sections)))))
    assert resolve_line(dwarfinfo, "App", 0x1018).render() == "stitched (in App) (main.c:5)"
    assert resolve_line(dwarfinfo, "App", 0x1024).render() == "stitched (in App) (main.c:9)"
