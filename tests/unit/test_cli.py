"""Tests for CLI commands and flags."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from atosym import __version__
from atosym.cli.app import app
from images import MachOLayout, build_macho

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_config_files(tmp_path: Path, monkeypatch):
    """Keep the developer's own atosym.yaml out of the search path."""
    empty = tmp_path / "config-search"
    empty.mkdir()
    monkeypatch.setattr("atosym.config.loader.CONFIG_SEARCH_PATHS", [empty])
    monkeypatch.chdir(empty)


@pytest.fixture
def app_file(tmp_path: Path, symtab_image) -> Path:
    path = tmp_path / "App"
    path.write_bytes(symtab_image)
    return path


@pytest.fixture
def fat_file(tmp_path: Path, fat_image) -> Path:
    path = tmp_path / "Universal"
    path.write_bytes(fat_image)
    return path


def test_version_flag():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"atosym {__version__}" in result.output


def test_help_shows_all_commands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for cmd in ["symbolicate", "slices"]:
        assert cmd in result.output


def test_symbolicate_help():
    result = runner.invoke(app, ["symbolicate", "--help"])
    assert result.exit_code == 0
    for flag in ["--object", "--load-address", "--arch", "--uuid", "--file-offset"]:
        assert flag in result.output


@pytest.mark.integration
def test_symbolicate_prints_one_line_per_address(app_file):
    result = runner.invoke(
        app,
        ["symbolicate", "-o", str(app_file), "-l", "0x104000000", "0x104001010", "0x103000000"],
    )
    assert result.exit_code == 0
    assert result.stdout.splitlines() == [
        "_main (in App) + 16",
        "N/A - address is smaller than load address",
    ]


@pytest.mark.integration
def test_symbolicate_file_offset(tmp_path: Path):
    path = tmp_path / "App"
    path.write_bytes(build_macho(MachOLayout(symbols=[("_main", 0x1000)])))
    result = runner.invoke(app, ["symbolicate", "-o", str(path), "-l", "4096", "-f", "8208"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "_main (in App) + 16"


@pytest.mark.integration
def test_symbolicate_fat_requires_selection(fat_file):
    result = runner.invoke(app, ["symbolicate", "-o", str(fat_file), "-l", "0x0", "0x1000"])
    assert result.exit_code == 1
    assert "Error: fat Mach-O contains multiple slices." in result.output
    assert "Use -a/--arch or --uuid to select one." in result.output
    assert "- arch=arm64 uuid=29118F18-9DFC-36A8-9028-A19B13996D5E" in result.output
    assert "- arch=x86_64 uuid=01234567-89AB-CDEF-0123-456789ABCDEF" in result.output


@pytest.mark.integration
def test_symbolicate_fat_no_match_lists_candidates(fat_file):
    result = runner.invoke(
        app, ["symbolicate", "-o", str(fat_file), "-l", "0x0", "-a", "arm64e", "0x1000"]
    )
    assert result.exit_code == 1
    assert "no fat Mach-O slice matched arch=arm64e uuid=-" in result.output
    assert "- arch=arm64 uuid=" in result.output
    assert "- arch=x86_64 uuid=" in result.output


@pytest.mark.integration
def test_symbolicate_fat_with_arch(fat_file):
    result = runner.invoke(
        app,
        ["symbolicate", "-o", str(fat_file), "-l", "0x104000000", "-a", "aarch64", "0x104001004"],
    )
    assert result.exit_code == 0
    assert result.stdout.strip() == "_main (in Universal) + 4"


@pytest.mark.integration
def test_config_file_supplies_arch(tmp_path: Path, fat_file):
    config = tmp_path / "atosym.yaml"
    config.write_text("resolution:\n  architecture: x86_64\n")
    result = runner.invoke(
        app,
        ["-C", str(config), "symbolicate", "-o", str(fat_file), "-l", "0x104000000", "0x104000f08"],
    )
    assert result.exit_code == 0
    assert result.stdout.strip() == "_start (in Universal) + 8"


@pytest.mark.integration
def test_symbolicate_invalid_uuid(app_file):
    result = runner.invoke(
        app, ["symbolicate", "-o", str(app_file), "-l", "0x0", "--uuid", "xyz", "0x1000"]
    )
    assert result.exit_code == 1
    assert "invalid uuid format: 'xyz'" in result.output


@pytest.mark.integration
def test_symbolicate_invalid_address(app_file):
    result = runner.invoke(app, ["symbolicate", "-o", str(app_file), "-l", "0x0", "banana"])
    assert result.exit_code == 1
    assert "invalid address: 'banana'" in result.output


@pytest.mark.integration
def test_symbolicate_missing_file(tmp_path: Path):
    result = runner.invoke(
        app, ["symbolicate", "-o", str(tmp_path / "nope"), "-l", "0x0", "0x1000"]
    )
    assert result.exit_code == 1
    assert "No such file or directory" in result.output
    assert "nope" in result.output
    assert "Traceback" not in result.output


@pytest.mark.integration
def test_slices_lists_every_slice(fat_file):
    result = runner.invoke(app, ["slices", str(fat_file)])
    assert result.exit_code == 0
    assert "arm64" in result.stdout
    assert "x86_64" in result.stdout


@pytest.mark.integration
def test_default_invocation_without_config_or_flags(app_file):
    result = runner.invoke(
        app, ["symbolicate", "-o", str(app_file), "-l", "0x104000000", "0x104001010"]
    )
    assert result.exit_code == 0
    assert result.stdout == "_main (in App) + 16\n"


@pytest.mark.integration
def test_verbose_keeps_outcome_lines(app_file):
    result = runner.invoke(
        app, ["-v", "--json-logs", "symbolicate", "-o", str(app_file), "-l", "0x104000000", "0x104001010"]
    )
    assert result.exit_code == 0
    assert "_main (in App) + 16" in result.output
