"""Tests for the ELF reader."""

import pytest

from atosym.errors import ParseError
from atosym.extraction.elf_loader import is_elf, load_elf
from atosym.resolution.batch import is_rich
from images import EM_AARCH64, build_elf


def test_load_elf_symbols():
    image = load_elf(memoryview(build_elf([("main", 0x401000), ("helper", 0x401008)])))
    assert image.file_format == "elf"
    assert image.architecture == "x86_64"
    assert image.uuid is None
    assert image.address_size == 8
    assert image.text_vmaddr == 0
    assert [s.name for s in image.symbols] == ["main", "helper"]
    assert image.has_section(".text")
    assert not is_rich(image)


def test_elf_machine_name():
    image = load_elf(memoryview(build_elf([], machine=EM_AARCH64)))
    assert image.architecture == "arm64"


def test_is_elf():
    assert is_elf(build_elf([]))
    assert not is_elf(b"\xcf\xfa\xed\xfe")


def test_malformed_elf_raises_parse_error():
    with pytest.raises(ParseError, match="malformed ELF"):
        load_elf(memoryview(b"\x7fELF\x09" + b"\x00" * 64))
