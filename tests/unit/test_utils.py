"""Tests for file mapping and logging setup."""

import io
import json
import logging
from pathlib import Path

import pytest

from atosym.utils.logging import bound_image, get_logger, setup_logging
from atosym.utils.mapping import open_and_map


def test_open_and_map_reads_file(tmp_path: Path):
    path = tmp_path / "blob"
    path.write_bytes(b"\xcf\xfa\xed\xfe" + b"\x00" * 28)
    with open_and_map(path) as data:
        assert len(data) == 32
        assert data[:4] == b"\xcf\xfa\xed\xfe"


def test_open_and_map_empty_file(tmp_path: Path):
    path = tmp_path / "empty"
    path.write_bytes(b"")
    with open_and_map(path) as data:
        assert data == b""


def test_open_and_map_missing_file(tmp_path: Path):
    with pytest.raises(OSError):
        with open_and_map(tmp_path / "missing"):
            pass


def test_setup_logging_sets_root_level():
    setup_logging(level="DEBUG")
    assert logging.getLogger().level == logging.DEBUG
    setup_logging()
    assert logging.getLogger().level == logging.WARNING


def test_json_events_carry_bound_image():
    stream = io.StringIO()
    setup_logging(level="INFO", json_output=True, stream=stream)
    with bound_image("App"):
        get_logger("atosym.tests.json").info("selected_slice", slice="- arch=arm64 uuid=-")
    event = json.loads(stream.getvalue().splitlines()[-1])
    assert event["event"] == "selected_slice"
    assert event["image"] == "App"
    assert "timestamp" in event
    setup_logging()
