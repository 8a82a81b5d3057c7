"""Tests for configuration loading."""

import os
import tempfile
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from atosym.config.loader import _interpolate_env, _merge, find_config_file, load_config
from atosym.config.models import AtosConfig, ResolutionConfig
from atosym.resolution.address import AddressMode


def test_default_config():
    config = AtosConfig()
    assert config.resolution.address_mode is AddressMode.VIRTUAL
    assert config.resolution.architecture is None
    assert config.resolution.uuid is None
    assert config.logging.level == "WARNING"
    assert config.logging.json_output is False


def test_sample_config_fixture(sample_config):
    assert sample_config.resolution.address_mode is AddressMode.FILE_OFFSET
    assert sample_config.resolution.architecture == "arm64"


def test_env_interpolation():
    os.environ["TEST_VAR_ATOSYM"] = "hello"
    assert _interpolate_env("${TEST_VAR_ATOSYM}") == "hello"
    del os.environ["TEST_VAR_ATOSYM"]


def test_env_interpolation_default():
    result = _interpolate_env("${NONEXISTENT_VAR_ATOSYM:arm64}")
    assert result == "arm64"


def test_env_interpolation_missing():
    result = _interpolate_env("${NONEXISTENT_VAR_ATOSYM}")
    assert result == ""


def test_load_config_from_file():
    config_data = {
        "resolution": {"address_mode": "file_offset", "uuid": "${NONEXISTENT_VAR_ATOSYM:}"},
        "logging": {"level": "INFO"},
    }
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(config_data, f)
        f.flush()

        config = load_config(f.name)
        assert config.resolution.address_mode is AddressMode.FILE_OFFSET
        # Blank interpolation means "no filter"
        assert config.resolution.uuid is None
        assert config.logging.level == "INFO"
        # Defaults preserved
        assert config.logging.json_output is False

    os.unlink(f.name)


def test_overrides_win_over_file(tmp_path: Path):
    path = tmp_path / "atosym.yaml"
    path.write_text("resolution:\n  architecture: x86_64\nlogging:\n  level: INFO\n")
    config = load_config(path, overrides={"logging": {"level": "DEBUG", "json_output": None}})
    assert config.resolution.architecture == "x86_64"
    assert config.logging.level == "DEBUG"
    assert config.logging.json_output is False


def test_load_config_missing_file():
    config = load_config("/nonexistent/path.yaml")
    assert config == AtosConfig()


def test_find_config_file_explicit(tmp_path: Path):
    path = tmp_path / "custom.yml"
    path.write_text("{}\n")
    assert find_config_file(path) == path
    assert find_config_file(tmp_path / "missing.yml") is None


def test_merge_is_recursive():
    merged = _merge({"a": {"b": 1, "c": 2}}, {"a": {"c": 3, "d": None}})
    assert merged == {"a": {"b": 1, "c": 3}}


def test_config_validation():
    with pytest.raises(ValidationError):
        ResolutionConfig(address_mode="physical")
    assert ResolutionConfig(architecture="  ").architecture is None


def test_unset_overrides_without_config_file():
    overrides = {"logging": {"level": None, "json_output": None}}
    config = load_config("/nonexistent/path.yaml", overrides=overrides)
    assert config == AtosConfig()


def test_unset_overrides_with_file_lacking_section(tmp_path: Path):
    path = tmp_path / "atosym.yaml"
    path.write_text("resolution:\n  address_mode: file_offset\n")
    config = load_config(path, overrides={"logging": {"level": None, "json_output": True}})
    assert config.resolution.address_mode is AddressMode.FILE_OFFSET
    assert config.logging.level == "WARNING"
    assert config.logging.json_output is True


def test_merge_drops_none_in_new_sections():
    assert _merge({}, {"logging": {"level": None, "json_output": None}}) == {"logging": {}}
