"""Tests for configuration loading."""

from pathlib import Path

import pytest

from health_guardian.config import (
    GuardianConfig,
    load_config,
    parse_config,
    create_default_config,
)


def test_paths_from_state_dir(tmp_path):
    config = GuardianConfig(state_dir=tmp_path)
    assert config.config_path == tmp_path / "openclaw.json"
    assert config.snapshot_dir == tmp_path / "snapshots"


def test_from_env():
    config = GuardianConfig.from_env({"OPENCLAW_STATE_DIR": "/var/lib/openclaw"})
    assert config.state_dir == Path("/var/lib/openclaw")

    config = GuardianConfig.from_env({})
    assert config.config_path == Path("openclaw.json")


def test_load_yaml_with_env_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv("GUARDIAN_TEST_DIR", str(tmp_path / "state"))
    path = tmp_path / "guardian.yaml"
    path.write_text(
        "state_dir: ${GUARDIAN_TEST_DIR}\n"
        "required_fields: [models]\n"
        "retention:\n"
        "  max_automatic: 3\n"
    )

    config = load_config(path)
    assert config.state_dir == tmp_path / "state"
    assert config.required_fields == ["models"]
    assert config.retention.max_automatic == 3
    assert config.retention.protected_reasons == ["manual"]


def test_explicit_state_dir_wins(tmp_path):
    config = parse_config({"state_dir": "/elsewhere"}, state_dir=tmp_path)
    assert config.state_dir == tmp_path


def test_default_config_parses(tmp_path):
    path = tmp_path / "guardian.yaml"
    path.write_text(create_default_config())

    config = load_config(path, state_dir=tmp_path)
    assert config.required_fields == ["models", "agents"]
    assert config.retention.max_automatic == 10


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_negative_retention_rejected():
    with pytest.raises(ValueError):
        parse_config({"retention": {"max_automatic": -1}}, state_dir=".")
