"""Shared fixtures for Health Guardian tests."""

import json

import pytest

from health_guardian.config import GuardianConfig
from health_guardian.recovery import RecoveryController


@pytest.fixture
def config(tmp_path):
    """Guardian config rooted in a temp state directory."""
    return GuardianConfig(state_dir=tmp_path)


@pytest.fixture
def write_config(config):
    """Write the live config; dicts are JSON-encoded, str/bytes written as-is."""
    def _write(content):
        if isinstance(content, dict):
            content = json.dumps(content, indent=2)
        if isinstance(content, str):
            content = content.encode("utf-8")
        config.config_path.write_bytes(content)
        return content
    return _write


@pytest.fixture
def controller(config):
    return RecoveryController(config)
