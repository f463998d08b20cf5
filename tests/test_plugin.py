"""Tests for the host plugin tool bundle."""

import asyncio

import pytest
from pydantic import ValidationError

from health_guardian.errors import StorageWriteError
from health_guardian.plugin import register


TOOL_NAMES = {
    "healthGuardianBackup",
    "healthGuardianAutoBackup",
    "healthGuardianList",
    "healthGuardianRestore",
    "healthGuardianCheck",
    "healthGuardianAutoRecover",
}


@pytest.fixture
def plugin(controller):
    return register(controller)


def call(plugin, name, args=None):
    return asyncio.run(plugin.call(name, args))


def test_registration(plugin):
    assert plugin.name == "health-guardian"
    assert set(plugin.tools) == TOOL_NAMES

    restore = plugin.tools["healthGuardianRestore"].to_dict()
    assert restore["inputSchema"]["type"] == "object"
    assert restore["inputSchema"]["required"] == ["filename"]
    assert restore["inputSchema"]["properties"]["filename"]["type"] == "string"

    described = plugin.describe()
    assert len(described["tools"]) == 6


def test_backup_tools(plugin, write_config):
    write_config({"models": {}, "agents": {}})

    result = call(plugin, "healthGuardianBackup")
    assert result["success"] is True
    assert result["filename"].startswith("snapshot_manual_")

    # Unchanged content
    assert call(plugin, "healthGuardianAutoBackup") == {"success": False, "filename": ""}

    write_config({"models": {}, "agents": {}, "x": 1})
    result = call(plugin, "healthGuardianAutoBackup")
    assert result["filename"].startswith("snapshot_auto_")


def test_list_tool(plugin, write_config):
    write_config({"models": {}, "agents": {}})
    call(plugin, "healthGuardianBackup")

    result = call(plugin, "healthGuardianList")
    assert result["count"] == 1
    assert set(result["snapshots"][0]) == {"filename", "reason", "createdAt", "sizeBytes"}


def test_restore_tool(plugin, write_config, controller):
    original = write_config({"models": {}, "agents": {}})
    filename = call(plugin, "healthGuardianBackup")["filename"]
    write_config({"models": {}})

    result = call(plugin, "healthGuardianRestore", {"filename": filename})
    assert result == {"success": True, "filename": filename}
    assert controller.config_path.read_bytes() == original

    missing = call(plugin, "healthGuardianRestore", {"filename": "nope.json"})
    assert missing == {"success": False, "filename": "nope.json"}


def test_restore_requires_filename(plugin):
    with pytest.raises(ValidationError):
        call(plugin, "healthGuardianRestore", {})


def test_check_and_recover_tools(plugin, write_config):
    assert call(plugin, "healthGuardianCheck") == {"healthy": False, "message": "Config file missing"}
    assert call(plugin, "healthGuardianAutoRecover") == {"success": False}

    write_config({"models": {}, "agents": {}})
    call(plugin, "healthGuardianBackup")
    write_config({"agents": {}})

    assert call(plugin, "healthGuardianAutoRecover") == {"success": True}
    assert call(plugin, "healthGuardianCheck") == {"healthy": True, "message": "OK"}


def test_unknown_tool(plugin):
    with pytest.raises(KeyError):
        call(plugin, "healthGuardianNope")


def test_gateway_start_hook(plugin, write_config, controller):
    write_config({"models": {}, "agents": {}})

    plugin.on_gateway_start()

    snapshots = controller.list_snapshots()
    assert [s.reason for s in snapshots] == ["startup"]


def test_list_tool_before_any_backup(plugin, controller):
    assert call(plugin, "healthGuardianList") == {"snapshots": [], "count": 0}
    assert not controller.store.directory.exists()


# =============================================================================
# Storage failures become tool errors
# =============================================================================

def fail_snapshot(reason, content):
    raise StorageWriteError("snapshots", "No space left on device")


def fail_config_write(path, content):
    raise StorageWriteError(str(path), "Read-only file system")


@pytest.mark.parametrize("tool", ["healthGuardianBackup", "healthGuardianAutoBackup"])
def test_backup_tools_report_write_failure(plugin, write_config, controller, monkeypatch, tool):
    write_config({"models": {}, "agents": {}})
    monkeypatch.setattr(controller.store, "write_snapshot", fail_snapshot)

    result = call(plugin, tool)
    assert result["success"] is False
    assert result["filename"] == ""
    assert "No space left on device" in result["error"]


def test_restore_tool_reports_write_failure(plugin, write_config, controller, monkeypatch):
    write_config({"models": {}, "agents": {}})
    filename = call(plugin, "healthGuardianBackup")["filename"]
    live = write_config({"models": {}})
    monkeypatch.setattr("health_guardian.recovery.controller.atomic_write", fail_config_write)

    result = call(plugin, "healthGuardianRestore", {"filename": filename})
    assert result["success"] is False
    assert result["filename"] == filename
    assert "Read-only file system" in result["error"]
    assert controller.config_path.read_bytes() == live


def test_auto_recover_tool_reports_write_failure(plugin, write_config, controller, monkeypatch):
    write_config({"models": {}, "agents": {}})
    call(plugin, "healthGuardianBackup")
    write_config({"agents": {}})
    monkeypatch.setattr("health_guardian.recovery.controller.atomic_write", fail_config_write)

    result = call(plugin, "healthGuardianAutoRecover")
    assert result["success"] is False
    assert "Read-only file system" in result["error"]


def test_gateway_start_hook_survives_write_failure(plugin, write_config, controller, monkeypatch):
    write_config({"models": {}, "agents": {}})
    monkeypatch.setattr(controller.store, "write_snapshot", fail_snapshot)

    plugin.on_gateway_start()

    assert controller.list_snapshots() == []
