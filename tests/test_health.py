"""Tests for the config health evaluator."""

import pytest

from health_guardian.errors import ConfigUnavailableError
from health_guardian.recovery import HealthEvaluator, read_config


def test_healthy(controller, write_config):
    write_config({"models": {}, "agents": {}})

    report = controller.check()
    assert report.healthy is True
    assert report.message == "OK"


def test_missing_file(controller):
    report = controller.check()
    assert report.healthy is False
    assert report.message == "Config file missing"


def test_invalid_json_reported_as_missing(controller, write_config):
    write_config("{not json")

    report = controller.check()
    assert report.healthy is False
    assert report.message == "Config file missing"


def test_missing_required_field(controller, write_config):
    write_config({"models": {}})

    report = controller.check()
    assert report.healthy is False
    assert report.message == "Config missing required fields"


def test_non_object_document(controller, write_config):
    write_config("[1, 2, 3]")
    assert controller.check().message == "Config missing required fields"


def test_custom_required_fields(tmp_path):
    path = tmp_path / "openclaw.json"
    path.write_text('{"gateway": {}}')

    assert HealthEvaluator(path, required_fields=["gateway"]).evaluate().healthy is True
    assert HealthEvaluator(path, required_fields=["gateway", "channels"]).evaluate().healthy is False


def test_unexpected_error_embedded(tmp_path, monkeypatch):
    evaluator = HealthEvaluator(tmp_path / "openclaw.json")

    def boom(document):
        raise RuntimeError("disk on fire")

    (tmp_path / "openclaw.json").write_text('{"models": {}, "agents": {}}')
    monkeypatch.setattr(evaluator, "missing_fields", boom)

    report = evaluator.evaluate()
    assert report.healthy is False
    assert report.message == "Error: disk on fire"


def test_read_config(tmp_path):
    path = tmp_path / "openclaw.json"
    path.write_bytes(b'{"models": {}}')

    raw, document = read_config(path)
    assert raw == b'{"models": {}}'
    assert document == {"models": {}}

    path.write_bytes(b"null")
    with pytest.raises(ConfigUnavailableError):
        read_config(path)

    with pytest.raises(ConfigUnavailableError):
        read_config(tmp_path / "absent.json")


@pytest.mark.parametrize("document", ["null", "false", "0", '""'])
def test_empty_scalar_reported_as_missing(controller, write_config, document):
    write_config(document)
    assert controller.check().message == "Config file missing"


def test_empty_containers_are_not_missing(controller, write_config):
    write_config("{}")
    assert controller.check().message == "Config missing required fields"

    write_config("[]")
    assert controller.check().message == "Config missing required fields"


def test_deeply_nested_json_reported_as_missing(controller, write_config):
    write_config("[" * 200000 + "]" * 200000)

    report = controller.check()
    assert report.healthy is False
    assert report.message == "Config file missing"
