import pytest

from app import create_app
from config import TestingConfig
from index_app.importer import IMPORTER_EXTENSION_KEY
from index_app.importer.registry import UnknownImporterError


def build_app(tmp_path, **overrides):
    overrides.setdefault("CELERY_SQLITE_PATH", str(tmp_path / "celery.sqlite"))
    return create_app(TestingConfig, **overrides)


def test_importer_disabled_registers_stub_cli(tmp_path, monkeypatch):
    called = {"flag": False}

    def record_call(*args, **kwargs):
        called["flag"] = True
        return ()

    monkeypatch.setattr("index_app.importer.resolve_importers", record_call)

    app = build_app(tmp_path, IMPORTER_ENABLED=False)

    assert called["flag"] is False, "resolve_importers should not run when importer disabled"
    state = app.extensions[IMPORTER_EXTENSION_KEY]
    assert state["enabled"] is False
    assert state["celery_app"] is None

    result = app.test_cli_runner().invoke(args=["importer"])
    assert result.exit_code != 0
    assert "Importer commands are unavailable" in result.output


def test_importer_enabled_records_state(tmp_path):
    app = build_app(tmp_path, IMPORTER_DISABLED=("trade_events",))

    state = app.extensions[IMPORTER_EXTENSION_KEY]
    assert state["enabled"] is True
    assert [descriptor.name for descriptor in state["importers"]] == ["uvl", "trade_events"]
    assert state["disabled_importers"] == ("trade_events",)
    assert state["celery_app"] is not None


def test_unknown_disabled_importer_fails_fast(tmp_path):
    with pytest.raises(UnknownImporterError):
        build_app(tmp_path, IMPORTER_DISABLED=("unknown",))


def test_unknown_importer_error_is_a_value_error(tmp_path):
    with pytest.raises(ValueError):
        build_app(tmp_path, IMPORTER_DISABLED=("uvl", "typo"))
