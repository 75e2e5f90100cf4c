import json
from typing import Any, Dict

import pytest
from sqlalchemy import select

from index_app.importer import get_celery_app
from index_app.importer.celery_app import DEFAULT_QUEUE_NAME
from index_app.models import UvlEntry, db


def test_celery_defaults_to_sqlite_transport(app, tmp_path):
    celery_app = get_celery_app(app)

    assert celery_app is not None
    assert celery_app.conf.broker_url.startswith("sqla+sqlite:///")
    assert "celery.sqlite" in celery_app.conf.broker_url
    assert celery_app.conf.result_backend.startswith("db+sqlite:///")
    assert celery_app.conf.task_default_queue == DEFAULT_QUEUE_NAME
    assert celery_app.conf.worker_prefetch_multiplier == 1
    assert celery_app.conf.task_always_eager is True


def test_run_task_imports_inside_worker(app):
    celery_app = get_celery_app(app)

    result = celery_app.tasks["importer.run"].apply(kwargs={"importer": "uvl"})

    payload = result.get()
    assert payload["importer"] == "uvl"
    assert payload["status"] == "succeeded"
    assert payload["task_id"]
    assert payload["started_at"] <= payload["finished_at"]
    assert len(db.session.execute(select(UvlEntry)).scalars().all()) == 4


def test_run_task_honours_gate(app):
    app.config["IMPORTER_DISABLED"] = ("uvl",)
    celery_app = get_celery_app(app)

    payload = celery_app.tasks["importer.run"].apply(kwargs={"importer": "uvl"}).get()

    assert payload["status"] == "disabled"
    assert db.session.execute(select(UvlEntry)).scalars().all() == []


def test_run_task_failure_propagates(app, tmp_path):
    app.config["IMPORTER_UVL_SOURCE"] = str(tmp_path / "missing.csv")
    celery_app = get_celery_app(app)

    with pytest.raises(RuntimeError):
        celery_app.tasks["importer.run"].apply(kwargs={"importer": "uvl"}, throw=True)


def test_worker_ping_cli(runner):
    result = runner.invoke(args=["importer", "worker", "ping"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["status"] == "ok"
    assert "timestamp" in payload
    assert "worker_hostname" in payload


def test_worker_run_invokes_celery(runner, app, monkeypatch):
    celery_app = get_celery_app(app)
    calls: Dict[str, Any] = {}

    def fake_worker_main(argv=None):
        calls["argv"] = argv

    monkeypatch.setattr(celery_app, "worker_main", fake_worker_main)

    result = runner.invoke(
        args=["importer", "worker", "run", "--loglevel", "debug", "--concurrency", "2", "--pool", "solo"]
    )

    assert result.exit_code == 0, result.output
    assert calls["argv"] == [
        "worker",
        "--loglevel",
        "debug",
        "-Q",
        "imports",
        "--concurrency",
        "2",
        "--pool",
        "solo",
    ]
