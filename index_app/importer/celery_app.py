"""
Celery wiring for the importer worker.

One Celery app is built per Flask app and cached in the importer extension
state. Without an explicit broker the worker falls back to a SQLite file in the
Flask instance folder, so a development box needs nothing beyond the
application itself.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, NamedTuple

from celery import Celery
from flask import Flask
from kombu import Queue

DEFAULT_QUEUE_NAME = "imports"
DEFAULT_SQLITE_FILENAME = "celery.sqlite"

# Prefetch of one on a single queue keeps a worker from holding two runs.
_BASE_CONF: dict[str, Any] = {
    "task_default_queue": DEFAULT_QUEUE_NAME,
    "task_default_exchange": DEFAULT_QUEUE_NAME,
    "task_default_routing_key": DEFAULT_QUEUE_NAME,
    "task_acks_late": True,
    "task_track_started": True,
    "worker_prefetch_multiplier": 1,
    "worker_hijack_root_logger": False,
    "result_extended": True,
    "broker_connection_retry_on_startup": True,
}


class Transport(NamedTuple):
    broker_url: str
    result_backend: str


def _sqlite_file(app: Flask) -> Path:
    configured = app.config.get("CELERY_SQLITE_PATH")
    path = Path(configured) if configured else Path(DEFAULT_SQLITE_FILENAME)
    if not path.is_absolute():
        path = Path(app.instance_path) / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def resolve_transport(app: Flask) -> Transport:
    """Pick the broker and result backend, filling gaps with the SQLite file."""
    broker_url = app.config.get("CELERY_BROKER_URL")
    result_backend = app.config.get("CELERY_RESULT_BACKEND")
    if not (broker_url and result_backend):
        # as_posix keeps the URL valid on Windows paths.
        location = _sqlite_file(app).as_posix()
        broker_url = broker_url or f"sqla+sqlite:///{location}"
        result_backend = result_backend or f"db+sqlite:///{location}"
    return Transport(broker_url, result_backend)


def _extra_conf(app: Flask) -> Mapping[str, Any] | None:
    value = app.config.get("CELERY_CONFIG")
    if not value or isinstance(value, Mapping):
        return value or None
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        app.logger.warning("CELERY_CONFIG is not valid JSON; ignoring value.", exc_info=True)
        return None


def create_celery_app(app: Flask) -> Celery:
    """Build a Celery app whose tasks always run inside ``app``'s context."""
    transport = resolve_transport(app)
    celery_app = Celery(
        app.import_name,
        broker=transport.broker_url,
        backend=transport.result_backend,
        include=("index_app.importer.tasks",),
    )
    celery_app.conf.update(_BASE_CONF, task_queues=[Queue(DEFAULT_QUEUE_NAME)])

    extra_conf = _extra_conf(app)
    if extra_conf:
        celery_app.conf.update(extra_conf)
    app.logger.info(
        "Importer Celery app configured",
        extra={
            "importer_celery_broker_url": transport.broker_url,
            "importer_celery_result_backend": transport.result_backend,
            "importer_celery_extra_conf": extra_conf,
        },
    )
    logging.getLogger("celery.worker.strategy").setLevel(logging.WARNING)

    class FlaskContextTask(celery_app.Task):  # type: ignore[misc]
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return super().__call__(*args, **kwargs)

    celery_app.Task = FlaskContextTask  # type: ignore[assignment]
    celery_app.loader.import_default_modules()
    return celery_app


def ensure_celery_app(app: Flask, state: dict[str, Any]) -> Celery:
    if state.get("celery_app") is None:
        state["celery_app"] = create_celery_app(app)
    return state["celery_app"]


def get_celery_app(app: Flask) -> Celery | None:
    """Return the app's Celery instance, or ``None`` while the importer is off."""
    state = app.extensions.get("importer")
    if not state or not state.get("enabled"):
        return state.get("celery_app") if state else None
    return ensure_celery_app(app, state)
