"""
Importer Celery tasks.

The worker is the production scheduler: it checks the importer gate and hands
the run to ``ImportRunner`` through ``run_importer``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from celery import shared_task
from flask import current_app

from .service import run_importer


@shared_task(name="importer.healthcheck", bind=True)
def importer_healthcheck(self) -> dict[str, Any]:
    """
    Simple heartbeat task used by worker health checks.
    """
    now = datetime.now(timezone.utc)
    return {
        "status": "ok",
        "timestamp": now.isoformat(),
        "worker_hostname": self.request.hostname,
    }


@shared_task(name="importer.run", bind=True)
def run_import(self, *, importer: str) -> dict[str, Any]:
    """
    Execute one importer run inside the worker.

    Failures propagate so Celery records the task as failed; retry policy
    belongs to whoever schedules the task.
    """
    started_at = datetime.now(timezone.utc)
    try:
        payload = run_importer(importer)
    except Exception as exc:
        current_app.logger.exception(
            "Importer task failed",
            extra={
                "importer_name": importer,
                "importer_task_id": self.request.id,
                "importer_error": str(exc),
            },
        )
        raise

    payload.update(
        {
            "task_id": self.request.id,
            "started_at": started_at.isoformat(),
            "finished_at": datetime.now(timezone.utc).isoformat(),
        }
    )
    current_app.logger.info(
        "Importer task completed",
        extra={
            "importer_name": importer,
            "importer_task_id": self.request.id,
            "importer_status": payload["status"],
        },
    )
    return payload
