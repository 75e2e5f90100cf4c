"""
Scheduler-side entry point for running a registered importer.

Checks the importer gate, serializes runs of the same importer within the
process and delegates to ``ImportRunner``. Runs of different importers do not
block each other.
"""

from __future__ import annotations

import threading
from typing import Any

from flask import current_app

from index_app.utils.importer import is_importer_disabled

from .registry import build_importer, resolve_importers
from .runner import ImportRunner

_run_locks: dict[str, threading.Lock] = {}
_run_locks_guard = threading.Lock()


def _lock_for(name: str) -> threading.Lock:
    with _run_locks_guard:
        return _run_locks.setdefault(name, threading.Lock())


def run_importer(name: str, *, app=None, runner: ImportRunner | None = None) -> dict[str, Any]:
    """
    Run the importer registered as ``name`` unless it is disabled or busy.

    Returns a small status payload; errors raised by the import propagate.
    """
    app = app or current_app._get_current_object()
    resolve_importers((name,))

    if is_importer_disabled(name, app):
        app.logger.info("Importer '%s' is disabled; skipping run.", name, extra={"importer_name": name})
        return {"importer": name, "status": "disabled"}

    lock = _lock_for(name)
    if not lock.acquire(blocking=False):
        app.logger.warning(
            "Importer '%s' is already running; skipping overlapping run.",
            name,
            extra={"importer_name": name},
        )
        return {"importer": name, "status": "busy"}

    try:
        importer = build_importer(name, app)
        (runner or ImportRunner()).run(importer)
    finally:
        lock.release()
    return {"importer": name, "status": "succeeded"}
