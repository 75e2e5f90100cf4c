"""
Importer feature package.

Provides conditional CLI registration, Celery wiring and registry validation
while remaining lightweight when the importer is disabled.
"""

from __future__ import annotations

from typing import Iterable

from flask import Flask

from index_app.utils.importer import get_disabled_importers, is_importer_enabled

from .celery_app import ensure_celery_app, get_celery_app
from .cli import get_disabled_importer_group, importer_cli
from .registry import ImporterDescriptor, get_importer_registry, resolve_importers
from .runner import ImportRun, ImportRunner
from .service import run_importer

IMPORTER_EXTENSION_KEY = "importer"

__all__ = [
    "init_importer",
    "IMPORTER_EXTENSION_KEY",
    "get_celery_app",
    "ImportRun",
    "ImportRunner",
    "run_importer",
]


def _ensure_extension_state(app: Flask) -> dict:
    state = app.extensions.setdefault(
        IMPORTER_EXTENSION_KEY,
        {
            "enabled": False,
            "importers": (),
            "disabled_importers": (),
            "celery_app": None,
        },
    )
    return state


def _set_cli(app: Flask, enabled: bool) -> None:
    """Register the appropriate CLI group based on flag state."""
    # Avoid duplicate registrations when running tests
    command_name = importer_cli.name
    if command_name in app.cli.commands:
        app.cli.commands.pop(command_name)

    if enabled:
        app.cli.add_command(importer_cli)
    else:
        app.cli.add_command(get_disabled_importer_group())


def init_importer(app: Flask) -> None:
    """
    Mount the importer CLI and Celery app based on configuration.

    Records importer state inside ``app.extensions['importer']``.
    """
    enabled = is_importer_enabled(app)
    state = _ensure_extension_state(app)
    state["enabled"] = enabled

    if not enabled:
        state["importers"] = ()
        state["disabled_importers"] = ()
        _set_cli(app, enabled=False)
        app.logger.info("Importer disabled via IMPORTER_ENABLED flag; skipping registration.")
        return

    registry = get_importer_registry()
    disabled = get_disabled_importers(app)
    # Fail fast on typos in IMPORTER_DISABLED.
    resolve_importers(disabled, registry)

    descriptors: Iterable[ImporterDescriptor] = tuple(registry.values())
    state["importers"] = descriptors
    state["disabled_importers"] = disabled
    ensure_celery_app(app, state)
    _set_cli(app, enabled=True)

    active = [descriptor.name for descriptor in descriptors if descriptor.name not in disabled]
    app.logger.info(
        "Importer enabled with importers: %s",
        ", ".join(active) or "none",
        extra={"importer_disabled": list(disabled)},
    )
