"""
Utility helpers for importer feature flag checks.

Schedulers consult ``is_importer_disabled`` immediately before running an
importer; the runner itself never looks at these flags.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from flask import current_app


def _get_config(app=None):
    if app is not None:
        return app.config
    return current_app.config


def is_importer_enabled(app=None) -> bool:
    """Return True when the importer feature flag is enabled."""
    config = _get_config(app)
    return bool(config.get("IMPORTER_ENABLED", False))


def get_disabled_importers(app=None) -> Tuple[str, ...]:
    """Return the names of importers switched off individually."""
    config = _get_config(app)
    names: Iterable[str] = config.get("IMPORTER_DISABLED", ())
    return tuple(name.strip().lower() for name in names if name and name.strip())


def is_importer_disabled(name: str, app=None) -> bool:
    """Return True when ``name`` must not run, either globally or individually."""
    if not is_importer_enabled(app):
        return True
    return name.strip().lower() in get_disabled_importers(app)
