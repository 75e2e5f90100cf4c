"""
Importer-specific utilities for reading source resources.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Mapping
from urllib.parse import urlparse

import requests
from flask import current_app, has_app_context

DEFAULT_HTTP_TIMEOUT = 30
REMOTE_SCHEMES: tuple[str, ...] = ("http", "https")


class ImporterSourceError(RuntimeError):
    """Raised when a source resource cannot be opened or fetched."""


def is_remote_resource(resource: str) -> bool:
    return urlparse(resource).scheme.lower() in REMOTE_SCHEMES


def _http_timeout() -> float:
    if has_app_context():
        return float(current_app.config.get("IMPORTER_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT))
    return DEFAULT_HTTP_TIMEOUT


def fetch_remote(url: str) -> str:
    """
    Download ``url`` and return the decoded body.
    """

    try:
        response = requests.get(url, timeout=_http_timeout())
        response.raise_for_status()
    except requests.RequestException as exc:
        raise ImporterSourceError(f"Failed to fetch {url}: {exc}") from exc
    if response.encoding is None:
        response.encoding = "utf-8"
    return response.text


def read_resource(resource: str) -> str:
    """
    Return the contents of a local file or ``http(s)`` URL.
    """

    if is_remote_resource(resource):
        return fetch_remote(resource)

    path = Path(resource)
    if not path.exists():
        raise ImporterSourceError(f"Source file not found: {resource}")
    try:
        # utf-8-sig drops the BOM spreadsheet exports like to prepend.
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ImporterSourceError(f"Failed to read {resource}: {exc}") from exc


def compute_entity_key(payload: Mapping[str, object | None]) -> str:
    """Return a stable key for records whose source carries no identifier."""

    serialized = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()
