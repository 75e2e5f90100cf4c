"""Prometheus metrics helpers for the importer."""

from __future__ import annotations

from typing import Literal

from prometheus_client import Counter, Histogram

_import_runs_counter = Counter(
    "importer_runs_total",
    "Import runs by importer and outcome.",
    ["importer", "outcome"],
)
_import_run_duration = Histogram(
    "importer_run_duration_seconds",
    "Duration of import runs in seconds, including purge and metadata refresh.",
    ["importer"],
    buckets=(1, 5, 10, 30, 60, 120, 300, 600, 1800),
)
_purged_entities_counter = Counter(
    "importer_purged_entities_total",
    "Index entities purged because the source no longer published them.",
    ["importer"],
)
_country_lookup_misses = Counter(
    "importer_country_lookup_misses_total",
    "Country names that could not be resolved to an ISO 3166-1 code.",
)


def record_import_run(
    importer: str,
    *,
    outcome: Literal["succeeded", "failed"],
    duration_seconds: float,
) -> None:
    """Capture the outcome and duration of an import run."""

    _import_runs_counter.labels(importer=importer, outcome=outcome).inc()
    _import_run_duration.labels(importer=importer).observe(duration_seconds)


def record_purged_entities(importer: str, count: int) -> None:
    if count:
        _purged_entities_counter.labels(importer=importer).inc(count)


def record_country_lookup_miss() -> None:
    _country_lookup_misses.inc()
