"""
Import-run lifecycle.

``ImportRunner.run`` captures the run start time, hands control to the
importer's ``extract_and_load`` and, only when that returns normally, purges
index entities the run did not touch and refreshes the index metadata.

Overlapping runs of the same importer are not purge-safe: the later run's
cutoff can delete rows the earlier run just wrote. Callers serialize per
importer (see ``index_app.importer.service.run_importer``).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from .metrics import record_import_run, record_purged_entities

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportRun:
    """A single in-flight import; its start time is the purge cutoff."""

    importer_name: str
    started_at: datetime

    @classmethod
    def start(cls, importer_name: str) -> "ImportRun":
        return cls(importer_name=importer_name, started_at=datetime.now(timezone.utc))


class ImportRunner:
    """Owns the fixed steps wrapped around every importer's extraction."""

    def run(self, importer) -> None:
        name = importer.name
        index = importer.index
        logger.info("%s: import starting.", name)
        clock_start = time.monotonic()

        # Captured before extraction so every row this run writes is >= cutoff.
        import_run = ImportRun.start(name)

        try:
            importer.extract_and_load()
        except Exception:
            logger.exception(
                "%s: import failed; skipping purge.",
                name,
                extra={"importer_name": name, "importer_started_at": import_run.started_at.isoformat()},
            )
            record_import_run(name, outcome="failed", duration_seconds=time.monotonic() - clock_start)
            raise

        purged = index.purge_older_than(import_run.started_at)
        index.refresh_metadata()
        record_purged_entities(name, purged or 0)
        record_import_run(name, outcome="succeeded", duration_seconds=time.monotonic() - clock_start)

        logger.debug(
            "%s: purged %s stale entities older than %s",
            name,
            purged,
            import_run.started_at.isoformat(),
        )
        logger.info("%s: import finished.", name)
