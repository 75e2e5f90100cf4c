"""CSV importer for the Unverified List.

The feed carries no record identifier, so each party is keyed by a checksum of
its normalized name, address and country.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Iterator

from index_app.models import UvlEntry, db

from ..base import Importer
from ..normalize import remap_keys, sanitize_entry
from ..utils import compute_entity_key

logger = logging.getLogger(__name__)

COLUMN_MAP = {
    "Name": "name",
    "Address": "address",
    "Country": "country",
    "Source": "source_list_url",
}


class UvlData(Importer):
    index = UvlEntry

    def extract_and_load(self) -> None:
        loaded = 0
        for record in self.iter_records():
            key = compute_entity_key(
                {"name": record["name"], "address": record.get("address"), "country": record.get("country")}
            )
            self.index.upsert(key, **record)
            loaded += 1
        db.session.commit()
        logger.debug("%s: loaded %s entries", self.name, loaded)

    def iter_records(self) -> Iterator[dict[str, object | None]]:
        reader = csv.DictReader(io.StringIO(self.read_resource()))
        for line_number, row in enumerate(reader, start=2):
            record = sanitize_entry(remap_keys(COLUMN_MAP, row))
            if not record.get("name"):
                logger.warning("%s: skipping row %s without a name", self.name, line_number)
                continue
            country = record.get("country")
            record["country"] = self.lookup_country(country) if country else None
            yield record
