"""XML importer for the trade events feed."""

from __future__ import annotations

import logging
from typing import Iterator
from xml.etree import ElementTree

from index_app.models import TradeEvent, db

from ..base import Importer
from ..normalize import extract_fields, parse_american_date, parse_date, sanitize_entry
from ..utils import compute_entity_key

logger = logging.getLogger(__name__)

EVENT_PATH = "./event"

FIELD_PATHS = {
    "title": "./title",
    "description": "./description",
    "city": "./location/city",
    "country": "./location/country",
    "start_date": "./start_date",
    "end_date": "./end_date",
    "registration_deadline": "./registration_deadline",
    "url": "./url",
}


class TradeEventData(Importer):
    index = TradeEvent

    def extract_and_load(self) -> None:
        loaded = 0
        for key, record in self.iter_records():
            self.index.upsert(key, **record)
            loaded += 1
        db.session.commit()
        logger.debug("%s: loaded %s events", self.name, loaded)

    def iter_records(self) -> Iterator[tuple[str, dict[str, object | None]]]:
        root = ElementTree.fromstring(self.read_resource())
        for node in root.iterfind(EVENT_PATH):
            record = sanitize_entry(extract_fields(node, FIELD_PATHS))
            if not record.get("title"):
                logger.warning("%s: skipping event without a title", self.name)
                continue

            # Dates arrive as MM/DD/YYYY; deadlines are free text.
            record["start_date"] = parse_american_date(record["start_date"])
            record["end_date"] = parse_american_date(record["end_date"])
            record["registration_deadline"] = parse_date(record["registration_deadline"])
            country = record["country"]
            record["country"] = self.lookup_country(country) if country else None

            key = (node.get("id") or "").strip() or compute_entity_key(
                {"title": record["title"], "start_date": record["start_date"], "city": record["city"]}
            )
            yield key, record
