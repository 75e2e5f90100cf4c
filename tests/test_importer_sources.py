import logging
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from index_app.importer.runner import ImportRunner
from index_app.importer.sources.trade_events import TradeEventData
from index_app.importer.sources.uvl import UvlData
from index_app.importer.utils import ImporterSourceError
from index_app.models import IndexMetadata, TradeEvent, UvlEntry, db


def _metadata(index_name):
    return db.session.execute(select(IndexMetadata).filter_by(index_name=index_name)).scalar_one()


def test_uvl_import_normalizes_rows_and_purges_stale_entries(app, fixtures_dir, caplog):
    caplog.set_level(logging.ERROR, logger="index_app.importer.normalize.countries")
    UvlEntry.upsert("retired", name="Delisted Party")
    db.session.commit()
    stale = db.session.execute(select(UvlEntry).filter_by(entity_key="retired")).scalar_one()
    stale.last_imported_at = datetime.now(timezone.utc) - timedelta(days=7)
    db.session.commit()

    ImportRunner().run(UvlData(str(fixtures_dir / "uvl.csv")))

    entries = {entry.name: entry for entry in db.session.execute(select(UvlEntry)).scalars()}
    assert set(entries) == {
        "Beijing Rich Linscience Electronic Company",
        "Brilliant Intelligent Technology & Co.",
        "Sample Trading LLC",
        "Great Underground Empire Ltd",
    }
    assert entries["Beijing Rich Linscience Electronic Company"].country == "CN"
    hong_kong = entries["Brilliant Intelligent Technology & Co."]
    assert hong_kong.country == "HK"
    assert hong_kong.address == "Unit 3, 8/F, Kwai Chung Plaza, Kwai Chung"
    sample = entries["Sample Trading LLC"]
    assert sample.country is None
    assert sample.address is None
    assert entries["Great Underground Empire Ltd"].country is None
    assert entries["Great Underground Empire Ltd"].source_list_url == "https://www.bis.doc.gov/uvl"

    errors = [record.getMessage() for record in caplog.records if record.levelno >= logging.ERROR]
    assert errors == ["Could not find a country code for Frobozzland"]

    assert _metadata("uvl_entries").entity_count == 4


def test_uvl_reimport_is_stable(app, fixtures_dir):
    source = str(fixtures_dir / "uvl.csv")
    ImportRunner().run(UvlData(source))
    first_keys = set(db.session.execute(select(UvlEntry.entity_key)).scalars())

    ImportRunner().run(UvlData(source))

    assert set(db.session.execute(select(UvlEntry.entity_key)).scalars()) == first_keys
    assert _metadata("uvl_entries").entity_count == 4


def test_trade_events_import_parses_xml_fields(app, fixtures_dir):
    ImportRunner().run(TradeEventData(str(fixtures_dir / "trade_events.xml")))

    events = {event.entity_key: event for event in db.session.execute(select(TradeEvent)).scalars()}
    assert set(events) == {"evt-100", "evt-200"}

    mission = events["evt-100"]
    assert mission.title == "Medical Device Trade Mission"
    assert mission.description == "Meet buyers in Seoul & Busan."
    assert mission.city == "Seoul"
    assert mission.country == "KR"
    assert mission.start_date == "2024-03-14"
    assert mission.end_date == "2024-03-18"
    assert mission.registration_deadline == "2024-02-01"
    assert mission.url == "https://example.gov/events/100"

    expo = events["evt-200"]
    assert expo.title == "Clean Energy Expo"
    assert expo.description is None
    assert expo.city is None
    assert expo.country == "US"
    assert expo.start_date is None
    assert expo.end_date is None
    assert expo.registration_deadline is None

    assert _metadata("trade_events").entity_count == 2


def test_missing_source_fails_without_purging(app, tmp_path):
    UvlEntry.upsert("kept", name="Still Listed")
    db.session.commit()
    entry = db.session.execute(select(UvlEntry)).scalar_one()
    entry.last_imported_at = datetime.now(timezone.utc) - timedelta(days=7)
    db.session.commit()

    with pytest.raises(ImporterSourceError):
        ImportRunner().run(UvlData(str(tmp_path / "missing.csv")))

    assert db.session.execute(select(UvlEntry.entity_key)).scalar_one() == "kept"


def test_importer_without_resource_raises(app):
    with pytest.raises(ValueError):
        UvlData().read_resource()


def test_import_run_logs_exactly_two_info_lines(app, fixtures_dir, caplog):
    caplog.set_level(logging.DEBUG, logger="index_app")

    ImportRunner().run(UvlData(str(fixtures_dir / "uvl.csv")))

    info = [
        record.getMessage()
        for record in caplog.records
        if record.name.startswith("index_app") and record.levelno == logging.INFO
    ]
    assert info == ["UvlData: import starting.", "UvlData: import finished."]
    debug = [record.getMessage() for record in caplog.records if record.levelno == logging.DEBUG]
    assert "UvlData: loaded 4 entries" in debug
