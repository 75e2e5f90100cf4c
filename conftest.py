# conftest.py

import os
from pathlib import Path

import pytest

# Must be set before app.py builds its module-level app.
os.environ["FLASK_ENV"] = "testing"

from app import create_app  # noqa: E402
from config import TestingConfig  # noqa: E402
from index_app.importer.normalize.countries import get_country_resolver  # noqa: E402
from index_app.models import db  # noqa: E402

FIXTURES_DIR = Path(__file__).resolve().parent / "tests" / "fixtures"


@pytest.fixture
def app(tmp_path):
    """Fresh application per test, backed by its own SQLite file and pointed at the fixture feeds."""
    test_app = create_app(
        TestingConfig,
        SQLALCHEMY_DATABASE_URI=f"sqlite:///{(tmp_path / 'index.db').as_posix()}",
        CELERY_SQLITE_PATH=str(tmp_path / "celery.sqlite"),
        IMPORTER_UVL_SOURCE=str(FIXTURES_DIR / "uvl.csv"),
        IMPORTER_TRADE_EVENTS_SOURCE=str(FIXTURES_DIR / "trade_events.xml"),
    )
    with test_app.app_context():
        db.create_all()
        yield test_app
        get_country_resolver().reset()
        db.session.remove()
        db.drop_all()


@pytest.fixture
def runner(app):
    """CLI runner bound to the test application."""
    return app.test_cli_runner()


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR
