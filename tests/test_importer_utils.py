from types import SimpleNamespace

import pytest
import requests

from index_app.importer import utils
from index_app.importer.utils import ImporterSourceError, compute_entity_key, read_resource


def test_read_resource_strips_byte_order_mark(tmp_path):
    path = tmp_path / "feed.csv"
    path.write_bytes("\ufeffName\nACME\n".encode("utf-8"))

    assert read_resource(str(path)) == "Name\nACME\n"


def test_read_resource_missing_file(tmp_path):
    with pytest.raises(ImporterSourceError, match="not found"):
        read_resource(str(tmp_path / "absent.xml"))


def test_read_resource_fetches_urls_with_configured_timeout(app, monkeypatch):
    app.config["IMPORTER_HTTP_TIMEOUT"] = 5
    calls = {}

    def fake_get(url, timeout):
        calls.update(url=url, timeout=timeout)
        return SimpleNamespace(text="<events/>", encoding="utf-8", raise_for_status=lambda: None)

    monkeypatch.setattr(utils.requests, "get", fake_get)

    assert read_resource("https://example.gov/events.xml") == "<events/>"
    assert calls == {"url": "https://example.gov/events.xml", "timeout": 5.0}


def test_read_resource_wraps_http_errors(monkeypatch):
    def fake_get(url, timeout):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(utils.requests, "get", fake_get)

    with pytest.raises(ImporterSourceError, match="Failed to fetch"):
        read_resource("http://example.gov/uvl.csv")


def test_compute_entity_key_ignores_field_order():
    first = compute_entity_key({"name": "ACME", "country": "CN", "address": None})
    second = compute_entity_key({"address": None, "country": "CN", "name": "ACME"})

    assert first == second
    assert first != compute_entity_key({"name": "ACME", "country": "HK", "address": None})
