"""Tests for logging helpers, i18n lookups and settings."""

import json
import logging

import pytest

from app.core.config import Settings
from app.core.i18n import get_all_translations, get_translation, resolve_lang
from app.core.monitoring import JSONFormatter, track_performance


def test_json_formatter_includes_duration():
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "recompute done", None, None)
    record.duration_ms = 3.2
    data = json.loads(JSONFormatter().format(record))
    assert data["message"] == "recompute done"
    assert data["level"] == "INFO"
    assert data["duration_ms"] == 3.2


def test_track_performance_reraises():
    @track_performance("boom")
    def boom():
        raise ValueError("bad state")

    with pytest.raises(ValueError):
        boom()


def test_track_performance_returns_result():
    @track_performance("add")
    def add(a, b):
        return a + b

    assert add(2, 3) == 5


class TestI18n:

    def test_resolve_lang(self):
        assert resolve_lang("AR") == "ar"
        assert resolve_lang("de") == "fr"
        assert resolve_lang("") == "fr"

    def test_translation_with_placeholders(self):
        assert get_translation("search.results", "fr", count=3).startswith("3")

    def test_unknown_key_echoed(self):
        assert get_translation("nope.key", "ar") == "nope.key"

    def test_list_entries_joined(self):
        assert ", " in get_all_translations("fr")["search.examples"]


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("suggestion_limit", "5")
    monkeypatch.setenv("log_format", "json")
    settings = Settings()
    assert settings.suggestion_limit == 5
    assert settings.log_format == "json"


def test_retry_after_seconds():
    from limits import parse

    from app.core.rate_limiting import retry_after_seconds

    assert retry_after_seconds(parse("300/minute")) == 60
    assert retry_after_seconds(parse("10 per 2 hours")) == 7200
    assert retry_after_seconds(parse("5/second")) == 1


def test_rate_limit_handler_sets_retry_after():
    import asyncio
    from types import SimpleNamespace

    from fastapi import Request
    from limits import parse

    from app.core.rate_limiting import rate_limit_handler

    request = Request({
        "type": "http",
        "method": "POST",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": "/api/v1/search",
        "query_string": b"",
        "headers": [],
        "client": ("10.0.0.1", 5000),
    })
    exc = SimpleNamespace(detail="10 per 1 hour", limit=SimpleNamespace(limit=parse("10/hour")))
    response = asyncio.run(rate_limit_handler(request, exc))
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "3600"
    assert json.loads(response.body)["retry_after"] == 3600
