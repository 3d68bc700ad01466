"""Tests for settings validation and log formatting."""

import json
import logging

import pytest
from pydantic import ValidationError

from dochistory.core.config import ConfigurationError, Environment, Settings
from dochistory.core.logging_config import MAX_FIELD_CHARS, JsonLogFormatter, RedactingFilter, request_id_var


class TestSettings:

    def test_negative_history_interval_rejected(self):
        with pytest.raises(ValidationError):
            Settings(history_min_interval_ms=-1)

    def test_unknown_history_timezone_rejected(self):
        with pytest.raises(ValidationError):
            Settings(history_timezone="Mars/Olympus_Mons")

    def test_history_timezone_default(self):
        assert Settings().history_timezone == "America/Toronto"

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_format_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_format="xml")

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_wildcard_cors_rejected(self):
        with pytest.raises(ValueError):
            Settings(cors_allowed_origins="https://a.example, *").get_cors_origins()

    def test_cors_origins_parsed(self):
        settings = Settings(cors_allowed_origins="https://a.example, https://b.example,")
        assert settings.get_cors_origins() == ["https://a.example", "https://b.example"]

    def test_production_blocks_sqlite(self):
        settings = Settings(
            environment=Environment.PRODUCTION,
            database_url="sqlite:///./prod.db",
            cors_allowed_origins="https://school.example",
        )
        with pytest.raises(ConfigurationError):
            settings.validate_production_config()

    def test_development_allows_local_resources(self):
        Settings(database_url="sqlite:///./dev.db").validate_production_config()

    def test_production_with_postgres(self):
        Settings(
            environment=Environment.PRODUCTION,
            database_url="postgresql://app:pw@db.internal/history",
            cors_allowed_origins="https://school.example",
        ).validate_production_config()


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("dochistory.test", logging.INFO, __file__, 1, msg, (), None)
    record.__dict__.update(extra)
    return record


class TestLogging:

    def test_json_formatter_merges_extra(self):
        payload = json.loads(JsonLogFormatter().format(_record("History entry written", entry_id=7, kind="patch")))
        assert payload["message"] == "History entry written"
        assert payload["entry_id"] == 7
        assert payload["kind"] == "patch"
        assert payload["level"] == "INFO"

    def test_json_formatter_includes_request_id(self):
        token = request_id_var.set("req-42")
        try:
            payload = json.loads(JsonLogFormatter().format(_record("hello")))
        finally:
            request_id_var.reset(token)
        assert payload["request_id"] == "req-42"

    def test_secret_filter_masks_database_password(self):
        record = _record("Connecting to postgresql://app:hunter2@db/history")
        RedactingFilter().filter(record)
        assert "hunter2" not in record.msg
        assert "***REDACTED***" in record.msg

    def test_large_extra_values_are_truncated(self):
        snapshot = {"type": "doc", "content": [{"type": "text", "text": "x" * (MAX_FIELD_CHARS * 2)}]}
        payload = json.loads(JsonLogFormatter().format(_record("big", snapshot=snapshot)))
        assert isinstance(payload["snapshot"], str)
        assert payload["snapshot"].endswith("...[truncated]")

    def test_small_extra_values_kept_structured(self):
        payload = json.loads(JsonLogFormatter().format(_record("small", details={"doc_id": "abc"})))
        assert payload["details"] == {"doc_id": "abc"}
