"""Unit tests for logging helpers."""

import structlog

from docreel.core.logging import (
    add_app_context,
    bind_script,
    get_logger,
    redact_payloads,
    short_id,
    unbind_script,
)


class TestShortId:
    """Tests for short_id."""

    def test_truncates(self):
        """Test IDs are cut to 8 characters."""
        assert short_id("3f2a91bc-1111-2222") == "3f2a91bc"

    def test_short_and_missing(self):
        """Test short and missing IDs pass through."""
        assert short_id("s1") == "s1"
        assert short_id(None) is None


class TestRedactPayloads:
    """Tests for the payload redaction processor."""

    def test_data_url_redacted(self):
        """Test data URLs never reach the log."""
        event = redact_payloads(None, "info", {"event": "x", "video": "data:video/mp4;base64,AAAA"})

        assert event["video"] == "<redacted 26 chars>"

    def test_long_base64_redacted(self):
        """Test long base64 values are replaced by their length."""
        payload = "QUJD" * 100

        event = redact_payloads(None, "info", {"event": "x", "payload": payload})

        assert event["payload"] == "<redacted 400 chars>"

    def test_ordinary_values_kept(self):
        """Test short strings, URLs and non-strings pass through."""
        event = {
            "event": "Render applied",
            "segment_id": "seg-a",
            "url": "https://cdn.example.com/video/a.mp4",
            "size_bytes": 1024,
        }

        assert redact_payloads(None, "info", dict(event)) == event


class TestLogging:
    """Tests for logger setup."""

    def test_app_context_added(self):
        """Test app and env are added to every event."""
        event = add_app_context(None, "info", {"event": "x"})

        assert event["app"] == "DocReel"
        assert "env" in event

    def test_get_logger_logs_with_fields(self):
        """Test a logger accepts structured keyword fields."""
        logger = get_logger("docreel.test")
        logger.info("Segment excluded from assembly", segment_id="seg-a", reason="missing_source")

    def test_bind_script(self):
        """Test the script ID is bound to the context and removed again."""
        bind_script("3f2a91bc-1111-2222")
        assert structlog.contextvars.get_contextvars()["script_id"] == "3f2a91bc"

        unbind_script()
        assert "script_id" not in structlog.contextvars.get_contextvars()

    def test_bind_unsaved_script(self):
        """Test scripts without an ID are marked unsaved."""
        bind_script(None)
        try:
            assert structlog.contextvars.get_contextvars()["script_id"] == "unsaved"
        finally:
            unbind_script()
