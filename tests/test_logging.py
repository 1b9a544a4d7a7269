"""Tests for structured logging."""

import json
import logging

import pytest
import structlog

from nearlink.observability.logging import (
    HANDLER_NAME,
    _add_request_id,
    _redact_sensitive,
    clear_request_id,
    configure_logging,
    get_logger,
    request_id_var,
    set_request_id,
)


class TestRequestIdContext:
    """Tests for request ID context variable."""

    def test_request_id_default_none(self):
        """Request ID is None by default."""
        clear_request_id()
        assert request_id_var.get() is None

    def test_set_and_clear_request_id(self):
        """set_request_id sets and clear_request_id clears the context variable."""
        set_request_id("req-123")
        assert request_id_var.get() == "req-123"
        clear_request_id()
        assert request_id_var.get() is None


class TestAddRequestIdProcessor:
    """Tests for _add_request_id processor."""

    def test_adds_request_id_when_set(self):
        """Adds request_id to event dict when set."""
        set_request_id("req-abc")
        try:
            result = _add_request_id(None, None, {"event": "test"})
            assert result["request_id"] == "req-abc"
        finally:
            clear_request_id()

    def test_no_request_id_when_not_set(self):
        """Does not add request_id when not set."""
        clear_request_id()
        result = _add_request_id(None, None, {"event": "test"})
        assert "request_id" not in result


class TestRedactSensitiveProcessor:
    """Tests for _redact_sensitive processor."""

    @pytest.mark.parametrize("field", ["secret_key", "private_key", "seed", "signature"])
    def test_redacts_key_material(self, field):
        """Key material fields are redacted."""
        result = _redact_sensitive(None, None, {"event": "test", field: "3xAmpLe"})
        assert result[field] == "[REDACTED]"

    def test_redacts_case_insensitive(self):
        """Redacts fields case-insensitively."""
        result = _redact_sensitive(None, None, {"event": "test", "Secret_Key": "abc"})
        assert result["Secret_Key"] == "[REDACTED]"

    def test_preserves_public_fields(self):
        """Public key and identifiers are kept."""
        event_dict = {"event": "test", "public_key": "PK", "account_id": "alice"}
        result = _redact_sensitive(None, None, event_dict)
        assert result["public_key"] == "PK"
        assert result["account_id"] == "alice"


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def setup_method(self):
        """Reset structlog before each test."""
        structlog.reset_defaults()

    def test_configure_json_format(self):
        """Configures JSON format logging."""
        configure_logging(level="INFO", log_format="json")
        assert get_logger("test") is not None

    def test_configure_text_format(self):
        """Configures text format logging."""
        configure_logging(level="DEBUG", log_format="text")
        assert get_logger("test") is not None

    def test_configure_invalid_log_level_raises(self):
        """Invalid log level raises ValueError."""
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="INVALID", log_format="json")

    def test_reconfigure_keeps_single_handler(self):
        """Calling configure_logging twice installs one root handler."""
        configure_logging(level="INFO", log_format="json")
        configure_logging(level="DEBUG", log_format="text")

        ours = [h for h in logging.getLogger().handlers if h.get_name() == HANDLER_NAME]
        assert len(ours) == 1
        assert logging.getLogger().level == logging.DEBUG


class TestStdlibRecords:
    """Records from logging.getLogger() callers go through the structlog pipeline."""

    def setup_method(self):
        """Reset structlog before each test."""
        structlog.reset_defaults()

    def _lines(self, capsys, event: str) -> list[str]:
        return [line for line in capsys.readouterr().err.splitlines() if event in line]

    def test_stdlib_record_rendered_as_json(self, capsys):
        """extra fields are merged, secrets redacted and request id attached."""
        configure_logging(level="INFO", log_format="json")
        set_request_id("req-stdlib")
        try:
            logging.getLogger("nearlink.core.key_store").warning(
                "Malformed key file",
                extra={"account_id": "alice", "secret_key": "S3CRET"},
            )
        finally:
            clear_request_id()

        lines = self._lines(capsys, "Malformed key file")
        assert len(lines) == 1
        entry = json.loads(lines[0])
        assert entry["event"] == "Malformed key file"
        assert entry["logger"] == "nearlink.core.key_store"
        assert entry["level"] == "warning"
        assert entry["account_id"] == "alice"
        assert entry["secret_key"] == "[REDACTED]"
        assert entry["request_id"] == "req-stdlib"
        assert "timestamp" in entry
        assert "S3CRET" not in lines[0]

    def test_stdlib_record_below_level_dropped(self, capsys):
        """Records below the configured level are not emitted."""
        configure_logging(level="WARNING", log_format="json")

        logging.getLogger("nearlink.blockchain.client").info("Transaction submitted")

        assert self._lines(capsys, "Transaction submitted") == []


def test_logging_integration(capfd):
    """Structured log lines carry request id and redact secrets."""
    structlog.reset_defaults()

    configure_logging(level="INFO", log_format="json")
    set_request_id("req-integration")

    logger = get_logger("integration")
    logger.info("key imported", account_id="alice", secret_key="do-not-print")

    clear_request_id()

    captured = capfd.readouterr()
    output = captured.out + captured.err
    assert "req-integration" in output
    assert "key imported" in output
    assert "alice" in output
    assert "do-not-print" not in output
