"""
Tests for error reporting and aggregation.
"""

import logging
import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lazyconfig.errors import DecryptionFailed, SaveFailure
from lazyconfig.utils.error_handling import (
    ErrorAggregator,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    determine_severity,
    get_error_aggregator,
    handle_error,
    log_config_error,
    log_filesystem_error,
    log_security_error,
)


def _context(operation="save_settings"):
    return ErrorContext(
        error=OSError("disk full"),
        category=ErrorCategory.FILESYSTEM,
        severity=ErrorSeverity.ERROR,
        operation=operation,
    )


class TestDetermineSeverity:

    def test_security_is_critical(self):
        assert determine_severity(ValueError(), ErrorCategory.SECURITY) is ErrorSeverity.CRITICAL

    def test_missing_file_is_warning(self):
        assert determine_severity(FileNotFoundError(), ErrorCategory.FILESYSTEM) is ErrorSeverity.WARNING

    def test_default_is_error(self):
        assert determine_severity(OSError(), ErrorCategory.FILESYSTEM) is ErrorSeverity.ERROR


class TestErrorContext:

    def test_log_message(self):
        ctx = ErrorContext(
            error=SaveFailure("/tmp/settings.config", "disk full"),
            category=ErrorCategory.FILESYSTEM,
            severity=ErrorSeverity.ERROR,
            operation="save_settings",
            additional_context={"path": "/tmp/settings.config"},
        )
        message = ctx.format_log_message()
        assert message.startswith("ERROR [ERROR] in save_settings")
        assert "Type: SaveFailure" in message
        assert "path: /tmp/settings.config" in message

    def test_key(self):
        assert _context().key == "filesystem:OSError:save_settings"


class TestErrorAggregator:

    def test_deduplicates_within_window(self):
        aggregator = ErrorAggregator(dedup_window_seconds=60)
        assert aggregator.add_error(_context()) is True
        assert aggregator.add_error(_context()) is False
        assert aggregator.get_error_summary() == {"filesystem:OSError:save_settings": 2}

    def test_distinct_operations_reported(self):
        aggregator = ErrorAggregator()
        assert aggregator.add_error(_context("save_settings"))
        assert aggregator.add_error(_context("load_settings"))
        assert len(aggregator.get_error_summary()) == 2

    def test_zero_window_reports_everything(self):
        aggregator = ErrorAggregator(dedup_window_seconds=0)
        assert aggregator.add_error(_context())
        assert aggregator.add_error(_context())

    def test_clear(self):
        aggregator = ErrorAggregator()
        aggregator.add_error(_context())
        aggregator.clear()
        assert aggregator.get_error_summary() == {}
        assert aggregator.add_error(_context())


class TestHandleError:

    def test_logs_and_records(self, caplog):
        with caplog.at_level(logging.ERROR):
            ctx = log_filesystem_error(OSError("disk full"), "save_settings", path="x")
        assert ctx.category is ErrorCategory.FILESYSTEM
        assert get_error_aggregator().get_error_summary() == {"filesystem:OSError:save_settings": 1}
        assert "save_settings" in caplog.text

    def test_duplicate_is_marked(self, caplog):
        with caplog.at_level(logging.ERROR):
            log_filesystem_error(OSError("disk full"), "save_settings")
            log_filesystem_error(OSError("disk full"), "save_settings")
        assert "[DEDUPLICATED] save_settings" in caplog.text

    def test_security_errors_critical(self, caplog):
        with caplog.at_level(logging.CRITICAL):
            ctx = log_security_error(DecryptionFailed("APIKey"), "decrypt_setting", key="APIKey")
        assert ctx.severity is ErrorSeverity.CRITICAL
        assert any(r.levelno == logging.CRITICAL for r in caplog.records)

    def test_config_errors(self):
        assert log_config_error(ValueError("bad"), "load_settings").category is ErrorCategory.CONFIG

    def test_missing_file_logged_as_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            handle_error(FileNotFoundError("gone"), "load_settings", ErrorCategory.FILESYSTEM)
        assert caplog.records[-1].levelno == logging.WARNING

    def test_explicit_severity(self):
        ctx = handle_error(ValueError("bad"), "parse", severity=ErrorSeverity.WARNING)
        assert ctx.severity is ErrorSeverity.WARNING
        assert ctx.category is ErrorCategory.UNKNOWN
