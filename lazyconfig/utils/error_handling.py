"""
Error Handling Utilities for LazyConfig

Reports the failures the store recovers from locally (unreadable or
unwritable settings files) and the cipher faults it logs before re-raising.
Each report carries a category and severity, and repeats of the same failure
within a short window are logged as one-line duplicates instead of full
reports.

USAGE:
    from lazyconfig.utils.error_handling import log_filesystem_error

    try:
        path.write_text(content)
    except OSError as e:
        log_filesystem_error(e, "save_settings", path=str(path))
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from lazyconfig.constants import Defaults

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of errors for proper handling and reporting."""
    # Cipher and key material errors
    SECURITY = "security"

    # Settings file read/write errors
    FILESYSTEM = "filesystem"

    # Malformed settings content
    CONFIG = "configuration"

    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_LOG_LEVELS = {
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


@dataclass
class ErrorContext:
    """One reported failure."""
    error: Exception
    category: ErrorCategory
    severity: ErrorSeverity
    operation: str
    additional_context: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        """Identity used for deduplication."""
        return f"{self.category.value}:{type(self.error).__name__}:{self.operation}"

    def format_log_message(self) -> str:
        lines = [
            f"ERROR [{self.severity.value.upper()}] in {self.operation}",
            f"  Category: {self.category.value}",
            f"  Type: {type(self.error).__name__}",
            f"  Message: {self.error}",
        ]
        for name, value in self.additional_context.items():
            lines.append(f"  {name}: {value}")
        return '\n'.join(lines)


class ErrorAggregator:
    """
    Counts reported failures per (category, type, operation).

    A failure seen again within the dedup window is counted but not
    reported in full.
    """

    def __init__(self, dedup_window_seconds: int = Defaults.ERROR_DEDUP_WINDOW):
        self._lock = threading.Lock()
        self._dedup_window = dedup_window_seconds
        self._counts: Dict[str, int] = {}
        self._last_seen: Dict[str, float] = {}

    def add_error(self, context: ErrorContext) -> bool:
        """Record a failure. Returns False if it is a duplicate."""
        now = time.monotonic()
        with self._lock:
            self._counts[context.key] = self._counts.get(context.key, 0) + 1
            last = self._last_seen.get(context.key)
            if last is not None and now - last < self._dedup_window:
                return False
            self._last_seen[context.key] = now
            return True

    def get_error_summary(self) -> Dict[str, int]:
        """Occurrences per failure identity."""
        with self._lock:
            return dict(self._counts)

    def clear(self):
        with self._lock:
            self._counts.clear()
            self._last_seen.clear()


# Global error aggregator
_global_aggregator = ErrorAggregator()


def get_error_aggregator() -> ErrorAggregator:
    """Get the global error aggregator instance."""
    return _global_aggregator


def determine_severity(error: Exception, category: ErrorCategory) -> ErrorSeverity:
    if category == ErrorCategory.SECURITY:
        return ErrorSeverity.CRITICAL
    if isinstance(error, FileNotFoundError):
        return ErrorSeverity.WARNING
    return ErrorSeverity.ERROR


def handle_error(
    error: Exception,
    operation: str,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    severity: Optional[ErrorSeverity] = None,
    additional_context: Optional[Dict[str, Any]] = None,
) -> ErrorContext:
    """
    Log an error and track it in the global aggregator.

    Args:
        error: The exception that occurred
        operation: Name of the operation that failed
        category: Category of the error
        severity: Severity level (auto-determined if not provided)
        additional_context: Extra fields for the log message

    Returns:
        ErrorContext describing the report
    """
    if severity is None:
        severity = determine_severity(error, category)

    context = ErrorContext(
        error=error,
        category=category,
        severity=severity,
        operation=operation,
        additional_context=additional_context or {},
    )

    level = _LOG_LEVELS[severity]
    if _global_aggregator.add_error(context):
        logger.log(level, context.format_log_message())
    else:
        logger.log(level, f"[DEDUPLICATED] {operation}: {type(error).__name__}: {error}")
    return context


def log_security_error(error: Exception, operation: str, **context) -> ErrorContext:
    """Log a cipher or key related error with critical severity."""
    return handle_error(error, operation, ErrorCategory.SECURITY, additional_context=context)


def log_filesystem_error(error: Exception, operation: str, **context) -> ErrorContext:
    """Log a settings file error."""
    return handle_error(error, operation, ErrorCategory.FILESYSTEM, additional_context=context)


def log_config_error(error: Exception, operation: str, **context) -> ErrorContext:
    """Log malformed settings content."""
    return handle_error(error, operation, ErrorCategory.CONFIG, additional_context=context)


__all__ = [
    'ErrorCategory',
    'ErrorSeverity',
    'ErrorContext',
    'ErrorAggregator',
    'get_error_aggregator',
    'determine_severity',
    'handle_error',
    'log_security_error',
    'log_filesystem_error',
    'log_config_error',
]
