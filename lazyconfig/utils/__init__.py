"""
Utility modules for LazyConfig.

Provides common utilities including:
- Error handling with verbose logging
- Reader-writer locking for file I/O

Application helpers (hex salts, readable time spans, empty-setting scans)
live in ``lazyconfig.utils.extensions``.
"""

from .error_handling import (
    ErrorCategory,
    ErrorSeverity,
    ErrorContext,
    ErrorAggregator,
    get_error_aggregator,
    handle_error,
    log_security_error,
    log_filesystem_error,
    log_config_error,
)
from .locks import ReadWriteLock

__all__ = [
    # Error handling
    'ErrorCategory',
    'ErrorSeverity',
    'ErrorContext',
    'ErrorAggregator',
    'get_error_aggregator',
    'handle_error',
    'log_security_error',
    'log_filesystem_error',
    'log_config_error',
    # Locking
    'ReadWriteLock',
]
