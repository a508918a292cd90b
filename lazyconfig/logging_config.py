"""
Logging Configuration for LazyConfig.

Provides centralized logging configuration with a verbose toggle, optional
log file and structured (JSON lines) output. Library modules only create
module-level loggers; the embedding application or the CLI decides whether
and how they are emitted.

Usage:
    from lazyconfig.logging_config import setup_logging, get_logger

    setup_logging(verbose=True)
    logger = get_logger('lazyconfig.config.store')
    logger.info("Settings loaded")
"""

import os
import sys
import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional


# =============================================================================
# THREAD-SAFE CONFIGURATION STATE
# =============================================================================

@dataclass
class LoggingState:
    """Thread-safe logging configuration state."""
    verbose: bool = False
    _lock: threading.RLock = field(default_factory=threading.RLock)


_state = LoggingState()


# =============================================================================
# CUSTOM FORMATTER
# =============================================================================

class LazyConfigFormatter(logging.Formatter):
    """Formatter with color support and structured output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33;1m',  # Bold yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[31;1m', # Bold red
        'RESET': '\033[0m',
    }

    def __init__(self, use_colors: bool = True, json_format: bool = False, stream=None):
        stream = stream if stream is not None else sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()
        self.json_format = json_format
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        if self.json_format:
            return self._format_json(record)
        return self._format_text(record)

    def _format_text(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
        level_name = record.levelname

        if self.use_colors:
            color = self.COLORS.get(level_name, '')
            reset = self.COLORS['RESET']
            level_str = f"{color}{level_name:8}{reset}"
        else:
            level_str = f"{level_name:8}"

        component = f"[{self._extract_component(record.name)}]"
        text = f"{timestamp} {level_str} {component:14} {record.getMessage()}"

        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text

    def _format_json(self, record: logging.LogRecord) -> str:
        data: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'component': self._extract_component(record.name),
            'message': record.getMessage(),
        }

        if record.exc_info:
            data['exception'] = self.formatException(record.exc_info)

        return json.dumps(data, ensure_ascii=False)

    def _extract_component(self, logger_name: str) -> str:
        """lazyconfig.config.store -> store"""
        parts = logger_name.split('.')
        if parts[0] == 'lazyconfig' and len(parts) >= 2:
            return parts[-1]
        return parts[0] or 'root'


# =============================================================================
# SETUP AND CONFIGURATION
# =============================================================================

def setup_logging(
    verbose: bool = False,
    log_file: Optional[str] = None,
    console: bool = True,
    json_format: bool = False,
    stream=None,
) -> None:
    """
    Initialize the logging system.

    Args:
        verbose: Enable DEBUG output
        log_file: Optional file path for log output
        console: Enable console output
        json_format: Use JSON format for logs
        stream: Console stream (stderr by default)
    """
    with _state._lock:
        _state.verbose = verbose

        base_level = logging.DEBUG if verbose else logging.INFO

        root = logging.getLogger()
        root.setLevel(base_level)

        for handler in root.handlers[:]:
            root.removeHandler(handler)

        if console:
            console_stream = stream if stream is not None else sys.stderr
            console_handler = logging.StreamHandler(console_stream)
            console_handler.setLevel(base_level)
            console_handler.setFormatter(LazyConfigFormatter(
                use_colors=True,
                json_format=json_format,
                stream=console_stream,
            ))
            root.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(base_level)
            file_handler.setFormatter(LazyConfigFormatter(
                use_colors=False,
                json_format=json_format,
            ))
            root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger, namespaced under lazyconfig when given a bare name."""
    if not name.startswith('lazyconfig'):
        name = f"lazyconfig.{name}"
    return logging.getLogger(name)


def is_verbose() -> bool:
    """Check if verbose mode is enabled."""
    return _state.verbose


# =============================================================================
# ENVIRONMENT VARIABLE CONFIGURATION
# =============================================================================

def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in ('1', 'true', 'yes')


def configure_from_environment(verbose: bool = False) -> None:
    """Configure logging from LAZYCONFIG_* environment variables."""
    setup_logging(
        verbose=verbose or _env_flag('LAZYCONFIG_VERBOSE'),
        log_file=os.environ.get('LAZYCONFIG_LOG_FILE'),
        console=not _env_flag('LAZYCONFIG_LOG_NO_CONSOLE'),
        json_format=_env_flag('LAZYCONFIG_LOG_JSON'),
    )


__all__ = [
    'LoggingState',
    'LazyConfigFormatter',
    'setup_logging',
    'get_logger',
    'is_verbose',
    'configure_from_environment',
]
