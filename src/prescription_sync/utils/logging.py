# ============================================================================
# src/prescription_sync/utils/logging.py
# ============================================================================
"""
Logging setup for the prescription sync core.

- setup_logging(): root handlers from LoggingSettings (or explicit args)
- JsonFormatter: one JSON object per line, with LogContext fields
- LogContext: attach user / prescription / queue ids to every record
- log_performance: duration logging for sync and async callables
"""

import asyncio
import functools
import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Chatty transport loggers pulled in by firebase_admin
NOISY_LOGGERS = ("google", "urllib3", "grpc")

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    format_json: Optional[bool] = None,
) -> None:
    """
    Configure the root logger.

    Arguments left as None are taken from logging_settings
    (LOG_LEVEL, LOG_FILE, LOG_FORMAT_JSON).
    """
    from ..config.logging_config import logging_settings

    level = level or logging_settings.LOG_LEVEL
    log_file = log_file or logging_settings.LOG_FILE
    if format_json is None:
        format_json = logging_settings.LOG_FORMAT_JSON

    formatter = JsonFormatter() if format_json else logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=getattr(logging, level.upper()), handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    CONTEXT_FIELDS = ('user_id', 'prescription_id', 'pending_id', 'intent')

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update({
            key: getattr(record, key)
            for key in self.CONTEXT_FIELDS
            if hasattr(record, key)
        })
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Stamp context fields on every record created inside the block.

    The record factory is process-wide, so the fields also reach records
    from other modules logged while the block is active.
    """

    def __init__(self, logger: logging.Logger, **context):
        self.logger = logger
        self.context = context
        self._previous = None

    def __enter__(self):
        previous = self._previous = logging.getLogRecordFactory()
        context = self.context

        def factory(*args, **kwargs):
            record = previous(*args, **kwargs)
            record.__dict__.update(context)
            return record

        logging.setLogRecordFactory(factory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logging.setLogRecordFactory(self._previous)


def _report(logger: logging.Logger, operation: str, started: float, error: Optional[BaseException] = None):
    elapsed = time.perf_counter() - started
    if error is None:
        logger.info(f"{operation} completed in {elapsed:.3f}s")
    else:
        logger.error(f"{operation} failed after {elapsed:.3f}s: {error}")


def log_performance(logger: logging.Logger, operation: str):
    """Log how long the decorated function (or coroutine function) took."""
    def decorator(func):
        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _report(logger, operation, started, e)
                    raise
                _report(logger, operation, started)
                return result
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _report(logger, operation, started, e)
                raise
            _report(logger, operation, started)
            return result
        return wrapper
    return decorator
