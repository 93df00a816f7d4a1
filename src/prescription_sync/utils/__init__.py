# ============================================================================
# src/prescription_sync/utils/__init__.py
# ============================================================================
"""
Utility modules for the prescription sync core.
"""

from .exceptions import (
    PrescriptionSyncError,
    DecodeError,
    DecodeErrorKind,
    StoreError,
    QueueError,
    GeoInputError,
    ConfigurationError,
)

from .logging import (
    setup_logging,
    get_logger,
    JsonFormatter,
    LogContext,
    log_performance,
)

__all__ = [
    # Exceptions
    'PrescriptionSyncError',
    'DecodeError',
    'DecodeErrorKind',
    'StoreError',
    'QueueError',
    'GeoInputError',
    'ConfigurationError',
    # Logging
    'setup_logging',
    'get_logger',
    'JsonFormatter',
    'LogContext',
    'log_performance',
]
