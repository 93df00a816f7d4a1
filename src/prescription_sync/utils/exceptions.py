# ============================================================================
# src/prescription_sync/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the prescription sync core.
"""

from enum import Enum


class PrescriptionSyncError(Exception):
    """Base exception for all prescription sync errors."""
    pass


class DecodeErrorKind(str, Enum):
    MALFORMED_PAYLOAD = "malformed_payload"
    INSUFFICIENT_CAPACITY = "insufficient_capacity"
    UNSUPPORTED_TAG = "unsupported_tag"
    READ_ONLY_TAG = "read_only_tag"


class DecodeError(PrescriptionSyncError):
    """Tag payload could not be decoded, or the tag refused the write."""
    def __init__(self, kind: DecodeErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind


class StoreError(PrescriptionSyncError):
    """Error talking to the remote document store."""
    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class QueueError(PrescriptionSyncError):
    """Error with the local pending-prescription queue."""
    pass


class GeoInputError(PrescriptionSyncError, ValueError):
    """User location is not a usable coordinate pair."""
    def __init__(self, message: str, latitude: float, longitude: float):
        super().__init__(message)
        self.latitude = latitude
        self.longitude = longitude


class ConfigurationError(PrescriptionSyncError):
    """Invalid configuration."""
    pass
