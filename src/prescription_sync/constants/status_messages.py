# ============================================================================
# src/prescription_sync/constants/status_messages.py
# ============================================================================
"""
User-visible status strings reported by the tag session.
"""

from ..utils.exceptions import DecodeErrorKind


class SessionStatus:
    BRING_TAG_TO_READ = "Bring the tag closer..."
    READING_STOPPED = "Reading stopped"
    BRING_TAG_TO_WRITE = "Bring the tag closer to write"
    BRING_TAG_TO_WIPE = "Bring the tag closer to wipe"
    PRESCRIPTION_READ = "Prescription read"
    EMPTY_OR_INVALID = "Empty or invalid format"
    WRITE_SUCCEEDED = "Write succeeded"
    READ_ONLY_TAG = "Read-only tag"
    INSUFFICIENT_CAPACITY = "Insufficient capacity"
    UNSUPPORTED_TAG = "Unsupported tag"
    VERIFYING_USER = "Verifying user..."
    SAVED = "Saved"
    SAVED_LOCALLY = "Saved locally, will sync when online"
    SAVE_FAILED = "Save failed"
    NOTHING_TO_SAVE = "No read data to save"


DECODE_ERROR_STATUS = {
    DecodeErrorKind.MALFORMED_PAYLOAD: SessionStatus.EMPTY_OR_INVALID,
    DecodeErrorKind.INSUFFICIENT_CAPACITY: SessionStatus.INSUFFICIENT_CAPACITY,
    DecodeErrorKind.UNSUPPORTED_TAG: SessionStatus.UNSUPPORTED_TAG,
    DecodeErrorKind.READ_ONLY_TAG: SessionStatus.READ_ONLY_TAG,
}
