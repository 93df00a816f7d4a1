# ============================================================================
# src/prescription_sync/nfc/codec.py
# ============================================================================
"""
Tag Codec

Converts between the prescription payload and the bytes stored on a tag.

Decoding is tolerant of metadata in front of the JSON document: physical
records may carry type or language bytes before the payload, so the
document starts at the first '{' byte. A full NDEF message whose header
bytes contain a '{' is retried inside its first record. Anything that still
does not parse as a prescription is a malformed payload.
"""

import logging
from typing import Optional, Tuple

from pydantic import ValidationError

from ..config.nfc_config import nfc_settings
from ..core.payload import PrescriptionPayload
from ..utils.exceptions import DecodeError, DecodeErrorKind
from . import ndef

logger = logging.getLogger(__name__)

JSON_OBJECT_START = ord("{")


class TagCodec:
    """Encode/decode prescription payloads for a given MIME type."""

    def __init__(self, mime_type: Optional[str] = None):
        self.mime_type = mime_type or nfc_settings.mime_type

    def extract_json(self, raw: bytes) -> str:
        """
        Locate the JSON document inside raw bytes, starting at the first '{'.

        Raises:
            DecodeError: MALFORMED_PAYLOAD if there is no '{' or the bytes
                from there are not UTF-8
        """
        raw = bytes(raw or b"")
        start = raw.find(bytes([JSON_OBJECT_START]))
        if start == -1:
            raise DecodeError(DecodeErrorKind.MALFORMED_PAYLOAD, "No JSON object found in tag payload")

        try:
            return raw[start:].decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(DecodeErrorKind.MALFORMED_PAYLOAD, f"Payload is not UTF-8: {e}") from e

    def _parse(self, raw: bytes) -> Tuple[str, PrescriptionPayload]:
        text = self.extract_json(raw)
        try:
            return text, PrescriptionPayload.model_validate_json(text)
        except ValidationError as e:
            logger.debug(f"Tag payload rejected: {e.error_count()} validation errors")
            raise DecodeError(DecodeErrorKind.MALFORMED_PAYLOAD, "Tag payload is not a prescription") from e

    def decode_text(self, raw: bytes) -> Tuple[str, PrescriptionPayload]:
        """
        Decode raw tag bytes, returning the JSON text alongside the payload.

        The bytes from the first '{' are tried first. Only when that fails
        and the bytes frame a full message written by encode() is the first
        record's payload tried, for length bytes that happen to be '{'.

        Raises:
            DecodeError: MALFORMED_PAYLOAD on any parse or shape failure
        """
        raw = bytes(raw or b"")
        try:
            return self._parse(raw)
        except DecodeError:
            record_payload = ndef.first_record_payload(raw)
            if record_payload is None:
                raise
            logger.debug("Retrying decode inside the first NDEF record")
            return self._parse(record_payload)

    def decode(self, raw: bytes) -> PrescriptionPayload:
        """
        Decode raw tag bytes into a PrescriptionPayload.

        Raises:
            DecodeError: MALFORMED_PAYLOAD on any parse or shape failure
        """
        return self.decode_text(raw)[1]

    def encode(self, payload_json: str, mime_type: Optional[str] = None) -> bytes:
        """Wrap a JSON string as a single MIME record NDEF message."""
        record = ndef.create_mime_record(mime_type or self.mime_type, payload_json.encode("utf-8"))
        return ndef.encode_message([record])

    @staticmethod
    def fits(message: bytes, capacity: int) -> bool:
        return len(message) <= capacity


_default_codec: Optional[TagCodec] = None


def _codec() -> TagCodec:
    global _default_codec
    if _default_codec is None:
        _default_codec = TagCodec()
    return _default_codec


def decode(raw: bytes) -> PrescriptionPayload:
    """Convenience function using the configured MIME type."""
    return _codec().decode(raw)


def encode(payload_json: str, mime_type: Optional[str] = None) -> bytes:
    """Convenience function using the configured MIME type."""
    return _codec().encode(payload_json, mime_type)
