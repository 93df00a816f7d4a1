# ============================================================================
# src/prescription_sync/nfc/session.py
# ============================================================================
"""
Tag Session

Owns the sequence of tag-presence events for one screen:
- Reading is a toggle (start_reading / stop_reading)
- Write and wipe are one-shot intents; the last request wins
- A pending write/wipe always beats passive reading on the next contact,
  since a single contact cannot tell "read" from "I just asked to write"
- Only one tag operation runs at a time; contacts during Processing are dropped

Codec and hardware failures stop here and become status strings.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from ..constants.status_messages import SessionStatus, DECODE_ERROR_STATUS
from ..core.payload import PrescriptionPayload
from ..core.results import (
    Committed,
    Deferred,
    IngestionRejection,
    IngestionResult,
    Rejected,
)
from ..utils.exceptions import ConfigurationError, DecodeError
from .codec import TagCodec
from .tag import TagHandle, read_tag, write_tag

logger = logging.getLogger(__name__)

EMPTY_PAYLOAD = "{}"


# ----------------------------------------------------------------------------
# Intents and states
# ----------------------------------------------------------------------------
@dataclass(frozen=True)
class ReadIntent:
    pass


@dataclass(frozen=True)
class WriteIntent:
    payload_json: str


@dataclass(frozen=True)
class WipeIntent:
    pass


TagIntent = Union[ReadIntent, WriteIntent, WipeIntent]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class AwaitingTag:
    intent: TagIntent


@dataclass(frozen=True)
class Processing:
    intent: TagIntent


SessionState = Union[Idle, AwaitingTag, Processing]


@dataclass(frozen=True)
class SessionSnapshot:
    """Observable session state for the UI layer."""
    supported: bool
    enabled: bool
    reading: bool
    status: str
    last_payload: Optional[str]
    parsed: Optional[PrescriptionPayload]
    is_saving: bool
    state: SessionState


class IngestionTarget(Protocol):
    async def ingest(self, payload: PrescriptionPayload, acting_user_id: str) -> IngestionResult:
        ...


# ----------------------------------------------------------------------------
# Session
# ----------------------------------------------------------------------------
class TagSession:
    """
    Single dispatch point for tag contacts.

    Args:
        codec: TagCodec to use; defaults to the configured MIME type
        ingestion: PrescriptionIngestor or OfflineReconciler used by
            persist_last_read()
    """

    def __init__(self, codec: Optional[TagCodec] = None, ingestion: Optional[IngestionTarget] = None):
        self.codec = codec or TagCodec()
        self.ingestion = ingestion

        self._supported = False
        self._enabled = False
        self._reading = False
        self._pending: Optional[TagIntent] = None
        self._active: Optional[TagIntent] = None
        self._lock = asyncio.Lock()

        self._status = ""
        self._last_payload: Optional[str] = None
        self._parsed: Optional[PrescriptionPayload] = None
        self._is_saving = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        if self._active is not None:
            return Processing(self._active)
        if self._pending is not None:
            return AwaitingTag(self._pending)
        if self._reading:
            return AwaitingTag(ReadIntent())
        return Idle()

    @property
    def status(self) -> str:
        return self._status

    @property
    def last_read(self) -> Optional[PrescriptionPayload]:
        return self._parsed

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            supported=self._supported,
            enabled=self._enabled,
            reading=self._reading,
            status=self._status,
            last_payload=self._last_payload,
            parsed=self._parsed,
            is_saving=self._is_saving,
            state=self.state,
        )

    def _set_status(self, status: str) -> None:
        self._status = status
        logger.info(f"[NFC] {status}")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def init(self, adapter_present: bool, adapter_enabled: bool) -> None:
        self._supported = adapter_present
        self._enabled = adapter_present and adapter_enabled

    def start_reading(self) -> None:
        self._reading = True
        self._set_status(SessionStatus.BRING_TAG_TO_READ)

    def stop_reading(self) -> None:
        self._reading = False
        self._set_status(SessionStatus.READING_STOPPED)

    def prepare_to_write(self, payload_json: str) -> None:
        if self._pending is not None:
            logger.debug(f"Replacing pending intent {self._pending!r} with write")
        self._pending = WriteIntent(payload_json)
        self._set_status(SessionStatus.BRING_TAG_TO_WRITE)

    def prepare_to_wipe(self) -> None:
        if self._pending is not None:
            logger.debug(f"Replacing pending intent {self._pending!r} with wipe")
        self._pending = WipeIntent()
        self._set_status(SessionStatus.BRING_TAG_TO_WIPE)

    def discard_last_read(self) -> None:
        self._last_payload = None
        self._parsed = None

    # ------------------------------------------------------------------
    # Tag contact
    # ------------------------------------------------------------------
    async def on_tag_presence(self, tag: TagHandle) -> bool:
        """
        Handle one tag contact.

        Returns:
            True if the contact was acted on, False if it was ignored
            (another operation in progress or nothing requested)
        """
        if self._lock.locked():
            logger.warning("Tag contact ignored: another tag operation is in progress")
            return False

        async with self._lock:
            if self._pending is not None:
                intent = self._pending
                self._pending = None
            elif self._reading:
                intent = ReadIntent()
            else:
                logger.debug("Tag contact ignored: no read or write requested")
                return False

            self._active = intent
            try:
                if isinstance(intent, WriteIntent):
                    await self._write(tag, intent.payload_json)
                elif isinstance(intent, WipeIntent):
                    await self._write(tag, EMPTY_PAYLOAD)
                else:
                    await self._read(tag)
            finally:
                self._active = None
            return True

    async def _write(self, tag: TagHandle, payload_json: str) -> None:
        message = self.codec.encode(payload_json)
        try:
            await asyncio.to_thread(write_tag, tag, message)
            self._set_status(SessionStatus.WRITE_SUCCEEDED)
        except DecodeError as e:
            logger.warning(f"Tag write refused: {e}")
            self._set_status(DECODE_ERROR_STATUS[e.kind])
        except Exception as e:
            logger.error(f"Tag write failed: {e}")
            self._set_status(f"Error: {e}")

    async def _read(self, tag: TagHandle) -> None:
        try:
            raw = await asyncio.to_thread(read_tag, tag)
            text, payload = self.codec.decode_text(raw)
            self._last_payload = text
            self._parsed = payload
            self._set_status(SessionStatus.PRESCRIPTION_READ)
        except DecodeError as e:
            logger.warning(f"Tag read rejected: {e}")
            self.discard_last_read()
            self._set_status(DECODE_ERROR_STATUS[e.kind])
        except Exception as e:
            logger.error(f"Tag read failed: {e}")
            self.discard_last_read()
            self._set_status(f"Error: {e}")
        finally:
            self._reading = False

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    async def persist_last_read(self, acting_user_id: str) -> IngestionResult:
        """Hand the last decoded prescription to the ingestion pipeline."""
        if self.ingestion is None:
            raise ConfigurationError("TagSession has no ingestion target configured")

        payload = self._parsed
        if payload is None:
            self._set_status(SessionStatus.NOTHING_TO_SAVE)
            return Rejected(IngestionRejection.NO_DATA_TO_PERSIST, "No prescription has been read")

        self._is_saving = True
        self._set_status(SessionStatus.VERIFYING_USER)
        try:
            result = await self.ingestion.ingest(payload, acting_user_id)
        finally:
            self._is_saving = False

        if isinstance(result, Committed):
            self._set_status(SessionStatus.SAVED)
            self.discard_last_read()
        elif isinstance(result, Deferred):
            self._set_status(SessionStatus.SAVED_LOCALLY)
            self.discard_last_read()
        else:
            self._set_status(SessionStatus.SAVE_FAILED)
        return result
