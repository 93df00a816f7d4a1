# ============================================================================
# src/prescription_sync/nfc/tag.py
# ============================================================================
"""
Physical tag access.

A discovered tag exposes at most two technologies: an NDEF-formatted one
(read/write) and an NDEF-formatable one (blank tags, write by formatting).
Platform bindings implement the two abstract classes; the functions here
are blocking and meant to run off the event loop.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, TypeVar

from ..utils.exceptions import DecodeError, DecodeErrorKind
from .codec import TagCodec

logger = logging.getLogger(__name__)


class TagTechnology(ABC):

    @abstractmethod
    def connect(self) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class NdefTechnology(TagTechnology):

    @property
    @abstractmethod
    def is_writable(self) -> bool:
        pass

    @property
    @abstractmethod
    def max_size(self) -> int:
        """Declared capacity in bytes."""
        pass

    @abstractmethod
    def read_message(self) -> Optional[bytes]:
        """Raw NDEF message, or None when the tag holds none."""
        pass

    @abstractmethod
    def write_message(self, message: bytes) -> None:
        pass


class FormatableTechnology(TagTechnology):

    @abstractmethod
    def format(self, message: bytes) -> None:
        """Format the tag as NDEF and write the first message."""
        pass


@dataclass
class TagHandle:
    tag_id: bytes
    ndef: Optional[NdefTechnology] = None
    formatable: Optional[FormatableTechnology] = None


T = TypeVar("T", bound=TagTechnology)


@contextmanager
def connected(tech: T) -> Iterator[T]:
    """Hold the tag channel for the duration of the block; always released."""
    try:
        tech.connect()
        yield tech
    finally:
        try:
            tech.close()
        except Exception as e:
            logger.warning(f"Closing tag channel failed: {e}")


def read_tag(tag: TagHandle) -> bytes:
    """
    Read the raw NDEF message from a tag.

    Raises:
        DecodeError: UNSUPPORTED_TAG without NDEF, MALFORMED_PAYLOAD when empty
    """
    if tag.ndef is None:
        raise DecodeError(DecodeErrorKind.UNSUPPORTED_TAG, "Tag is not NDEF compatible")

    with connected(tag.ndef) as ndef_tech:
        message = ndef_tech.read_message()

    if not message:
        raise DecodeError(DecodeErrorKind.MALFORMED_PAYLOAD, "Tag holds no NDEF message")
    return message


def write_tag(tag: TagHandle, message: bytes) -> None:
    """
    Write an encoded NDEF message, formatting blank tags when needed.

    Raises:
        DecodeError: READ_ONLY_TAG, INSUFFICIENT_CAPACITY or UNSUPPORTED_TAG
    """
    if tag.ndef is not None:
        with connected(tag.ndef) as ndef_tech:
            if not ndef_tech.is_writable:
                raise DecodeError(DecodeErrorKind.READ_ONLY_TAG, "Tag is read-only")
            if not TagCodec.fits(message, ndef_tech.max_size):
                raise DecodeError(
                    DecodeErrorKind.INSUFFICIENT_CAPACITY,
                    f"Message of {len(message)} bytes exceeds tag capacity of {ndef_tech.max_size}",
                )
            ndef_tech.write_message(message)
        return

    if tag.formatable is not None:
        with connected(tag.formatable) as fmt:
            fmt.format(message)
        return

    raise DecodeError(DecodeErrorKind.UNSUPPORTED_TAG, "Tag supports neither NDEF nor formatting")
