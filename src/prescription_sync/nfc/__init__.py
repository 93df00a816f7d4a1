# src/prescription_sync/nfc/__init__.py

from .codec import TagCodec, decode, encode
from .ndef import NdefRecord, encode_message, parse_message
from .tag import (
    TagHandle,
    NdefTechnology,
    FormatableTechnology,
    connected,
    read_tag,
    write_tag,
)
from .session import (
    TagSession,
    SessionSnapshot,
    Idle,
    AwaitingTag,
    Processing,
    ReadIntent,
    WriteIntent,
    WipeIntent,
)

__all__ = [
    "TagCodec",
    "decode",
    "encode",
    "NdefRecord",
    "encode_message",
    "parse_message",
    "TagHandle",
    "NdefTechnology",
    "FormatableTechnology",
    "connected",
    "read_tag",
    "write_tag",
    "TagSession",
    "SessionSnapshot",
    "Idle",
    "AwaitingTag",
    "Processing",
    "ReadIntent",
    "WriteIntent",
    "WipeIntent",
]
