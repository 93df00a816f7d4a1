# ============================================================================
# src/prescription_sync/nfc/ndef.py
# ============================================================================
"""
NDEF message framing.

Only what the prescription tag needs: building a single MIME record message
and splitting a message back into records. Chunked records are rejected.

Record header byte:
    MB 0x80 | ME 0x40 | CF 0x20 | SR 0x10 | IL 0x08 | TNF 0x07
"""

from dataclasses import dataclass
from typing import List, Optional
import struct

FLAG_MB = 0x80
FLAG_ME = 0x40
FLAG_CF = 0x20
FLAG_SR = 0x10
FLAG_IL = 0x08
TNF_MASK = 0x07

TNF_EMPTY = 0x00
TNF_WELL_KNOWN = 0x01
TNF_MIME_MEDIA = 0x02

# TNF 0x07 is reserved
MAX_TNF = 0x06


@dataclass(frozen=True)
class NdefRecord:
    tnf: int
    type: bytes
    payload: bytes
    id: bytes = b""


def encode_record(record: NdefRecord, first: bool = True, last: bool = True) -> bytes:
    """Serialize one record, short form when the payload fits in a byte."""
    header = record.tnf & TNF_MASK
    if first:
        header |= FLAG_MB
    if last:
        header |= FLAG_ME

    short = len(record.payload) < 256
    if short:
        header |= FLAG_SR
    if record.id:
        header |= FLAG_IL

    out = bytearray([header, len(record.type)])
    if short:
        out.append(len(record.payload))
    else:
        out += struct.pack(">I", len(record.payload))
    if record.id:
        out.append(len(record.id))
    out += record.type
    out += record.id
    out += record.payload
    return bytes(out)


def encode_message(records: List[NdefRecord]) -> bytes:
    if not records:
        raise ValueError("An NDEF message needs at least one record")
    last = len(records) - 1
    return b"".join(
        encode_record(r, first=(i == 0), last=(i == last))
        for i, r in enumerate(records)
    )


def create_mime_record(mime_type: str, payload: bytes) -> NdefRecord:
    return NdefRecord(tnf=TNF_MIME_MEDIA, type=mime_type.encode("ascii"), payload=payload)


def parse_message(data: bytes) -> List[NdefRecord]:
    """
    Split a raw NDEF message into records.

    Raises:
        ValueError: when the bytes are not exactly one well-formed message
    """
    records: List[NdefRecord] = []
    pos = 0
    size = len(data)

    while pos < size:
        header = data[pos]
        pos += 1

        if not records and not header & FLAG_MB:
            raise ValueError("First record lacks the message-begin flag")
        if records and header & FLAG_MB:
            raise ValueError("Message-begin flag on a non-first record")
        if header & FLAG_CF:
            raise ValueError("Chunked records are not supported")
        tnf = header & TNF_MASK
        if tnf > MAX_TNF:
            raise ValueError(f"Reserved TNF {tnf}")

        if pos >= size:
            raise ValueError("Truncated record header")
        type_length = data[pos]
        pos += 1

        if header & FLAG_SR:
            if pos + 1 > size:
                raise ValueError("Truncated payload length")
            payload_length = data[pos]
            pos += 1
        else:
            if pos + 4 > size:
                raise ValueError("Truncated payload length")
            payload_length = struct.unpack(">I", data[pos:pos + 4])[0]
            pos += 4

        id_length = 0
        if header & FLAG_IL:
            if pos >= size:
                raise ValueError("Truncated id length")
            id_length = data[pos]
            pos += 1

        end = pos + type_length + id_length + payload_length
        if end > size:
            raise ValueError("Record runs past the end of the message")

        record_type = bytes(data[pos:pos + type_length])
        pos += type_length
        record_id = bytes(data[pos:pos + id_length])
        pos += id_length
        payload = bytes(data[pos:pos + payload_length])
        pos += payload_length

        records.append(NdefRecord(tnf=tnf, type=record_type, payload=payload, id=record_id))

        if header & FLAG_ME:
            if pos != size:
                raise ValueError("Trailing bytes after message-end record")
            return records

    raise ValueError("Message has no message-end record")


def first_record_payload(data: bytes) -> Optional[bytes]:
    """Payload of the first record, or None when data is not an NDEF message."""
    try:
        records = parse_message(data)
    except ValueError:
        return None
    return records[0].payload
