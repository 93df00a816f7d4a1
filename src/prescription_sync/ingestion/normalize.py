# ============================================================================
# src/prescription_sync/ingestion/normalize.py
# ============================================================================
"""
Normalization helpers for medication lines
- Numeric magnitude from free text ("50mg" -> 50)
- Issuance timestamp parsing with a silent fallback to now
- Calendar-day treatment windows
"""

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

# Stored as 32-bit integers by the mobile clients
MAX_STORED_INT = 2**31 - 1


def extract_digits(text: Optional[str], default: int) -> int:
    """
    Keep only the digit characters of ``text`` and read them as an integer.

    "50mg" -> 50, "1-2 tabs" -> 12, "abc" -> default.
    """
    digits = "".join(ch for ch in (text or "") if ch.isdecimal())
    if not digits:
        return default
    value = int(digits)
    if value > MAX_STORED_INT:
        return default
    return value


def parse_issued_at(text: Optional[str], fmt: str, now: Optional[datetime] = None) -> datetime:
    """
    Parse the payload issuance timestamp as UTC.

    A malformed timestamp must not block persistence, so failures fall back
    to ``now`` (current UTC time when not given).
    """
    try:
        return datetime.strptime(text or "", fmt).replace(tzinfo=timezone.utc)
    except ValueError:
        fallback = now or datetime.now(timezone.utc)
        logger.warning(f"Unparseable issuedAt '{text}', using {fallback.isoformat()}")
        return fallback


@lru_cache(maxsize=32)
def get_zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def add_calendar_days(start: datetime, days: int, zone: str = "UTC") -> datetime:
    """
    Add whole calendar days in ``zone``: same wall-clock time N days later,
    so a DST change inside the window does not shift the end by an hour.
    """
    tz = get_zone(zone)
    local = start.astimezone(tz)
    end_wall = local.replace(tzinfo=None) + timedelta(days=days)
    end_local = end_wall.replace(tzinfo=tz)
    return end_local.astimezone(start.tzinfo or timezone.utc)
