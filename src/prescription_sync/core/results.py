# ============================================================================
# src/prescription_sync/core/results.py
# ============================================================================
"""
Terminal outcomes of an ingestion attempt.

Committed | Rejected | Deferred. Deferred is only produced when the payload
was parked in the offline queue instead of reaching the store.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class IngestionRejection(str, Enum):
    OWNERSHIP_MISMATCH = "ownership_mismatch"
    PARTIAL_PERSISTENCE_FAILURE = "partial_persistence_failure"
    NO_DATA_TO_PERSIST = "no_data_to_persist"


@dataclass(frozen=True)
class Committed:
    stored_count: int
    prescription_id: str


@dataclass(frozen=True)
class Rejected:
    reason: IngestionRejection
    detail: str = ""


@dataclass(frozen=True)
class Deferred:
    pending_id: int


IngestionResult = Union[Committed, Rejected, Deferred]
