# ============================================================================
# src/prescription_sync/constants/prescription_status.py
# ============================================================================
"""
Prescription status values
- Canonical enum written to the store
- Explicit mapping for values found in older documents
"""

from enum import Enum
from typing import Any


class PrescriptionStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Lower-cased stored value -> status. Legacy Spanish values included.
STATUS_MAPPING = {
    "pending": PrescriptionStatus.PENDING,
    "pendiente": PrescriptionStatus.PENDING,
    "active": PrescriptionStatus.ACTIVE,
    "activa": PrescriptionStatus.ACTIVE,
    "completed": PrescriptionStatus.COMPLETED,
    "completada": PrescriptionStatus.COMPLETED,
    "cancelled": PrescriptionStatus.CANCELLED,
    "canceled": PrescriptionStatus.CANCELLED,
    "cancelada": PrescriptionStatus.CANCELLED,
}

DEFAULT_STATUS = PrescriptionStatus.PENDING


def parse_status(value: Any) -> PrescriptionStatus:
    """Map a stored status value to PrescriptionStatus, defaulting to PENDING."""
    if not isinstance(value, str):
        return DEFAULT_STATUS
    return STATUS_MAPPING.get(value.strip().lower(), DEFAULT_STATUS)
