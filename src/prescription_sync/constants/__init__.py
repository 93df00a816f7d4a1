# ============================================================================
# src/prescription_sync/constants/__init__.py
# ============================================================================
"""
Convenient imports for all constants
"""

from .status_messages import SessionStatus, DECODE_ERROR_STATUS
from .prescription_status import PrescriptionStatus, STATUS_MAPPING, parse_status
