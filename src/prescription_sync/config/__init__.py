# ============================================================================
# src/prescription_sync/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .base_config import store_settings
from .nfc_config import nfc_settings
from .geo_config import geo_settings
from .logging_config import logging_settings
