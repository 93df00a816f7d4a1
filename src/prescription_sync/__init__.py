# ============================================================================
# src/prescription_sync/__init__.py
# ============================================================================
"""
Prescription sync core: NFC prescription tags, catalog resolution,
ingestion into the document store and nearest-pharmacy ranking.
"""

__version__ = "0.1.0"
