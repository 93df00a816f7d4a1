# src/prescription_sync/ingestion/__init__.py

from .ingestor import PrescriptionIngestor, IngestionStage, ResolvedLine
from .normalize import extract_digits, parse_issued_at, add_calendar_days
from .prescriptions import PrescriptionRepository

__all__ = [
    "PrescriptionIngestor",
    "IngestionStage",
    "ResolvedLine",
    "extract_digits",
    "parse_issued_at",
    "add_calendar_days",
    "PrescriptionRepository",
]
