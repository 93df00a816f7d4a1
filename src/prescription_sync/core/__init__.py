# src/prescription_sync/core/__init__.py

from .payload import MedicationLine, PrescriptionPayload
from .records import (
    ResolvedMedication,
    NormalizedMedicationRecord,
    PrescriptionDocument,
    PharmacyPoint,
    RankedPoint,
)
from .results import Committed, Rejected, Deferred, IngestionRejection, IngestionResult
from .store import DocumentStore, FirestoreDocumentStore, StoredDocument

__all__ = [
    "MedicationLine",
    "PrescriptionPayload",
    "ResolvedMedication",
    "NormalizedMedicationRecord",
    "PrescriptionDocument",
    "PharmacyPoint",
    "RankedPoint",
    "Committed",
    "Rejected",
    "Deferred",
    "IngestionRejection",
    "IngestionResult",
    "DocumentStore",
    "FirestoreDocumentStore",
    "StoredDocument",
]
