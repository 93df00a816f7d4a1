# src/prescription_sync/catalog/__init__.py

from .cache import MedicationCatalogCache
from .resolver import MedicationResolver, UNKNOWN_MEDICATION_ID

__all__ = ["MedicationCatalogCache", "MedicationResolver", "UNKNOWN_MEDICATION_ID"]
