# ============================================================================
# src/prescription_sync/ingestion/prescriptions.py
# ============================================================================
"""
Prescription Repository

Operations on prescriptions that were already persisted:
- toggle active / inactive
- delete, cascading to the medication sub-records
- list active prescriptions with their records
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional

from ..config.base_config import store_settings, StoreSettings
from ..core.records import NormalizedMedicationRecord, PrescriptionDocument
from ..core.store import DocumentStore

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class PrescriptionRepository:

    def __init__(self, store: DocumentStore, settings: Optional[StoreSettings] = None):
        self.store = store
        self.settings = settings or store_settings

    def _prescription_path(self, user_id: str, prescription_id: str) -> str:
        return f"{self.settings.prescriptions_path(user_id)}/{prescription_id}"

    async def set_active(self, user_id: str, prescription_id: str, active: bool) -> None:
        await self.store.update(self._prescription_path(user_id, prescription_id), {"active": active})
        logger.info(f"Prescription {prescription_id} marked {'active' if active else 'inactive'}")

    async def delete(self, user_id: str, prescription_id: str) -> int:
        """
        Delete a prescription and every medication record under it.

        Sub-records go first so a failure never leaves orphaned records
        behind a missing parent.

        Returns:
            Number of medication records deleted
        """
        medications = await self.store.list(self.settings.medications_path(user_id, prescription_id))
        await asyncio.gather(*(self.store.delete(doc.path) for doc in medications))
        await self.store.delete(self._prescription_path(user_id, prescription_id))
        logger.info(f"Deleted prescription {prescription_id} with {len(medications)} medications")
        return len(medications)

    async def list_active(self, user_id: str) -> List[PrescriptionDocument]:
        """Active prescriptions, newest first; prescriptions without records are skipped."""
        docs = await self.store.list(self.settings.prescriptions_path(user_id), "active", True)

        prescriptions = []
        for doc in docs:
            prescription = PrescriptionDocument.from_document(doc.id, doc.data)
            records = await self.store.list(self.settings.medications_path(user_id, doc.id))
            prescription.medications = [NormalizedMedicationRecord.from_document(r.data) for r in records]
            if prescription.medications:
                prescriptions.append(prescription)

        prescriptions.sort(key=lambda p: p.uploaded_at or _EPOCH, reverse=True)
        logger.debug(f"{len(prescriptions)} active prescriptions with medications for user")
        return prescriptions
