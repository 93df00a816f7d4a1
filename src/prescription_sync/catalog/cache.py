# ============================================================================
# src/prescription_sync/catalog/cache.py
# ============================================================================
"""
Medication Catalog Cache

Cache-aside snapshot of the canonical catalog. refresh() replaces the
snapshot from the store; when the store is unreachable the previous
snapshot is kept and the failure is only logged.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from ..config.base_config import store_settings, StoreSettings
from ..core.store import DocumentStore, StoredDocument
from ..utils.exceptions import StoreError

logger = logging.getLogger(__name__)


class MedicationCatalogCache:

    def __init__(self, store: DocumentStore, settings: Optional[StoreSettings] = None):
        self.store = store
        self.settings = settings or store_settings
        self._entries: List[StoredDocument] = []
        self._refreshed_at: Optional[datetime] = None

    @property
    def is_loaded(self) -> bool:
        return self._refreshed_at is not None

    @property
    def refreshed_at(self) -> Optional[datetime]:
        return self._refreshed_at

    @property
    def entries(self) -> List[StoredDocument]:
        return list(self._entries)

    async def refresh(self) -> bool:
        """Reload the snapshot. Returns False if the store could not be read."""
        try:
            entries = await self.store.list(self.settings.CATALOG_COLLECTION)
        except StoreError as e:
            logger.error(f"Failed to refresh medication catalog: {e}")
            return False

        self._entries = entries
        self._refreshed_at = datetime.now(timezone.utc)
        logger.info(f"Medication catalog refreshed with {len(entries)} items")
        return True

    def lookup(self, name: str) -> Optional[StoredDocument]:
        """First entry whose catalog name equals ``name`` exactly."""
        field_name = self.settings.CATALOG_NAME_FIELD
        for entry in self._entries:
            if entry.data.get(field_name) == name:
                return entry
        return None

    def names(self) -> List[str]:
        field_name = self.settings.CATALOG_NAME_FIELD
        return [e.data[field_name] for e in self._entries if isinstance(e.data.get(field_name), str)]
