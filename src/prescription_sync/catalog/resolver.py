# ============================================================================
# src/prescription_sync/catalog/resolver.py
# ============================================================================
"""
Medication Resolver

Cross-references a drug name against the canonical catalog:
- Exact, case-sensitive match on the catalog name field
- First match wins when names are duplicated
- No match resolves to the "unknown" sentinel; resolution never raises
"""

import logging
from typing import Optional

from ..config.base_config import store_settings, StoreSettings
from ..core.records import ResolvedMedication
from ..core.store import DocumentStore, StoredDocument
from ..utils.exceptions import StoreError
from .cache import MedicationCatalogCache

logger = logging.getLogger(__name__)

UNKNOWN_MEDICATION_ID = "unknown"


class MedicationResolver:
    """
    Args:
        store: Document store holding the catalog collection
        cache: Optional catalog snapshot consulted before the store
        settings: Collection layout
    """

    def __init__(
        self,
        store: DocumentStore,
        cache: Optional[MedicationCatalogCache] = None,
        settings: Optional[StoreSettings] = None,
    ):
        self.store = store
        self.cache = cache
        self.settings = settings or store_settings

    def unknown(self) -> ResolvedMedication:
        return ResolvedMedication(
            catalog_id=UNKNOWN_MEDICATION_ID,
            catalog_ref=self.settings.unknown_catalog_ref(),
        )

    async def resolve(self, drug_name: str) -> ResolvedMedication:
        doc = None
        if self.cache is not None and self.cache.is_loaded:
            doc = self.cache.lookup(drug_name)

        if doc is None:
            doc = await self._query(drug_name)

        if doc is None:
            logger.info(f"Medication '{drug_name}' not in catalog, using unknown sentinel")
            return self.unknown()

        return ResolvedMedication(catalog_id=doc.id, catalog_ref=doc.path)

    async def _query(self, drug_name: str) -> Optional[StoredDocument]:
        try:
            return await self.store.find_first(
                self.settings.CATALOG_COLLECTION,
                self.settings.CATALOG_NAME_FIELD,
                drug_name,
            )
        except StoreError as e:
            logger.warning(f"Catalog lookup for '{drug_name}' failed, treating as unknown: {e}")
            return None
