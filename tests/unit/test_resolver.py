# ============================================================================
# tests/unit/test_resolver.py
# ============================================================================
"""
Tests for catalog resolution and the catalog cache
"""

import pytest

from src.prescription_sync.catalog.cache import MedicationCatalogCache
from src.prescription_sync.catalog.resolver import MedicationResolver, UNKNOWN_MEDICATION_ID


class TestMedicationResolver:
    """Test exact-name resolution against the store"""

    @pytest.mark.asyncio
    async def test_resolve_known(self, catalog):
        resolver = MedicationResolver(catalog)

        resolved = await resolver.resolve("Ibuprofeno")

        assert resolved.catalog_id == "med-ibu"
        assert resolved.catalog_ref == "globalMedications/med-ibu"
        assert resolved.is_known

    @pytest.mark.asyncio
    async def test_resolve_unknown(self, catalog):
        resolver = MedicationResolver(catalog)

        resolved = await resolver.resolve("Aspirina")

        assert resolved.catalog_id == UNKNOWN_MEDICATION_ID
        assert resolved.catalog_ref == "/globalMedications/unknown"
        assert not resolved.is_known

    @pytest.mark.asyncio
    async def test_match_is_case_sensitive(self, catalog):
        resolver = MedicationResolver(catalog)

        assert (await resolver.resolve("ibuprofeno")).catalog_id == UNKNOWN_MEDICATION_ID
        assert (await resolver.resolve("Ibuprofeno ")).catalog_id == UNKNOWN_MEDICATION_ID

    @pytest.mark.asyncio
    async def test_duplicate_names_first_match(self, catalog):
        catalog.seed("globalMedications", "med-ibu-2", {"name": "Ibuprofeno"})
        resolver = MedicationResolver(catalog)

        resolved = await resolver.resolve("Ibuprofeno")

        assert resolved.catalog_id == "med-ibu"

    @pytest.mark.asyncio
    async def test_store_failure_resolves_unknown(self, catalog):
        """Lookup never raises; a failing store resolves as unknown"""
        catalog.fail_queries = True
        resolver = MedicationResolver(catalog)

        resolved = await resolver.resolve("Ibuprofeno")

        assert resolved.catalog_id == UNKNOWN_MEDICATION_ID


class TestMedicationCatalogCache:
    """Test the cache-aside catalog snapshot"""

    @pytest.mark.asyncio
    async def test_refresh_and_lookup(self, catalog):
        cache = MedicationCatalogCache(catalog)
        assert not cache.is_loaded

        assert await cache.refresh()

        assert cache.is_loaded
        assert cache.refreshed_at is not None
        assert sorted(cache.names()) == ["Amoxicilina", "Ibuprofeno", "Paracetamol"]
        assert cache.lookup("Paracetamol").id == "med-para"
        assert cache.lookup("paracetamol") is None

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_snapshot(self, catalog):
        cache = MedicationCatalogCache(catalog)
        await cache.refresh()
        catalog.fail_queries = True

        assert not await cache.refresh()

        assert cache.is_loaded
        assert len(cache.entries) == 3

    @pytest.mark.asyncio
    async def test_resolver_uses_cache_first(self, catalog):
        cache = MedicationCatalogCache(catalog)
        await cache.refresh()
        resolver = MedicationResolver(catalog, cache=cache)
        catalog.calls.clear()

        resolved = await resolver.resolve("Amoxicilina")

        assert resolved.catalog_id == "med-amox"
        assert not any(c.startswith("find_first") for c in catalog.calls)

    @pytest.mark.asyncio
    async def test_resolver_falls_back_to_store(self, catalog):
        """Entries added after the snapshot are still found"""
        cache = MedicationCatalogCache(catalog)
        await cache.refresh()
        catalog.seed("globalMedications", "med-new", {"name": "Omeprazol"})
        resolver = MedicationResolver(catalog, cache=cache)

        resolved = await resolver.resolve("Omeprazol")

        assert resolved.catalog_id == "med-new"

    @pytest.mark.asyncio
    async def test_unloaded_cache_is_skipped(self, catalog):
        resolver = MedicationResolver(catalog, cache=MedicationCatalogCache(catalog))

        resolved = await resolver.resolve("Ibuprofeno")

        assert resolved.catalog_id == "med-ibu"
