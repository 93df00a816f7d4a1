# ============================================================================
# tests/unit/test_store.py
# ============================================================================
"""
Tests for the Firestore-backed document store (client mocked)
"""

from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as google_exceptions

from src.prescription_sync.core.store import FirestoreDocumentStore
from src.prescription_sync.utils.exceptions import ConfigurationError, StoreError


def snapshot(doc_id, path, data, exists=True):
    snap = MagicMock()
    snap.id = doc_id
    snap.exists = exists
    snap.reference.path = path
    snap.to_dict.return_value = data
    return snap


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def firestore_store(client):
    return FirestoreDocumentStore(client, probe_timeout=1.0)


class TestFirestoreDocumentStore:

    @pytest.mark.asyncio
    async def test_add(self, firestore_store, client):
        ref = MagicMock()
        ref.id = "abc"
        ref.path = "users/u1/prescriptions/abc"
        client.collection.return_value.add.return_value = (None, ref)

        doc = await firestore_store.add("users/u1/prescriptions", {"fileName": "RX-1"})

        client.collection.assert_called_with("users/u1/prescriptions")
        assert doc.id == "abc"
        assert doc.data == {"fileName": "RX-1"}

    @pytest.mark.asyncio
    async def test_get_missing(self, firestore_store, client):
        client.document.return_value.get.return_value = snapshot("x", "c/x", None, exists=False)

        assert await firestore_store.get("c/x") is None

    @pytest.mark.asyncio
    async def test_find_first(self, firestore_store, client):
        query = client.collection.return_value.where.return_value.limit.return_value
        query.stream.return_value = iter([snapshot("med-ibu", "globalMedications/med-ibu", {"name": "Ibuprofeno"})])

        doc = await firestore_store.find_first("globalMedications", "name", "Ibuprofeno")

        assert doc.id == "med-ibu"
        assert doc.path == "globalMedications/med-ibu"

    @pytest.mark.asyncio
    async def test_list_unfiltered(self, firestore_store, client):
        client.collection.return_value.stream.return_value = iter([
            snapshot("a", "physicalPoints/a", {"name": "A"}),
            snapshot("b", "physicalPoints/b", None),
        ])

        docs = await firestore_store.list("physicalPoints")

        assert [d.id for d in docs] == ["a", "b"]
        assert docs[1].data == {}

    @pytest.mark.asyncio
    async def test_api_error_becomes_store_error(self, firestore_store, client):
        client.document.return_value.update.side_effect = google_exceptions.PermissionDenied("denied")

        with pytest.raises(StoreError) as exc:
            await firestore_store.update("users/u1/prescriptions/p1", {"active": False})
        assert exc.value.path == "users/u1/prescriptions/p1"

    @pytest.mark.asyncio
    async def test_is_reachable(self, firestore_store, client):
        client.document.return_value.get.return_value = snapshot("probe", "_health/probe", None, exists=False)
        assert await firestore_store.is_reachable()

        client.document.return_value.get.side_effect = google_exceptions.ServiceUnavailable("offline")
        assert not await firestore_store.is_reachable()

    def test_missing_credentials(self, tmp_path, monkeypatch):
        import firebase_admin

        monkeypatch.setattr(firebase_admin, "_apps", {})
        with pytest.raises(ConfigurationError):
            FirestoreDocumentStore.from_credentials(tmp_path / "missing.json")
