# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.

InMemoryDocumentStore stands in for Firestore; fake tag technologies stand
in for the NFC hardware.
"""

import itertools
from typing import Any, Dict, List, Optional

import pytest

from src.prescription_sync.config.base_config import StoreSettings
from src.prescription_sync.core.payload import PrescriptionPayload
from src.prescription_sync.core.store import DocumentStore, StoredDocument
from src.prescription_sync.nfc.tag import FormatableTechnology, NdefTechnology, TagHandle
from src.prescription_sync.utils.exceptions import StoreError


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed DocumentStore.

    Failure injection:
        fail_collections: collection paths (or path suffixes) whose adds fail
        fail_add_after: number of successful adds before every add fails
        fail_queries: find_first/list raise StoreError
        reachable: value returned by is_reachable()
    """

    def __init__(self):
        self.docs: Dict[str, Dict[str, Any]] = {}
        self._ids = itertools.count(1)
        self.calls: List[str] = []
        self.fail_collections: List[str] = []
        self.fail_add_after: Optional[int] = None
        self.fail_queries = False
        self.reachable = True
        self._adds = 0

    def seed(self, collection_path: str, doc_id: str, data: Dict[str, Any]) -> StoredDocument:
        path = f"{collection_path}/{doc_id}"
        self.docs[path] = dict(data)
        return StoredDocument(id=doc_id, path=path, data=dict(data))

    def collection(self, collection_path: str) -> List[StoredDocument]:
        prefix = collection_path + "/"
        return [
            StoredDocument(id=path[len(prefix):], path=path, data=dict(data))
            for path, data in self.docs.items()
            if path.startswith(prefix) and "/" not in path[len(prefix):]
        ]

    async def add(self, collection_path: str, data: Dict[str, Any]) -> StoredDocument:
        self.calls.append(f"add:{collection_path}")
        if any(collection_path.endswith(c) for c in self.fail_collections):
            raise StoreError("injected add failure", path=collection_path)
        if self.fail_add_after is not None and self._adds >= self.fail_add_after:
            raise StoreError("injected add failure", path=collection_path)
        self._adds += 1
        doc_id = f"doc{next(self._ids)}"
        return self.seed(collection_path, doc_id, data)

    async def get(self, document_path: str) -> Optional[StoredDocument]:
        self.calls.append(f"get:{document_path}")
        if document_path not in self.docs:
            return None
        return StoredDocument(
            id=document_path.rsplit("/", 1)[-1],
            path=document_path,
            data=dict(self.docs[document_path]),
        )

    async def update(self, document_path: str, data: Dict[str, Any]) -> None:
        self.calls.append(f"update:{document_path}")
        if document_path not in self.docs:
            raise StoreError("no such document", path=document_path)
        self.docs[document_path].update(data)

    async def delete(self, document_path: str) -> None:
        self.calls.append(f"delete:{document_path}")
        self.docs.pop(document_path, None)

    async def find_first(self, collection_path: str, field_name: str, value: Any) -> Optional[StoredDocument]:
        self.calls.append(f"find_first:{collection_path}")
        if self.fail_queries:
            raise StoreError("injected query failure", path=collection_path)
        for doc in self.collection(collection_path):
            if doc.data.get(field_name) == value:
                return doc
        return None

    async def list(self, collection_path: str, field_name: Optional[str] = None, value: Any = None) -> List[StoredDocument]:
        self.calls.append(f"list:{collection_path}")
        if self.fail_queries:
            raise StoreError("injected query failure", path=collection_path)
        docs = self.collection(collection_path)
        if field_name is not None:
            docs = [d for d in docs if d.data.get(field_name) == value]
        return docs

    async def is_reachable(self) -> bool:
        return self.reachable


class FakeNdef(NdefTechnology):
    """NDEF technology backed by a bytes buffer."""

    def __init__(self, message: Optional[bytes] = None, writable: bool = True, capacity: int = 888):
        self.message = message
        self.writable = writable
        self.capacity = capacity
        self.connected = False
        self.connect_count = 0
        self.close_count = 0
        self.fail_read: Optional[Exception] = None

    def connect(self) -> None:
        self.connected = True
        self.connect_count += 1

    def close(self) -> None:
        self.connected = False
        self.close_count += 1

    @property
    def is_writable(self) -> bool:
        return self.writable

    @property
    def max_size(self) -> int:
        return self.capacity

    def read_message(self) -> Optional[bytes]:
        if self.fail_read is not None:
            raise self.fail_read
        return self.message

    def write_message(self, message: bytes) -> None:
        self.message = message


class FakeFormatable(FormatableTechnology):

    def __init__(self):
        self.formatted_with: Optional[bytes] = None
        self.close_count = 0

    def connect(self) -> None:
        pass

    def close(self) -> None:
        self.close_count += 1

    def format(self, message: bytes) -> None:
        self.formatted_with = message


# ----------------------------------------------------------------------------
# Fixtures
# ----------------------------------------------------------------------------
@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def store_settings():
    return StoreSettings()


@pytest.fixture
def catalog(store, store_settings):
    """Seed a small medication catalog."""
    collection = store_settings.CATALOG_COLLECTION
    store.seed(collection, "med-ibu", {"name": "Ibuprofeno"})
    store.seed(collection, "med-amox", {"name": "Amoxicilina"})
    store.seed(collection, "med-para", {"name": "Paracetamol"})
    return store


@pytest.fixture
def sample_payload_dict():
    """Sample prescription as written on a tag"""
    return {
        "rxId": "RX-2024-001",
        "patient": "user-123",
        "meds": [
            {"drug": "Ibuprofeno", "dose": "400mg", "freq": "8h", "days": 5},
            {"drug": "Amoxicilina", "dose": "500mg", "freq": "12h", "days": 7},
        ],
        "issuedAt": "2024-01-15T10:00:00Z",
        "signed": True,
    }


@pytest.fixture
def sample_payload(sample_payload_dict):
    return PrescriptionPayload.model_validate(sample_payload_dict)


@pytest.fixture
def ndef_tag():
    return TagHandle(tag_id=b"\x04\xa2\x11", ndef=FakeNdef())


@pytest.fixture
def blank_tag():
    return TagHandle(tag_id=b"\x04\xa2\x12", formatable=FakeFormatable())


@pytest.fixture
def make_tag():
    """Factory for NDEF tags with a given content, writability and capacity."""
    def _make(message: Optional[bytes] = None, writable: bool = True, capacity: int = 888) -> TagHandle:
        return TagHandle(tag_id=b"\x04\xa2\x13", ndef=FakeNdef(message, writable, capacity))
    return _make


@pytest.fixture
def unsupported_tag():
    return TagHandle(tag_id=b"\x04\xa2\x14")
