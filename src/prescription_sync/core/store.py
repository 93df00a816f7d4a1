# ============================================================================
# src/prescription_sync/core/store.py
# ============================================================================
"""
Document Store

Async request/response capability over the remote document store. The
resolver, ingestor and repositories receive an instance at construction;
nothing in this package reaches for a global client.

FirestoreDocumentStore runs the blocking firebase_admin client in worker
threads so the event loop stays free while a write is in flight.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..utils.exceptions import StoreError

logger = logging.getLogger(__name__)


@dataclass
class StoredDocument:
    id: str
    path: str
    data: Dict[str, Any] = field(default_factory=dict)


class DocumentStore(ABC):
    """
    Abstract store interface.

    Collection and document paths are slash-separated
    (``users/u1/prescriptions``). Implementations raise StoreError on
    transport or permission failures.
    """

    @abstractmethod
    async def add(self, collection_path: str, data: Dict[str, Any]) -> StoredDocument:
        """Create a document with a generated id."""
        pass

    @abstractmethod
    async def get(self, document_path: str) -> Optional[StoredDocument]:
        pass

    @abstractmethod
    async def update(self, document_path: str, data: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def delete(self, document_path: str) -> None:
        pass

    @abstractmethod
    async def find_first(self, collection_path: str, field_name: str, value: Any) -> Optional[StoredDocument]:
        """First document whose ``field_name`` equals ``value`` exactly."""
        pass

    @abstractmethod
    async def list(
        self,
        collection_path: str,
        field_name: Optional[str] = None,
        value: Any = None,
    ) -> List[StoredDocument]:
        """All documents of a collection, optionally filtered by equality."""
        pass

    async def is_reachable(self) -> bool:
        """Connectivity probe used by the offline reconciler."""
        return True


class FirestoreDocumentStore(DocumentStore):
    """DocumentStore backed by the Firebase Admin SDK Firestore client."""

    PROBE_DOCUMENT = "_health/probe"

    def __init__(self, client, probe_timeout: float = 5.0):
        self._client = client
        self.probe_timeout = probe_timeout

    @classmethod
    def from_credentials(cls, cred_path: Optional[Path] = None) -> "FirestoreDocumentStore":
        """
        Initialize the Firebase Admin app if needed and wrap its client.

        Args:
            cred_path: Service account JSON. Defaults to
                store_settings.FIREBASE_CREDENTIALS.
        """
        import firebase_admin
        from firebase_admin import credentials, firestore

        from ..config.base_config import store_settings
        from ..utils.exceptions import ConfigurationError

        # Prevent re-initialization
        if not firebase_admin._apps:
            cred_path = cred_path or store_settings.FIREBASE_CREDENTIALS
            if cred_path is None or not Path(cred_path).exists():
                raise ConfigurationError(
                    f"Firebase credentials not found at: {cred_path}. "
                    "Set FIREBASE_CREDENTIALS to a service account file."
                )
            firebase_admin.initialize_app(credentials.Certificate(str(cred_path)))
            logger.info("Firebase Admin initialized")

        return cls(firestore.client())

    async def _call(self, operation: str, path: str, func, *args):
        from google.api_core import exceptions as google_exceptions

        try:
            return await asyncio.to_thread(func, *args)
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"Firestore {operation} failed for {path}: {e}")
            raise StoreError(f"{operation} failed: {e}", path=path) from e

    async def add(self, collection_path: str, data: Dict[str, Any]) -> StoredDocument:
        def _add():
            _, ref = self._client.collection(collection_path).add(data)
            return StoredDocument(id=ref.id, path=ref.path, data=dict(data))

        return await self._call("add", collection_path, _add)

    async def get(self, document_path: str) -> Optional[StoredDocument]:
        def _get():
            snapshot = self._client.document(document_path).get()
            if not snapshot.exists:
                return None
            return StoredDocument(id=snapshot.id, path=snapshot.reference.path, data=snapshot.to_dict() or {})

        return await self._call("get", document_path, _get)

    async def update(self, document_path: str, data: Dict[str, Any]) -> None:
        await self._call("update", document_path, lambda: self._client.document(document_path).update(data))

    async def delete(self, document_path: str) -> None:
        await self._call("delete", document_path, lambda: self._client.document(document_path).delete())

    async def find_first(self, collection_path: str, field_name: str, value: Any) -> Optional[StoredDocument]:
        from firebase_admin import firestore

        def _find():
            query = (
                self._client.collection(collection_path)
                .where(filter=firestore.FieldFilter(field_name, "==", value))
                .limit(1)
            )
            for snapshot in query.stream():
                return StoredDocument(id=snapshot.id, path=snapshot.reference.path, data=snapshot.to_dict() or {})
            return None

        return await self._call("query", collection_path, _find)

    async def list(
        self,
        collection_path: str,
        field_name: Optional[str] = None,
        value: Any = None,
    ) -> List[StoredDocument]:
        from firebase_admin import firestore

        def _list():
            query = self._client.collection(collection_path)
            if field_name is not None:
                query = query.where(filter=firestore.FieldFilter(field_name, "==", value))
            return [
                StoredDocument(id=s.id, path=s.reference.path, data=s.to_dict() or {})
                for s in query.stream()
            ]

        return await self._call("list", collection_path, _list)

    async def is_reachable(self) -> bool:
        try:
            await asyncio.wait_for(self.get(self.PROBE_DOCUMENT), timeout=self.probe_timeout)
            return True
        except (StoreError, asyncio.TimeoutError) as e:
            logger.warning(f"Store unreachable: {e}")
            return False
