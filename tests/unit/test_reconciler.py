# ============================================================================
# tests/unit/test_reconciler.py
# ============================================================================
"""
Tests for the pending queue and offline reconciliation
"""

import pytest

from src.prescription_sync.core.results import Committed, Deferred, IngestionRejection, Rejected
from src.prescription_sync.ingestion.ingestor import PrescriptionIngestor
from src.prescription_sync.sync.queue import PendingPrescriptionQueue
from src.prescription_sync.sync.reconciler import OfflineReconciler, SyncReport


@pytest.fixture
def queue(tmp_path):
    return PendingPrescriptionQueue(tmp_path / "pending.db")


@pytest.fixture
def reconciler(catalog, queue):
    return OfflineReconciler(PrescriptionIngestor(catalog), queue)


def stored_prescriptions(store, user_id):
    return store.collection(f"users/{user_id}/prescriptions")


class TestPendingPrescriptionQueue:

    def test_enqueue_and_list(self, queue):
        first = queue.enqueue("u1", '{"rxId": "1"}')
        second = queue.enqueue("u2", '{"rxId": "2"}')

        entries = queue.list_all()

        assert [e.id for e in entries] == [first, second]
        assert entries[0].user_id == "u1"
        assert entries[1].payload_json == '{"rxId": "2"}'
        assert queue.count() == 2

    def test_delete(self, queue):
        pending_id = queue.enqueue("u1", "{}")

        assert queue.delete(pending_id)
        assert not queue.delete(pending_id)
        assert queue.count() == 0

    def test_survives_reopen(self, tmp_path):
        PendingPrescriptionQueue(tmp_path / "q.db").enqueue("u1", "{}")

        assert PendingPrescriptionQueue(tmp_path / "q.db").count() == 1


class TestOfflineReconcilerIngest:

    @pytest.mark.asyncio
    async def test_online_ingests_directly(self, reconciler, catalog, queue, sample_payload):
        result = await reconciler.ingest(sample_payload, "user-123")

        assert isinstance(result, Committed)
        assert queue.count() == 0

    @pytest.mark.asyncio
    async def test_offline_defers(self, reconciler, catalog, queue, sample_payload):
        catalog.reachable = False

        result = await reconciler.ingest(sample_payload, "user-123")

        assert isinstance(result, Deferred)
        assert queue.count() == 1
        assert stored_prescriptions(catalog, "user-123") == []

    @pytest.mark.asyncio
    async def test_ownership_checked_before_queueing(self, reconciler, catalog, queue, sample_payload):
        catalog.reachable = False

        result = await reconciler.ingest(sample_payload, "intruder")

        assert isinstance(result, Rejected)
        assert result.reason == IngestionRejection.OWNERSHIP_MISMATCH
        assert queue.count() == 0

    @pytest.mark.asyncio
    async def test_custom_probe(self, catalog, queue, sample_payload):
        async def offline():
            return False

        reconciler = OfflineReconciler(PrescriptionIngestor(catalog), queue, is_online=offline)

        assert isinstance(await reconciler.ingest(sample_payload, "user-123"), Deferred)


class TestOfflineReconcilerDrain:

    @pytest.mark.asyncio
    async def test_drain_after_reconnect(self, reconciler, catalog, queue, sample_payload):
        catalog.reachable = False
        deferred = await reconciler.ingest(sample_payload, "user-123")
        catalog.reachable = True

        report = await reconciler.drain()

        assert report.synced == [deferred.pending_id]
        assert not report.needs_retry
        assert queue.count() == 0
        assert len(stored_prescriptions(catalog, "user-123")) == 1

    @pytest.mark.asyncio
    async def test_drain_while_offline(self, reconciler, catalog, queue, sample_payload):
        catalog.reachable = False
        deferred = await reconciler.ingest(sample_payload, "user-123")

        report = await reconciler.drain()

        assert report.retained == [deferred.pending_id]
        assert report.needs_retry
        assert queue.count() == 1

    @pytest.mark.asyncio
    async def test_partial_failure_retained(self, reconciler, catalog, queue, sample_payload):
        catalog.reachable = False
        await reconciler.ingest(sample_payload, "user-123")
        catalog.reachable = True
        catalog.fail_collections = ["medications"]

        report = await reconciler.drain()

        assert report.needs_retry
        assert queue.count() == 1

    @pytest.mark.asyncio
    async def test_undecodable_entry_dropped(self, reconciler, queue):
        pending_id = queue.enqueue("user-123", "not json")

        report = await reconciler.drain()

        assert report.dropped == [pending_id]
        assert queue.count() == 0

    @pytest.mark.asyncio
    async def test_permanent_rejection_dropped(self, reconciler, queue, sample_payload):
        """An entry whose owner no longer matches is removed, not retried"""
        pending_id = queue.enqueue("someone-else", sample_payload.to_json())

        report = await reconciler.drain()

        assert report.dropped == [pending_id]
        assert queue.count() == 0

    @pytest.mark.asyncio
    async def test_empty_queue(self, reconciler):
        assert await reconciler.drain() == SyncReport()
