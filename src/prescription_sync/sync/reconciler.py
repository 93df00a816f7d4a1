# ============================================================================
# src/prescription_sync/sync/reconciler.py
# ============================================================================
"""
Offline Reconciler

Sits in front of the ingestor. When the store is reachable a prescription is
ingested straight away; otherwise it is parked in the local queue and
ingested later when the caller runs drain().
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from pydantic import ValidationError

from ..core.payload import PrescriptionPayload
from ..core.results import Committed, Deferred, IngestionRejection, IngestionResult, Rejected
from ..ingestion.ingestor import PrescriptionIngestor
from ..utils.logging import LogContext
from .queue import PendingPrescriptionQueue

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    synced: List[int] = field(default_factory=list)
    dropped: List[int] = field(default_factory=list)
    retained: List[int] = field(default_factory=list)

    @property
    def needs_retry(self) -> bool:
        return bool(self.retained)


class OfflineReconciler:
    """
    Args:
        ingestor: Ingestor used for every store write
        queue: Local pending queue
        is_online: Async connectivity probe; defaults to the store's own
    """

    def __init__(
        self,
        ingestor: PrescriptionIngestor,
        queue: PendingPrescriptionQueue,
        is_online: Optional[Callable[[], Awaitable[bool]]] = None,
    ):
        self.ingestor = ingestor
        self.queue = queue
        self.is_online = is_online or ingestor.store.is_reachable

    async def ingest(self, payload: PrescriptionPayload, acting_user_id: str) -> IngestionResult:
        rejection = self.ingestor.check_preconditions(payload, acting_user_id)
        if rejection is not None:
            return rejection

        if await self.is_online():
            return await self.ingestor.ingest(payload, acting_user_id)

        pending_id = await asyncio.to_thread(self.queue.enqueue, acting_user_id, payload.to_json())
        logger.info(f"Store unreachable, prescription {payload.rx_id} deferred as {pending_id}")
        return Deferred(pending_id=pending_id)

    async def drain(self) -> SyncReport:
        """
        Ingest every queued prescription.

        Committed and permanently rejected entries leave the queue; entries
        that hit a persistence failure stay for the next drain.
        """
        entries = await asyncio.to_thread(self.queue.list_all)
        report = SyncReport()
        if not entries:
            return report

        if not await self.is_online():
            logger.info(f"Store unreachable, {len(entries)} pending prescriptions kept")
            report.retained = [e.id for e in entries]
            return report

        for entry in entries:
            with LogContext(logger, pending_id=entry.id, user_id=entry.user_id):
                try:
                    payload = PrescriptionPayload.model_validate_json(entry.payload_json)
                except ValidationError as e:
                    logger.error(f"Pending prescription {entry.id} is not decodable, dropped: {e}")
                    await asyncio.to_thread(self.queue.delete, entry.id)
                    report.dropped.append(entry.id)
                    continue

                result = await self.ingestor.ingest(payload, entry.user_id)

                if isinstance(result, Committed):
                    await asyncio.to_thread(self.queue.delete, entry.id)
                    report.synced.append(entry.id)
                elif (isinstance(result, Rejected)
                      and result.reason == IngestionRejection.PARTIAL_PERSISTENCE_FAILURE):
                    logger.warning(f"Pending prescription {entry.id} kept: {result.detail}")
                    report.retained.append(entry.id)
                else:
                    logger.warning(f"Pending prescription {entry.id} dropped: {result}")
                    await asyncio.to_thread(self.queue.delete, entry.id)
                    report.dropped.append(entry.id)

        logger.info(f"Drain finished: {len(report.synced)} synced, "
                    f"{len(report.dropped)} dropped, {len(report.retained)} retained")
        return report
