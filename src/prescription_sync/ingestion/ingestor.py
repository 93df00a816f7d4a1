# ============================================================================
# src/prescription_sync/ingestion/ingestor.py
# ============================================================================
"""
Prescription Ingestor

Turns a decoded tag payload into persisted, normalized medication records.

Stages per attempt:
    IDLE -> VERIFYING_OWNER -> RESOLVING_MEDICATIONS -> PERSISTING_RECORDS
         -> COMMITTED | REJECTED

Record writes are issued concurrently and joined; the attempt only reports
Committed when every write confirmed. Writes that did land are not rolled
back on failure or cancellation.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from ..catalog.resolver import MedicationResolver
from ..config.base_config import store_settings, StoreSettings
from ..config.nfc_config import nfc_settings, NfcSettings
from ..core.payload import MedicationLine, PrescriptionPayload
from ..core.records import NormalizedMedicationRecord, PrescriptionDocument, ResolvedMedication
from ..core.results import Committed, IngestionRejection, IngestionResult, Rejected
from ..core.store import DocumentStore
from ..utils.exceptions import StoreError
from ..utils.logging import log_performance
from .normalize import add_calendar_days, extract_digits, parse_issued_at

logger = logging.getLogger(__name__)


class IngestionStage(str, Enum):
    IDLE = "idle"
    VERIFYING_OWNER = "verifying_owner"
    RESOLVING_MEDICATIONS = "resolving_medications"
    PERSISTING_RECORDS = "persisting_records"
    COMMITTED = "committed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ResolvedLine:
    """A medication line with its catalog match and treatment window."""
    line: MedicationLine
    medication: ResolvedMedication
    dose_mg: int
    frequency_hours: int
    start_date: datetime
    end_date: datetime


class PrescriptionIngestor:
    """
    Args:
        store: Remote document store (injected)
        resolver: Catalog resolver; built over the same store if omitted
        settings: Collection layout
        nfc_config: Timestamp format, defaults, treatment time zone
        clock: Returns the current UTC time; replaceable in tests
    """

    def __init__(
        self,
        store: DocumentStore,
        resolver: Optional[MedicationResolver] = None,
        settings: Optional[StoreSettings] = None,
        nfc_config: Optional[NfcSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.settings = settings or store_settings
        self.resolver = resolver or MedicationResolver(store, settings=self.settings)
        self.nfc_config = nfc_config or nfc_settings
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @staticmethod
    def _enter(rx_id: str, stage: IngestionStage, details: str = None):
        # Per attempt, never stored on the instance
        if details:
            logger.info(f"[STEP] {rx_id} {stage.value}: {details}")
        else:
            logger.info(f"[STEP] {rx_id} {stage.value}")

    def _reject(self, rx_id: str, reason: IngestionRejection, detail: str) -> Rejected:
        self._enter(rx_id, IngestionStage.REJECTED, f"{reason.value} - {detail}")
        return Rejected(reason, detail)

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------
    def check_preconditions(self, payload: PrescriptionPayload, acting_user_id: str) -> Optional[Rejected]:
        """
        Ownership and emptiness checks. No store access happens here.

        Returns:
            Rejected if the payload must not be persisted, else None
        """
        self._enter(payload.rx_id, IngestionStage.VERIFYING_OWNER)
        if payload.patient_id != acting_user_id:
            logger.warning(f"Prescription {payload.rx_id} does not belong to the acting user")
            return self._reject(
                payload.rx_id,
                IngestionRejection.OWNERSHIP_MISMATCH,
                "Prescription does not belong to this user",
            )
        if not payload.medications:
            return self._reject(payload.rx_id, IngestionRejection.NO_DATA_TO_PERSIST, "Prescription has no medications")
        return None

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    async def resolve_lines(self, payload: PrescriptionPayload) -> List[ResolvedLine]:
        """Resolve every medication line and compute its treatment window."""
        cfg = self.nfc_config
        start = parse_issued_at(payload.issued_timestamp, cfg.ISSUED_AT_FORMAT, now=self.clock())

        medications = await asyncio.gather(
            *(self.resolver.resolve(line.drug_name) for line in payload.medications)
        )

        return [
            ResolvedLine(
                line=line,
                medication=medication,
                dose_mg=extract_digits(line.dose, cfg.DEFAULT_DOSE_MG),
                frequency_hours=extract_digits(line.frequency, cfg.DEFAULT_FREQUENCY_HOURS),
                start_date=start,
                end_date=add_calendar_days(start, line.duration_days, cfg.TREATMENT_TIMEZONE),
            )
            for line, medication in zip(payload.medications, medications)
        ]

    def build_records(self, lines: List[ResolvedLine], prescription_id: str) -> List[NormalizedMedicationRecord]:
        created_at = self.clock()
        return [
            NormalizedMedicationRecord(
                medication_id=r.medication.catalog_id,
                medication_ref=r.medication.catalog_ref,
                name=r.line.drug_name,
                dose_mg=r.dose_mg,
                frequency_hours=r.frequency_hours,
                start_date=r.start_date,
                end_date=r.end_date,
                prescription_id=prescription_id,
                source_file=self.nfc_config.SOURCE_MARKER,
                created_at=created_at,
            )
            for r in lines
        ]

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------
    @log_performance(logger, "Prescription ingestion")
    async def ingest(self, payload: PrescriptionPayload, acting_user_id: str) -> IngestionResult:
        """
        Validate, resolve and persist one prescription.

        Returns:
            Committed(stored_count, prescription_id) or Rejected(reason)
        """
        self._enter(payload.rx_id, IngestionStage.IDLE)

        rejection = self.check_preconditions(payload, acting_user_id)
        if rejection is not None:
            return rejection

        self._enter(payload.rx_id, IngestionStage.RESOLVING_MEDICATIONS, f"{len(payload.medications)} lines")
        lines = await self.resolve_lines(payload)
        unresolved = sum(1 for r in lines if not r.medication.is_known)
        if unresolved:
            logger.info(f"{unresolved} of {len(lines)} medications not found in catalog")

        self._enter(payload.rx_id, IngestionStage.PERSISTING_RECORDS)
        prescription = PrescriptionDocument(
            file_name=payload.rx_id,
            total_items=len(lines),
            uploaded_at=self.clock(),
        )
        try:
            parent = await self.store.add(
                self.settings.prescriptions_path(acting_user_id),
                prescription.to_document(),
            )
        except StoreError as e:
            return self._reject(
                payload.rx_id,
                IngestionRejection.PARTIAL_PERSISTENCE_FAILURE,
                f"Could not create prescription document: {e}",
            )

        records = self.build_records(lines, parent.id)
        medications_path = self.settings.medications_path(acting_user_id, parent.id)

        results = await asyncio.gather(
            *(self.store.add(medications_path, record.to_document()) for record in records),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        for failure in failures:
            logger.error(f"Medication write failed for prescription {parent.id}: {failure}")
        if failures:
            return self._reject(
                payload.rx_id,
                IngestionRejection.PARTIAL_PERSISTENCE_FAILURE,
                f"{len(failures)} of {len(records)} medication writes failed",
            )

        self._enter(payload.rx_id, IngestionStage.COMMITTED, f"{len(records)} medications stored under {parent.id}")
        return Committed(stored_count=len(records), prescription_id=parent.id)
