# ============================================================================
# src/prescription_sync/core/records.py
# ============================================================================
"""
Persisted and transient record types
- NormalizedMedicationRecord: one per medication line, written once
- PrescriptionDocument: parent document grouping the records
- PharmacyPoint / RankedPoint: geo ranking input and output
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..constants.prescription_status import PrescriptionStatus, parse_status


@dataclass(frozen=True)
class ResolvedMedication:
    catalog_id: str
    catalog_ref: str

    @property
    def is_known(self) -> bool:
        return self.catalog_id != "unknown"


@dataclass
class NormalizedMedicationRecord:
    medication_id: str
    medication_ref: str
    name: str
    dose_mg: int
    frequency_hours: int
    start_date: datetime
    end_date: datetime
    prescription_id: str
    source_file: str
    active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_document(self) -> Dict[str, Any]:
        """Store field layout of a medication record."""
        return {
            "medicationId": self.medication_id,
            "medicationRef": self.medication_ref,
            "name": self.name,
            "doseMg": self.dose_mg,
            "frequencyHours": self.frequency_hours,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "createdAt": self.created_at,
            "active": self.active,
            "prescriptionId": self.prescription_id,
            "sourceFile": self.source_file,
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "NormalizedMedicationRecord":
        return cls(
            medication_id=data.get("medicationId", "unknown"),
            medication_ref=data.get("medicationRef", ""),
            name=data.get("name", ""),
            dose_mg=int(data.get("doseMg") or 0),
            frequency_hours=int(data.get("frequencyHours") or 24),
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
            prescription_id=data.get("prescriptionId", ""),
            source_file=data.get("sourceFile", ""),
            active=bool(data.get("active", True)),
            created_at=data.get("createdAt"),
        )


@dataclass
class PrescriptionDocument:
    file_name: str
    total_items: int
    active: bool = True
    from_ocr: bool = False
    notes: str = "NFC"
    status: PrescriptionStatus = PrescriptionStatus.PENDING
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: Optional[str] = None
    medications: List[NormalizedMedicationRecord] = field(default_factory=list)

    def to_document(self) -> Dict[str, Any]:
        return {
            "active": self.active,
            "fileName": self.file_name,
            "fromOCR": self.from_ocr,
            "notes": self.notes,
            "status": self.status.value,
            "totalItems": self.total_items,
            "uploadedAt": self.uploaded_at,
        }

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "PrescriptionDocument":
        return cls(
            id=doc_id,
            file_name=data.get("fileName", ""),
            total_items=int(data.get("totalItems") or 0),
            active=bool(data.get("active", False)),
            from_ocr=bool(data.get("fromOCR", False)),
            notes=data.get("notes", ""),
            status=parse_status(data.get("status")),
            uploaded_at=data.get("uploadedAt"),
        )


# eq=False keeps identity hashing: two catalog entries with equal fields
# are still distinct pharmacies.
@dataclass(frozen=True, eq=False)
class PharmacyPoint:
    name: str
    address: str
    latitude: float
    longitude: float
    chain: str = ""
    opening_hours: Tuple[str, ...] = ()
    opening_days: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RankedPoint:
    point: PharmacyPoint
    distance_meters: float
