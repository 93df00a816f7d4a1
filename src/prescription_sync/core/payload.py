# ============================================================================
# src/prescription_sync/core/payload.py
# ============================================================================
"""
Prescription payload carried on an NFC tag.

Field names on the wire follow the tag format (rxId, patient, meds, ...);
attribute names are the Python ones. Both are accepted on input.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class MedicationLine(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    drug_name: str = Field(alias="drug")
    dose: str = Field(alias="dose", description="Magnitude plus unit, e.g. '50mg'")
    frequency: str = Field(alias="freq", description="Magnitude plus unit, e.g. '8h'")
    duration_days: int = Field(alias="days", ge=0)


class PrescriptionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    rx_id: str = Field(alias="rxId")
    patient_id: str = Field(alias="patient")
    medications: List[MedicationLine] = Field(alias="meds", default_factory=list)
    issued_timestamp: str = Field(alias="issuedAt", description="yyyy-MM-dd'T'HH:mm:ss'Z'")
    signed: bool = Field(alias="signed", default=False)

    def to_json(self) -> str:
        """Serialize with the tag field names."""
        return self.model_dump_json(by_alias=True)
