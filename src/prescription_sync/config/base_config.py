# ============================================================================
# src/prescription_sync/config/base_config.py
# ============================================================================
"""
Store Configuration
- Firebase credentials
- Collection layout of the remote document store
- Local pending-queue database
"""

from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class StoreSettings(BaseSettings):
    FIREBASE_CREDENTIALS: Optional[Path] = Field(
        default=None,
        description="Service account JSON for the Firebase Admin SDK"
    )

    USERS_COLLECTION: str = Field(
        default="users",
        description="Top-level collection holding one document per user"
    )
    PRESCRIPTIONS_SUBCOLLECTION: str = Field(
        default="prescriptions",
        description="Per-user sub-collection of prescription documents"
    )
    MEDICATIONS_SUBCOLLECTION: str = Field(
        default="medications",
        description="Per-prescription sub-collection of normalized medication records"
    )

    CATALOG_COLLECTION: str = Field(
        default="globalMedications",
        description="Canonical medication catalog"
    )
    CATALOG_NAME_FIELD: str = Field(
        default="name",
        description="Catalog field matched exactly against the drug name"
    )

    PHARMACY_COLLECTION: str = Field(
        default="physicalPoints",
        description="Pharmacy point set used by the nearest-pharmacy ranking"
    )

    PENDING_DB_PATH: Path = Field(
        default=Path("data/pending_prescriptions.db"),
        description="SQLite file for prescriptions captured while offline"
    )

    def prescriptions_path(self, user_id: str) -> str:
        return f"{self.USERS_COLLECTION}/{user_id}/{self.PRESCRIPTIONS_SUBCOLLECTION}"

    def medications_path(self, user_id: str, prescription_id: str) -> str:
        return f"{self.prescriptions_path(user_id)}/{prescription_id}/{self.MEDICATIONS_SUBCOLLECTION}"

    def unknown_catalog_ref(self) -> str:
        return f"/{self.CATALOG_COLLECTION}/unknown"


# Global instance
store_settings = StoreSettings()
