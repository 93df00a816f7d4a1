# ============================================================================
# src/prescription_sync/config/nfc_config.py
# ============================================================================
"""
NFC & Ingestion Settings
- Tag MIME type
- Issuance timestamp format
- Treatment window time zone
- Dose / frequency defaults
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class NfcSettings(BaseSettings):
    APP_IDENTIFIER: str = Field(
        default="com.example.mymeds",
        description="Application identifier embedded in the tag MIME type"
    )
    ISSUED_AT_FORMAT: str = Field(
        default="%Y-%m-%dT%H:%M:%SZ",
        description="strptime pattern of the payload issuedAt field (UTC)"
    )
    TREATMENT_TIMEZONE: str = Field(
        default="UTC",
        description="Zone in which treatment durations are added as calendar days"
    )
    DEFAULT_DOSE_MG: int = Field(
        default=0,
        ge=0,
        description="Dose used when the dose text carries no digits"
    )
    DEFAULT_FREQUENCY_HOURS: int = Field(
        default=24,
        ge=1,
        description="Frequency used when the frequency text carries no digits"
    )
    SOURCE_MARKER: str = Field(
        default="NFC Tag",
        description="sourceFile value stamped on every record ingested from a tag"
    )

    @field_validator("APP_IDENTIFIER")
    @classmethod
    def _no_slash(cls, value: str) -> str:
        if not value or "/" in value:
            raise ValueError("APP_IDENTIFIER must be a non-empty name without '/'")
        return value

    @property
    def mime_type(self) -> str:
        return f"application/{self.APP_IDENTIFIER}.prescription"


nfc_settings = NfcSettings()
