# ============================================================================
# src/prescription_sync/config/geo_config.py
# ============================================================================
"""
Geo Ranking Settings
- Earth radius for haversine
- Visibility radius
- Nearest-K count
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class GeoSettings(BaseSettings):
    EARTH_RADIUS_METERS: float = Field(
        default=6_371_000.0,
        gt=0,
        description="Mean Earth radius used by the haversine formula"
    )
    DEFAULT_RADIUS_METERS: float = Field(
        default=6000.0,
        ge=0,
        description="Pharmacies at or under this distance are always visible"
    )
    NEAREST_COUNT: int = Field(
        default=5,
        ge=0,
        description="Number of nearest pharmacies shown regardless of radius"
    )


geo_settings = GeoSettings()
