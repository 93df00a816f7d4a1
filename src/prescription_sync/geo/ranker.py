# ============================================================================
# src/prescription_sync/geo/ranker.py
# ============================================================================
"""
Nearest-pharmacy ranking.

Two independent selections over the same distances:
- nearest_k: the K closest points, whatever their distance
- within_radius: every point at or under the radius

The visible set is their union, so sparse regions still show K pharmacies
while dense ones surface every in-range option.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from ..config.geo_config import geo_settings, GeoSettings
from ..core.records import PharmacyPoint, RankedPoint
from ..utils.exceptions import GeoInputError

logger = logging.getLogger(__name__)

EARTH_RADIUS_METERS = 6_371_000.0


def distance(lat1: float, lon1: float, lat2: float, lon2: float,
             radius: float = EARTH_RADIUS_METERS) -> float:
    """Great-circle distance in meters (haversine)."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
         * math.sin(d_lon / 2) ** 2)
    # Rounding can push a just past 1 for near-antipodal pairs
    a = min(1.0, max(0.0, a))
    c =2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return radius * c


def is_valid_coordinate(latitude: float, longitude: float) -> bool:
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        return False
    return (math.isfinite(lat) and math.isfinite(lon)
            and -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0)


def format_distance(distance_meters: float) -> str:
    if distance_meters < 1000:
        return f"{int(distance_meters)} m"
    return f"{distance_meters / 1000:.2f} km"


@dataclass
class RankingResult:
    nearest_k: List[RankedPoint] = field(default_factory=list)
    within_radius: List[PharmacyPoint] = field(default_factory=list)

    def relevant(self) -> List[PharmacyPoint]:
        """nearest_k points first, then extra in-radius points; no duplicates."""
        seen = set()
        merged = []
        for point in [r.point for r in self.nearest_k] + self.within_radius:
            if id(point) not in seen:
                seen.add(id(point))
                merged.append(point)
        return merged


class GeoRanker:

    def __init__(self, settings: Optional[GeoSettings] = None):
        self.settings = settings or geo_settings

    def distance(self, lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        return distance(lat1, lon1, lat2, lon2, radius=self.settings.EARTH_RADIUS_METERS)

    def rank(
        self,
        user_location: Tuple[float, float],
        points: Iterable[PharmacyPoint],
        radius_meters: Optional[float] = None,
        k: Optional[int] = None,
    ) -> RankingResult:
        """
        Rank points by distance from the user.

        Points with unusable coordinates are left out. Ties keep catalog order.

        Raises:
            GeoInputError: user location is not a valid coordinate pair
            ValueError: negative radius or k
        """
        radius_meters = self.settings.DEFAULT_RADIUS_METERS if radius_meters is None else radius_meters
        k = self.settings.NEAREST_COUNT if k is None else k
        if radius_meters < 0 or k < 0:
            raise ValueError("radius_meters and k must be non-negative")

        user_lat, user_lon = user_location
        if not is_valid_coordinate(user_lat, user_lon):
            raise GeoInputError("Invalid user location", user_lat, user_lon)

        ranked: List[RankedPoint] = []
        for point in points:
            if not is_valid_coordinate(point.latitude, point.longitude):
                logger.warning(f"Skipping '{point.name}': invalid coordinates "
                               f"({point.latitude}, {point.longitude})")
                continue
            ranked.append(RankedPoint(
                point=point,
                distance_meters=self.distance(user_lat, user_lon, point.latitude, point.longitude),
            ))

        by_distance = sorted(ranked, key=lambda r: r.distance_meters)

        return RankingResult(
            nearest_k=by_distance[:k],
            within_radius=[r.point for r in ranked if r.distance_meters <= radius_meters],
        )

    def relevant_points(
        self,
        user_location: Tuple[float, float],
        points: Iterable[PharmacyPoint],
        radius_meters: Optional[float] = None,
        k: Optional[int] = None,
    ) -> List[PharmacyPoint]:
        return self.rank(user_location, points, radius_meters, k).relevant()
