# ============================================================================
# src/prescription_sync/geo/points.py
# ============================================================================
"""
Pharmacy point loading.

Reads the pharmacy collection into immutable PharmacyPoints. Coordinates
come either as top-level latitude/longitude fields or as a nested
``location`` (a Firestore GeoPoint or a plain mapping).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config.base_config import store_settings, StoreSettings
from ..core.records import PharmacyPoint
from ..core.store import DocumentStore
from ..utils.exceptions import StoreError

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class LoadResult:
    state: LoadState
    points: List[PharmacyPoint] = field(default_factory=list)
    error: Optional[str] = None


def _coordinate(data: Dict[str, Any], name: str) -> Optional[float]:
    value = data.get(name)
    if value is None:
        location = data.get("location")
        if isinstance(location, dict):
            value = location.get(name)
        elif location is not None:
            value = getattr(location, name, None)
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def point_from_document(data: Dict[str, Any]) -> Optional[PharmacyPoint]:
    """Build a PharmacyPoint, or None when the document has no coordinates."""
    latitude = _coordinate(data, "latitude")
    longitude = _coordinate(data, "longitude")
    if latitude is None or longitude is None:
        return None

    return PharmacyPoint(
        name=str(data.get("name", "")),
        address=str(data.get("address", "")),
        latitude=latitude,
        longitude=longitude,
        chain=str(data.get("chain", "")),
        opening_hours=tuple(str(h) for h in data.get("openingHours") or ()),
        opening_days=tuple(str(d) for d in data.get("openingDays") or ()),
    )


class PharmacyPointsLoader:

    def __init__(self, store: DocumentStore, settings: Optional[StoreSettings] = None):
        self.store = store
        self.settings = settings or store_settings
        self.state = LoadState.LOADING
        self._points: List[PharmacyPoint] = []

    @property
    def points(self) -> List[PharmacyPoint]:
        """Last successfully loaded point set."""
        return list(self._points)

    async def load(self) -> LoadResult:
        self.state = LoadState.LOADING
        try:
            docs = await self.store.list(self.settings.PHARMACY_COLLECTION)
        except StoreError as e:
            logger.error(f"Error fetching pharmacy points: {e}")
            self.state = LoadState.ERROR
            return LoadResult(state=LoadState.ERROR, points=self.points, error=str(e))

        points = []
        for doc in docs:
            point = point_from_document(doc.data)
            if point is None:
                logger.warning(f"Pharmacy document {doc.id} has no coordinates, skipped")
                continue
            points.append(point)

        self._points = points
        self.state = LoadState.SUCCESS
        logger.info(f"Loaded {len(points)} pharmacy points")
        return LoadResult(state=LoadState.SUCCESS, points=list(points))
