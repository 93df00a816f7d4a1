# src/prescription_sync/geo/__init__.py

from .ranker import (
    GeoRanker,
    RankingResult,
    distance,
    format_distance,
    is_valid_coordinate,
)
from .points import PharmacyPointsLoader, LoadResult, LoadState, point_from_document

__all__ = [
    "GeoRanker",
    "RankingResult",
    "distance",
    "format_distance",
    "is_valid_coordinate",
    "PharmacyPointsLoader",
    "LoadResult",
    "LoadState",
    "point_from_document",
]
