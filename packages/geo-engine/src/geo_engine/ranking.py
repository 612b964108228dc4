"""Nearest-location ranking.

Items without coordinates keep an undefined distance and are ordered after
every located item by comparing them as ``MISSING_DISTANCE_KM``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

from geo_engine.distance import haversine_distance_km, round_distance_km
from geo_engine.models import GeoPoint, RankedItem

T = TypeVar("T")

MISSING_DISTANCE_KM = 9999.0


def distance_sort_key(distance_km: float | None) -> float:
    return MISSING_DISTANCE_KM if distance_km is None else distance_km


def measure_distance_km(origin: GeoPoint, target: GeoPoint | None) -> float | None:
    if target is None:
        return None
    return round_distance_km(haversine_distance_km(origin, target))


def annotate_distances(
    origin: GeoPoint,
    items: Iterable[T],
    locate: Callable[[T], GeoPoint | None],
) -> list[RankedItem[T]]:
    return [RankedItem(item=item, distance_km=measure_distance_km(origin, locate(item))) for item in items]


def rank_by_distance(
    origin: GeoPoint,
    items: Iterable[T],
    locate: Callable[[T], GeoPoint | None],
) -> list[RankedItem[T]]:
    annotated = annotate_distances(origin, items, locate)
    return sorted(annotated, key=lambda ranked: distance_sort_key(ranked.distance_km))
