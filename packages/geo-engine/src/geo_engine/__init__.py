"""Geo engine core package."""

from geo_engine.distance import EARTH_RADIUS_KM, haversine_distance_km, round_distance_km
from geo_engine.geolocation import (
    GEOLOCATION_OPTIONS,
    GeolocationErrorReason,
    LocationUnavailableError,
    classify_geolocation_error,
)
from geo_engine.maps_link import directions_url, parse_maps_link
from geo_engine.models import GeoPoint, RankedItem
from geo_engine.ranking import (
    MISSING_DISTANCE_KM,
    annotate_distances,
    distance_sort_key,
    measure_distance_km,
    rank_by_distance,
)

__all__ = [
    "EARTH_RADIUS_KM",
    "GEOLOCATION_OPTIONS",
    "GeoPoint",
    "GeolocationErrorReason",
    "LocationUnavailableError",
    "MISSING_DISTANCE_KM",
    "RankedItem",
    "annotate_distances",
    "classify_geolocation_error",
    "directions_url",
    "distance_sort_key",
    "haversine_distance_km",
    "measure_distance_km",
    "parse_maps_link",
    "rank_by_distance",
    "round_distance_km",
]
