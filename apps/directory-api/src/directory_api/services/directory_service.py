from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from urllib.parse import quote

from geo_engine import (
    GeolocationErrorReason,
    LocationUnavailableError,
    annotate_distances,
    classify_geolocation_error,
    directions_url,
    rank_by_distance,
)
from shared.security import sanitize_input, validate_search_input

from directory_api.errors import ApiError
from directory_api.models import (
    ALL_CITIES,
    BANTEN_CITIES,
    NEAREST_LOCATION,
    HeroBanner,
    Hospital,
    UserLocation,
)
from directory_api.schemas.hospital import HospitalListQuery
from directory_api.store import DirectoryStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HospitalListing:
    items: list[Hospital]
    mode: str
    nearest_id: str | None = None
    location: UserLocation | None = None


@dataclass(frozen=True)
class HospitalDetail:
    hospital: Hospital
    links: dict[str, str] = field(default_factory=dict)


def resolve_location(lat: float | None, lng: float | None) -> UserLocation | None:
    if lat is None or lng is None:
        return None
    return UserLocation(lat=lat, lng=lng)


def require_location(
    lat: float | None,
    lng: float | None,
    geolocation_error: str | None = None,
) -> UserLocation:
    """Location for nearest ranking.

    A failure reported by the client device wins over a missing position so
    the caller can tell a denied permission from an unsupported device.
    """
    location = resolve_location(lat, lng)
    if location is not None:
        return location
    if geolocation_error:
        raise LocationUnavailableError(classify_geolocation_error(geolocation_error))
    raise LocationUnavailableError(
        GeolocationErrorReason.UNSUPPORTED,
        "lat and lng are required for nearest ranking",
    )


def contact_links(hospital: Hospital) -> dict[str, str]:
    links = {
        "directions": directions_url(
            point=hospital.point,
            maps_link=hospital.google_maps_link,
            name=hospital.name,
            address=hospital.address,
        )
    }
    if hospital.phone:
        links["call"] = "tel:" + "".join(hospital.phone.split())
    if hospital.email:
        links["email"] = "mailto:" + quote(sanitize_input(hospital.email), safe="@")
    if hospital.website:
        links["website"] = hospital.website
    return links


def _matches(hospital: Hospital, needle: str) -> bool:
    haystack = (
        hospital.name,
        hospital.address,
        hospital.city,
        *hospital.facilities,
        *hospital.services,
    )
    return any(needle in value.lower() for value in haystack)


def _with_distances(hospitals: list[Hospital], location: UserLocation) -> list[Hospital]:
    annotated = annotate_distances(location.point, hospitals, lambda item: item.point)
    return [replace(ranked.item, distance=ranked.distance_km) for ranked in annotated]


class DirectoryService:
    def __init__(self, store: DirectoryStore) -> None:
        self._store = store

    def cities(self) -> list[str]:
        return [ALL_CITIES, NEAREST_LOCATION, *BANTEN_CITIES]

    def list_hospitals(self, query: HospitalListQuery) -> HospitalListing:
        city = query.city or ALL_CITIES
        nearest_mode = city == NEAREST_LOCATION
        if nearest_mode:
            location: UserLocation | None = require_location(query.lat, query.lng, query.geolocation_error)
        else:
            location = resolve_location(query.lat, query.lng)

        hospitals = self._store.hospitals()
        if location is not None:
            hospitals = _with_distances(hospitals, location)
        if nearest_mode and location is not None:
            ranked = rank_by_distance(location.point, hospitals, lambda item: item.point)
            hospitals = [ranked_item.item for ranked_item in ranked]
        elif city != ALL_CITIES:
            hospitals = [item for item in hospitals if item.city == city]

        if query.query:
            needle = sanitize_input(query.query)
            if not validate_search_input(needle):
                raise ApiError("VALIDATION_ERROR", "Invalid search query", 422)
            lowered = needle.lower()
            hospitals = [item for item in hospitals if _matches(item, lowered)]

        nearest_id = hospitals[0].id if nearest_mode and hospitals else None
        mode = "nearest" if nearest_mode else ("all" if city == ALL_CITIES else "city")
        return HospitalListing(items=hospitals, mode=mode, nearest_id=nearest_id, location=location)

    def nearest(self, location: UserLocation, limit: int = 5) -> list[Hospital]:
        ranked = rank_by_distance(location.point, self._store.hospitals(), lambda item: item.point)
        return [replace(item.item, distance=item.distance_km) for item in ranked[:limit]]

    def hospital_detail(self, hospital_id: str, location: UserLocation | None = None) -> HospitalDetail | None:
        hospital = self._store.get_hospital(hospital_id)
        if hospital is None:
            return None
        if location is not None:
            hospital = _with_distances([hospital], location)[0]
        return HospitalDetail(hospital=hospital, links=contact_links(hospital))

    def active_banners(self) -> list[HeroBanner]:
        active = [banner for banner in self._store.banners() if banner.is_active]
        return sorted(active, key=lambda banner: banner.order)
