"""Domain records for the hospital directory.

Records mirror the two backend tables (``hospitals`` and ``hero_banners``)
in snake_case. ``Hospital.distance`` is derived per request and never
persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from geo_engine import GeoPoint

HOSPITALS_TABLE = "hospitals"
BANNERS_TABLE = "hero_banners"

# Only users whose backend app_metadata carries ADMIN_ROLE may use the admin API.
ADMIN_ROLE = "admin"
USER_ROLE = "user"

BANTEN_CITIES: tuple[str, ...] = (
    "Kota Serang",
    "Kota Cilegon",
    "Kota Tangerang",
    "Kota Tangerang Selatan",
    "Kabupaten Serang",
    "Kabupaten Tangerang",
    "Kabupaten Pandeglang",
    "Kabupaten Lebak",
)

ALL_CITIES = "Semua"
NEAREST_LOCATION = "Lokasi Terdekat"


class HospitalType(StrEnum):
    GENERAL = "RS Umum"
    SPECIALTY = "RS Khusus"
    MOTHER_AND_CHILD = "RS Ibu & Anak"
    MENTAL = "RS Jiwa"
    CLINIC = "Klinik"


class HospitalClass(StrEnum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    UNCLASSED = "Tidak Berkelas"


@dataclass(frozen=True)
class Hospital:
    id: str
    name: str
    type: str = HospitalType.GENERAL.value
    hospital_class: str = HospitalClass.C.value
    address: str = ""
    city: str = ""
    district: str = ""
    phone: str = ""
    email: str | None = None
    website: str | None = None
    image: str = ""
    description: str = ""
    facilities: list[str] = field(default_factory=list)
    services: list[str] = field(default_factory=list)
    total_beds: int = 0
    has_igd: bool = False
    has_icu: bool = False
    operating_hours: str = "24 Jam"
    latitude: float | None = None
    longitude: float | None = None
    google_maps_link: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    distance: float | None = None

    @property
    def point(self) -> GeoPoint | None:
        if self.latitude is None or self.longitude is None:
            return None
        return GeoPoint(lat=float(self.latitude), lng=float(self.longitude))


@dataclass(frozen=True)
class HeroBanner:
    id: str
    title: str
    subtitle: str = ""
    image: str | None = None
    link: str | None = None
    is_active: bool = False
    order: int = 0


@dataclass(frozen=True)
class UserLocation:
    lat: float
    lng: float
    city: str | None = None
    address: str | None = None

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)


@dataclass(frozen=True)
class AdminUser:
    id: str
    email: str
    name: str = ""
    role: str = USER_ROLE


@dataclass(frozen=True)
class AuthSession:
    """Mirror of the auth service session object."""

    user: AdminUser | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None
