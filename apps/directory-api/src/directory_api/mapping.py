"""Translation between backend rows, domain records and write payloads."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict
from typing import Any

from geo_engine import parse_maps_link

from directory_api.models import USER_ROLE, AdminUser, HeroBanner, Hospital

DEFAULT_OPERATING_HOURS = "24 Jam"


def normalize_array(value: Any) -> list[str]:
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return []


def clean_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def hospital_from_row(row: Mapping[str, Any]) -> Hospital:
    facilities = row.get("facilities")
    services = row.get("services")
    return Hospital(
        id=str(row["id"]),
        name=row.get("name") or "",
        type=row.get("type") or "",
        hospital_class=row.get("class") or "",
        address=row.get("address") or "",
        city=row.get("city") or "",
        district=row.get("district") or "",
        phone=row.get("phone") or "",
        email=row.get("email"),
        website=row.get("website"),
        image=row.get("image") or "",
        description=row.get("description") or "",
        facilities=list(facilities) if isinstance(facilities, list) else [],
        services=list(services) if isinstance(services, list) else [],
        total_beds=int(row.get("total_beds") or 0),
        has_igd=bool(row.get("has_igd")),
        has_icu=bool(row.get("has_icu")),
        operating_hours=row.get("operating_hours") or "",
        latitude=_optional_float(row.get("latitude")),
        longitude=_optional_float(row.get("longitude")),
        google_maps_link=row.get("google_maps_link"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def banner_from_row(row: Mapping[str, Any]) -> HeroBanner:
    return HeroBanner(
        id=str(row["id"]),
        title=row.get("title") or "",
        subtitle=row.get("subtitle") or "",
        image=row.get("image"),
        link=row.get("link"),
        is_active=bool(row.get("is_active")),
        order=int(row.get("order") or 0),
    )


def user_from_payload(payload: Mapping[str, Any]) -> AdminUser:
    metadata = payload.get("user_metadata") or {}
    app_metadata = payload.get("app_metadata") or {}
    return AdminUser(
        id=str(payload["id"]),
        email=str(payload.get("email") or ""),
        name=str(metadata.get("name") or payload.get("email") or ""),
        role=str(app_metadata.get("role") or USER_ROLE),
    )


def hospital_to_dict(hospital: Hospital) -> dict[str, Any]:
    data = asdict(hospital)
    data["class"] = data.pop("hospital_class")
    return data


def banner_to_dict(banner: HeroBanner) -> dict[str, Any]:
    return asdict(banner)


def _coordinates(data: Mapping[str, Any]) -> tuple[float | None, float | None]:
    parsed = parse_maps_link(data.get("google_maps_link"))
    latitude = data.get("latitude")
    longitude = data.get("longitude")
    if latitude is None and parsed is not None:
        latitude = parsed.lat
    if longitude is None and parsed is not None:
        longitude = parsed.lng
    return latitude, longitude


def build_hospital_insert_payload(data: Mapping[str, Any]) -> dict[str, Any]:
    latitude, longitude = _coordinates(data)
    has_icu = data.get("has_icu")
    has_igd = data.get("has_igd")
    total_beds = data.get("total_beds")
    operating_hours = data.get("operating_hours")
    google_maps_link = data.get("google_maps_link")
    return clean_payload(
        {
            "name": data.get("name"),
            "type": data.get("type"),
            "class": data.get("hospital_class"),
            "address": data.get("address"),
            "city": data.get("city"),
            "district": data.get("district"),
            "phone": data.get("phone"),
            "email": data.get("email"),
            "website": data.get("website"),
            "image": data.get("image"),
            "description": data.get("description"),
            "has_icu": False if has_icu is None else has_icu,
            "has_igd": False if has_igd is None else has_igd,
            "total_beds": 0 if total_beds is None else total_beds,
            "operating_hours": DEFAULT_OPERATING_HOURS if operating_hours is None else operating_hours,
            "google_maps_link": "" if google_maps_link is None else google_maps_link,
            "latitude": latitude,
            "longitude": longitude,
            "facilities": normalize_array(data.get("facilities")),
            "services": normalize_array(data.get("services")),
        }
    )


def _changed_tags(value: Any) -> list[str] | None:
    # an empty list clears the column; None or blank text leaves it untouched
    if value is None or value == "":
        return None
    return normalize_array(value)


def build_hospital_update_payload(data: Mapping[str, Any]) -> dict[str, Any]:
    latitude, longitude = _coordinates(data)
    facilities = data.get("facilities")
    services = data.get("services")
    return clean_payload(
        {
            "name": data.get("name"),
            "type": data.get("type"),
            "class": data.get("hospital_class"),
            "address": data.get("address"),
            "city": data.get("city"),
            "district": data.get("district"),
            "phone": data.get("phone"),
            "email": data.get("email"),
            "website": data.get("website"),
            "image": data.get("image"),
            "description": data.get("description"),
            "has_icu": data.get("has_icu"),
            "has_igd": data.get("has_igd"),
            "total_beds": data.get("total_beds"),
            "operating_hours": data.get("operating_hours"),
            "google_maps_link": data.get("google_maps_link"),
            "latitude": latitude,
            "longitude": longitude,
            "facilities": _changed_tags(facilities),
            "services": _changed_tags(services),
        }
    )


def build_banner_payload(data: Mapping[str, Any]) -> dict[str, Any]:
    # image and link are written as explicit nulls when empty
    is_active = data.get("is_active")
    order = data.get("order")
    return {
        "title": data.get("title"),
        "subtitle": data.get("subtitle"),
        "image": data.get("image") or None,
        "link": data.get("link") or None,
        "is_active": False if is_active is None else is_active,
        "order": 0 if order is None else order,
    }
