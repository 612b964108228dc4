from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from directory_api.dependencies import get_directory_service
from directory_api.errors import ApiError
from directory_api.mapping import hospital_to_dict
from directory_api.models import Hospital
from directory_api.response import success_response
from directory_api.schemas.hospital import HospitalListQuery
from directory_api.services.directory_service import DirectoryService, require_location, resolve_location

router = APIRouter(prefix="/v1", tags=["hospitals"])


def _hospital_payload(hospital: Hospital, nearest_id: str | None = None) -> dict[str, Any]:
    data = hospital_to_dict(hospital)
    data["is_nearest"] = nearest_id is not None and hospital.id == nearest_id
    return data


@router.get("/cities")
async def list_cities(service: DirectoryService = Depends(get_directory_service)) -> dict:
    return success_response(service.cities())


@router.get("/hospitals")
async def list_hospitals(
    city: str | None = None,
    query: str | None = Query(default=None, max_length=200),
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    geolocation_error: str | None = None,
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    listing = service.list_hospitals(
        HospitalListQuery(city=city, query=query, lat=lat, lng=lng, geolocation_error=geolocation_error)
    )
    items = [_hospital_payload(item, listing.nearest_id) for item in listing.items]
    meta: dict[str, Any] = {"total": len(items), "mode": listing.mode}
    if listing.location is not None:
        meta["location"] = {"lat": listing.location.lat, "lng": listing.location.lng}
    return success_response(items, meta=meta)


@router.get("/hospitals/nearest")
async def nearest_hospitals(
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    geolocation_error: str | None = None,
    limit: int = Query(default=5, ge=1, le=50),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    location = require_location(lat, lng, geolocation_error)
    items = service.nearest(location, limit=limit)
    nearest_id = items[0].id if items else None
    return success_response(
        [_hospital_payload(item, nearest_id) for item in items],
        meta={"total": len(items), "limit": limit},
    )


@router.get("/hospitals/{hospital_id}")
async def get_hospital(
    hospital_id: str,
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    detail = service.hospital_detail(hospital_id, resolve_location(lat, lng))
    if detail is None:
        raise ApiError("NOT_FOUND", "Hospital not found", 404)
    data = _hospital_payload(detail.hospital)
    data["links"] = detail.links
    return success_response(data)
