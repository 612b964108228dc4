from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from directory_api.dependencies import get_admin_service
from directory_api.mapping import hospital_to_dict
from directory_api.models import AuthSession
from directory_api.response import success_response
from directory_api.schemas.hospital import HospitalInput
from directory_api.security import require_admin
from directory_api.services.admin_service import AdminService
from directory_api.services.directory_service import resolve_location

router = APIRouter(prefix="/v1/admin/hospitals", tags=["admin"])


@router.post("", status_code=201)
async def create_hospital(
    payload: HospitalInput,
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    service: AdminService = Depends(get_admin_service),
    admin: AuthSession = Depends(require_admin),
) -> dict:
    hospital = await service.create_hospital(
        payload.model_dump(),
        resolve_location(lat, lng),
        access_token=admin.access_token,
    )
    return success_response(hospital_to_dict(hospital))


@router.patch("/{hospital_id}")
async def update_hospital(
    hospital_id: str,
    payload: HospitalInput,
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    service: AdminService = Depends(get_admin_service),
    admin: AuthSession = Depends(require_admin),
) -> dict:
    hospital = await service.update_hospital(
        hospital_id,
        payload.model_dump(exclude_unset=True),
        resolve_location(lat, lng),
        access_token=admin.access_token,
    )
    return success_response(hospital_to_dict(hospital))


@router.delete("/{hospital_id}")
async def delete_hospital(
    hospital_id: str,
    service: AdminService = Depends(get_admin_service),
    admin: AuthSession = Depends(require_admin),
) -> dict:
    await service.delete_hospital(hospital_id, access_token=admin.access_token)
    return success_response({"id": hospital_id, "deleted": True})
