from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from directory_api.dependencies import get_admin_service
from directory_api.errors import ApiError
from directory_api.mapping import banner_to_dict
from directory_api.models import AuthSession
from directory_api.response import success_response
from directory_api.schemas.banner import BannerInput
from directory_api.security import require_admin
from directory_api.services.admin_service import AdminService

router = APIRouter(prefix="/v1/admin/banners", tags=["admin"])

MAX_IMAGE_BYTES = 5 * 1024 * 1024


@router.get("")
async def list_banners(
    service: AdminService = Depends(get_admin_service),
    admin: AuthSession = Depends(require_admin),
) -> dict:
    banners = service.list_banners()
    return success_response([banner_to_dict(item) for item in banners], meta={"total": len(banners)})


@router.post("", status_code=201)
async def create_banner(
    payload: BannerInput,
    service: AdminService = Depends(get_admin_service),
    admin: AuthSession = Depends(require_admin),
) -> dict:
    banner = await service.create_banner(payload.model_dump(), access_token=admin.access_token)
    return success_response(banner_to_dict(banner))


@router.post("/images", status_code=201)
async def upload_banner_image(
    request: Request,
    filename: str = Query(min_length=1, max_length=255),
    service: AdminService = Depends(get_admin_service),
    admin: AuthSession = Depends(require_admin),
) -> dict:
    content = await request.body()
    if len(content) > MAX_IMAGE_BYTES:
        raise ApiError("PAYLOAD_TOO_LARGE", "Image must be 5 MB or smaller", 413)
    content_type = request.headers.get("content-type", "application/octet-stream")
    uploaded = await service.upload_banner_image(
        filename,
        content,
        content_type,
        access_token=admin.access_token,
    )
    return success_response({"path": uploaded.path, "url": uploaded.public_url})


@router.patch("/{banner_id}")
async def update_banner(
    banner_id: str,
    payload: BannerInput,
    service: AdminService = Depends(get_admin_service),
    admin: AuthSession = Depends(require_admin),
) -> dict:
    banner = await service.update_banner(
        banner_id,
        payload.model_dump(exclude_unset=True),
        access_token=admin.access_token,
    )
    return success_response(banner_to_dict(banner))


@router.delete("/{banner_id}")
async def delete_banner(
    banner_id: str,
    service: AdminService = Depends(get_admin_service),
    admin: AuthSession = Depends(require_admin),
) -> dict:
    await service.delete_banner(banner_id, access_token=admin.access_token)
    return success_response({"id": banner_id, "deleted": True})
