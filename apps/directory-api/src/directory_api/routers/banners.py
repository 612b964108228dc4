from __future__ import annotations

from fastapi import APIRouter, Depends

from directory_api.dependencies import get_directory_service
from directory_api.mapping import banner_to_dict
from directory_api.response import success_response
from directory_api.services.directory_service import DirectoryService

router = APIRouter(prefix="/v1/banners", tags=["banners"])


@router.get("")
async def list_active_banners(service: DirectoryService = Depends(get_directory_service)) -> dict:
    banners = service.active_banners()
    return success_response([banner_to_dict(item) for item in banners], meta={"total": len(banners)})
