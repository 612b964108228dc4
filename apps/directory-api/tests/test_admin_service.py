import re
from typing import Any

import pytest

from directory_api.errors import ApiError
from directory_api.models import Hospital, UserLocation
from directory_api.repositories.base import BackendError
from directory_api.repositories.memory import (
    InMemoryBannerRepository,
    InMemoryHospitalRepository,
    InMemoryImageStorage,
)
from directory_api.services.admin_service import AdminService, banner_image_path
from directory_api.store import DirectoryStore, bootstrap

VALID_HOSPITAL = {
    "name": "RS Sari Asih Serang",
    "address": "Jl. Jend. Sudirman No. 38",
    "phone": "0254 220 044",
    "city": "Kota Serang",
    "description": "Rumah sakit swasta.",
    "image": "https://images.example.com/sari-asih.jpg",
    "facilities": "IGD, ICU",
    "latitude": -6.12,
    "longitude": 106.16,
}


class CountingHospitalRepository(InMemoryHospitalRepository):
    def __init__(self) -> None:
        super().__init__()
        self.insert_calls = 0
        self.tokens: list[str | None] = []

    async def insert_hospital(self, payload: dict[str, Any], access_token: str | None = None) -> Hospital:
        self.insert_calls += 1
        self.tokens.append(access_token)
        return await super().insert_hospital(payload, access_token)

    async def delete_hospital(self, hospital_id: str, access_token: str | None = None) -> None:
        self.tokens.append(access_token)
        await super().delete_hospital(hospital_id, access_token)


class BrokenHospitalRepository(InMemoryHospitalRepository):
    async def insert_hospital(self, payload: dict[str, Any], access_token: str | None = None) -> Hospital:
        raise BackendError("BACKEND_HTTP_ERROR", "permission denied for table hospitals", 403)


async def _service(hospitals=None, *, echo_writes: bool = True) -> tuple[AdminService, DirectoryStore]:
    store = DirectoryStore()
    hospitals = hospitals or InMemoryHospitalRepository()
    banners = InMemoryBannerRepository()
    await bootstrap(store, hospitals, banners)
    service = AdminService(
        store,
        hospitals,
        banners,
        InMemoryImageStorage(),
        echo_writes=echo_writes,
        clock=lambda: 1700000000.5,
    )
    return service, store


@pytest.mark.asyncio
async def test_empty_name_never_reaches_backend() -> None:
    repository = CountingHospitalRepository()
    service, _ = await _service(repository)

    with pytest.raises(ApiError) as exc_info:
        await service.create_hospital({**VALID_HOSPITAL, "name": "  "})

    assert repository.insert_calls == 0
    assert exc_info.value.code == "VALIDATION_ERROR"
    assert exc_info.value.status_code == 422
    assert exc_info.value.details == ["Nama rumah sakit harus diisi"]


@pytest.mark.asyncio
async def test_invalid_fields_are_reported_together() -> None:
    service, _ = await _service()

    with pytest.raises(ApiError) as exc_info:
        await service.create_hospital({**VALID_HOSPITAL, "phone": "12345", "email": "bukan-email"})

    assert exc_info.value.details == ["Nomor telepon harus valid", "Format email tidak valid"]


@pytest.mark.asyncio
async def test_created_hospital_is_echoed_with_distance() -> None:
    service, store = await _service()
    location = UserLocation(lat=-6.10, lng=106.15)

    created = await service.create_hospital(dict(VALID_HOSPITAL), location)

    assert created.distance == 2.5
    assert created.facilities == ["IGD", "ICU"]
    assert store.hospitals()[0].id == created.id
    assert store.hospitals()[0].distance is None


@pytest.mark.asyncio
async def test_writes_are_not_echoed_when_webhook_delivers_them() -> None:
    service, store = await _service(echo_writes=False)

    created = await service.create_hospital(dict(VALID_HOSPITAL))

    assert store.get_hospital(created.id) is None


@pytest.mark.asyncio
async def test_backend_failure_surfaces_as_backend_error() -> None:
    service, _ = await _service(BrokenHospitalRepository())

    with pytest.raises(ApiError) as exc_info:
        await service.create_hospital(dict(VALID_HOSPITAL))

    assert exc_info.value.code == "BACKEND_ERROR"
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_partial_update_is_validated_against_current_record() -> None:
    service, store = await _service()

    updated = await service.update_hospital("rs-2", {"phone": "+6281234567890"})
    with pytest.raises(ApiError) as exc_info:
        await service.update_hospital("rs-2", {"address": ""})

    assert updated.phone == "+6281234567890"
    assert store.get_hospital("rs-2").phone == "+6281234567890"
    assert exc_info.value.details == ["Alamat harus diisi"]


@pytest.mark.asyncio
async def test_update_and_delete_unknown_or_existing_records() -> None:
    service, store = await _service()

    with pytest.raises(ApiError) as exc_info:
        await service.update_hospital("missing", {"name": "X"})
    await service.delete_hospital("rs-3")

    assert exc_info.value.status_code == 404
    assert store.get_hospital("rs-3") is None


@pytest.mark.asyncio
async def test_banner_crud_goes_through_validation_and_store() -> None:
    service, store = await _service()

    with pytest.raises(ApiError):
        await service.create_banner({"title": "", "image": "https://images.example.com/x.jpg"})
    created = await service.create_banner(
        {"title": "Vaksinasi", "image": "https://images.example.com/vaksin.jpg", "is_active": True, "order": 3}
    )
    updated = await service.update_banner(created.id, {"order": 0})
    await service.delete_banner("bn-1")

    assert [item.id for item in service.list_banners()] == [created.id, "bn-2"]
    assert updated.title == "Vaksinasi"
    assert store.get_banner("bn-1") is None


def test_banner_image_path_format() -> None:
    path = banner_image_path("folder/promo igd.png", 1700000000.5)

    assert re.fullmatch(r"banners/banner-1700000000500-[0-9a-z]{6}-promo igd\.png", path)


@pytest.mark.asyncio
async def test_upload_banner_image_returns_public_url() -> None:
    service, _ = await _service()

    uploaded = await service.upload_banner_image("promo.png", b"\x89PNG", "image/png")
    with pytest.raises(ApiError):
        await service.upload_banner_image("notes.txt", b"text", "text/plain")

    assert uploaded.path.startswith("banners/banner-1700000000500-")
    assert uploaded.public_url.endswith(uploaded.path)


@pytest.mark.asyncio
async def test_writes_forward_the_admin_access_token() -> None:
    repository = CountingHospitalRepository()
    service, _ = await _service(repository)

    created = await service.create_hospital(VALID_HOSPITAL, access_token="admin-jwt")
    await service.delete_hospital(created.id, access_token="admin-jwt")

    assert repository.tokens == ["admin-jwt", "admin-jwt"]
