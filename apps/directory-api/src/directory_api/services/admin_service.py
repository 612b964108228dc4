"""Admin-side writes for hospitals, banners and banner images.

Every write is validated first; a record that fails validation never
reaches the backend. When the backend does not push change notifications
to this process (``echo_writes``), the returned row is merged into the
store directly so readers see it immediately.

Writes carry the acting admin's access token so the backend applies its
own row-level policies to them.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import PurePosixPath
from typing import Any

from geo_engine import measure_distance_km
from shared.security import validate_banner_data, validate_hospital_data

from directory_api.errors import ApiError
from directory_api.mapping import (
    banner_to_dict,
    build_banner_payload,
    build_hospital_insert_payload,
    build_hospital_update_payload,
    clean_payload,
    hospital_to_dict,
)
from directory_api.models import BANNERS_TABLE, HOSPITALS_TABLE, HeroBanner, Hospital, UserLocation
from directory_api.repositories.base import BackendError, BannerRepository, HospitalRepository, ImageStorage
from directory_api.store import ChangeApplied, DirectoryStore
from directory_api.sync import Deleted, Inserted, Updated

logger = logging.getLogger(__name__)

BANNER_IMAGE_FOLDER = "banners"
_BASE36 = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class UploadedImage:
    path: str
    public_url: str


def _random_suffix(length: int = 6) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def banner_image_path(filename: str, now_seconds: float) -> str:
    original = PurePosixPath(filename.replace("\\", "/")).name
    return f"{BANNER_IMAGE_FOLDER}/banner-{int(now_seconds * 1000)}-{_random_suffix()}-{original}"


def _raise_if_invalid(errors: list[str]) -> None:
    if errors:
        raise ApiError("VALIDATION_ERROR", errors[0], 422, details=errors)


def _backend_failure(operation: str, exc: BackendError) -> ApiError:
    logger.error(
        "admin_write_failed",
        extra={"component": "admin", "operation": operation, "code": exc.code, "error": exc.message},
    )
    return ApiError("BACKEND_ERROR", exc.message, 502)


class AdminService:
    def __init__(
        self,
        store: DirectoryStore,
        hospitals: HospitalRepository,
        banners: BannerRepository,
        storage: ImageStorage,
        *,
        echo_writes: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._hospitals = hospitals
        self._banners = banners
        self._storage = storage
        self._echo_writes = echo_writes
        self._clock = clock

    def _with_distance(self, hospital: Hospital, location: UserLocation | None) -> Hospital:
        if location is None:
            return hospital
        return replace(hospital, distance=measure_distance_km(location.point, hospital.point))

    async def create_hospital(
        self,
        data: dict[str, Any],
        location: UserLocation | None = None,
        *,
        access_token: str | None = None,
    ) -> Hospital:
        _raise_if_invalid(validate_hospital_data(data).errors)
        payload = build_hospital_insert_payload(data)
        try:
            created = await self._hospitals.insert_hospital(payload, access_token)
        except BackendError as exc:
            raise _backend_failure("create_hospital", exc) from exc
        if self._echo_writes:
            self._store.dispatch(ChangeApplied(Inserted(HOSPITALS_TABLE, created)))
        logger.info("hospital_created", extra={"component": "admin", "hospital_id": created.id})
        return self._with_distance(created, location)

    async def update_hospital(
        self,
        hospital_id: str,
        data: dict[str, Any],
        location: UserLocation | None = None,
        *,
        access_token: str | None = None,
    ) -> Hospital:
        current = self._store.get_hospital(hospital_id)
        if current is None:
            raise ApiError("NOT_FOUND", "Hospital not found", 404)
        merged = {**hospital_to_dict(current), **clean_payload(data)}
        _raise_if_invalid(validate_hospital_data(merged).errors)

        payload = build_hospital_update_payload(data)
        try:
            updated = await self._hospitals.update_hospital(hospital_id, payload, access_token)
        except BackendError as exc:
            raise _backend_failure("update_hospital", exc) from exc
        if updated is None:
            raise ApiError("NOT_FOUND", "Hospital not found", 404)
        if self._echo_writes:
            self._store.dispatch(ChangeApplied(Updated(HOSPITALS_TABLE, updated)))
        logger.info("hospital_updated", extra={"component": "admin", "hospital_id": hospital_id})
        return self._with_distance(updated, location)

    async def delete_hospital(self, hospital_id: str, *, access_token: str | None = None) -> None:
        try:
            await self._hospitals.delete_hospital(hospital_id, access_token)
        except BackendError as exc:
            raise _backend_failure("delete_hospital", exc) from exc
        if self._echo_writes:
            self._store.dispatch(ChangeApplied(Deleted(HOSPITALS_TABLE, hospital_id)))
        logger.info("hospital_deleted", extra={"component": "admin", "hospital_id": hospital_id})

    def list_banners(self) -> list[HeroBanner]:
        return sorted(self._store.banners(), key=lambda banner: banner.order)

    async def create_banner(self, data: dict[str, Any], *, access_token: str | None = None) -> HeroBanner:
        _raise_if_invalid(validate_banner_data(data).errors)
        try:
            created = await self._banners.insert_banner(build_banner_payload(data), access_token)
        except BackendError as exc:
            raise _backend_failure("create_banner", exc) from exc
        if self._echo_writes:
            self._store.dispatch(ChangeApplied(Inserted(BANNERS_TABLE, created)))
        logger.info("banner_created", extra={"component": "admin", "banner_id": created.id})
        return created

    async def update_banner(
        self,
        banner_id: str,
        data: dict[str, Any],
        *,
        access_token: str | None = None,
    ) -> HeroBanner:
        current = self._store.get_banner(banner_id)
        if current is None:
            raise ApiError("NOT_FOUND", "Banner not found", 404)
        merged = {**banner_to_dict(current), **clean_payload(data)}
        _raise_if_invalid(validate_banner_data(merged).errors)

        try:
            updated = await self._banners.update_banner(banner_id, build_banner_payload(merged), access_token)
        except BackendError as exc:
            raise _backend_failure("update_banner", exc) from exc
        if updated is None:
            raise ApiError("NOT_FOUND", "Banner not found", 404)
        if self._echo_writes:
            self._store.dispatch(ChangeApplied(Updated(BANNERS_TABLE, updated)))
        logger.info("banner_updated", extra={"component": "admin", "banner_id": banner_id})
        return updated

    async def delete_banner(self, banner_id: str, *, access_token: str | None = None) -> None:
        try:
            await self._banners.delete_banner(banner_id, access_token)
        except BackendError as exc:
            raise _backend_failure("delete_banner", exc) from exc
        if self._echo_writes:
            self._store.dispatch(ChangeApplied(Deleted(BANNERS_TABLE, banner_id)))
        logger.info("banner_deleted", extra={"component": "admin", "banner_id": banner_id})

    async def upload_banner_image(
        self,
        filename: str,
        content: bytes,
        content_type: str,
        *,
        access_token: str | None = None,
    ) -> UploadedImage:
        if not filename.strip():
            raise ApiError("VALIDATION_ERROR", "filename is required", 422)
        if not content:
            raise ApiError("VALIDATION_ERROR", "image content is empty", 422)
        if not content_type.startswith("image/"):
            raise ApiError("VALIDATION_ERROR", "only image uploads are accepted", 422)

        path = banner_image_path(filename, self._clock())
        try:
            await self._storage.upload(path, content, content_type, access_token)
        except BackendError as exc:
            raise _backend_failure("upload_banner_image", exc) from exc
        logger.info("banner_image_uploaded", extra={"component": "admin", "path": path})
        return UploadedImage(path=path, public_url=self._storage.public_url(path))
