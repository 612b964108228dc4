from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from directory_api.models import AuthSession, HeroBanner, Hospital


@dataclass
class BackendError(Exception):
    """A failed call to the hosted backend (network, constraint or auth)."""

    code: str
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class HospitalRepository(Protocol):
    async def list_hospitals(self) -> list[Hospital]: ...

    async def insert_hospital(self, payload: dict[str, Any], access_token: str | None = None) -> Hospital: ...

    async def update_hospital(
        self, hospital_id: str, payload: dict[str, Any], access_token: str | None = None
    ) -> Hospital | None: ...

    async def delete_hospital(self, hospital_id: str, access_token: str | None = None) -> None: ...


class BannerRepository(Protocol):
    async def list_banners(self) -> list[HeroBanner]: ...

    async def insert_banner(self, payload: dict[str, Any], access_token: str | None = None) -> HeroBanner: ...

    async def update_banner(
        self, banner_id: str, payload: dict[str, Any], access_token: str | None = None
    ) -> HeroBanner | None: ...

    async def delete_banner(self, banner_id: str, access_token: str | None = None) -> None: ...


class AuthGateway(Protocol):
    async def sign_in(self, email: str, password: str) -> AuthSession: ...

    async def sign_up(self, email: str, password: str, name: str) -> AuthSession: ...

    async def sign_out(self, access_token: str) -> None: ...

    async def get_session(self, access_token: str) -> AuthSession: ...


class ImageStorage(Protocol):
    async def upload(self, path: str, content: bytes, content_type: str, access_token: str | None = None) -> None: ...

    def public_url(self, path: str) -> str: ...
