"""Gateways backed by the hosted backend's REST APIs."""

from __future__ import annotations

from typing import Any

from directory_api.clients.supabase_client import SupabaseClient
from directory_api.mapping import banner_from_row, hospital_from_row, user_from_payload
from directory_api.models import BANNERS_TABLE, HOSPITALS_TABLE, AuthSession, HeroBanner, Hospital
from directory_api.repositories.base import BackendError


class SupabaseHospitalRepository:
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def list_hospitals(self) -> list[Hospital]:
        rows = await self._client.select(HOSPITALS_TABLE, order="created_at", ascending=False)
        return [hospital_from_row(row) for row in rows]

    async def insert_hospital(self, payload: dict[str, Any], access_token: str | None = None) -> Hospital:
        rows = await self._client.insert(HOSPITALS_TABLE, payload, access_token)
        if not rows:
            raise BackendError("BACKEND_EMPTY_RESULT", "Backend returned no inserted row")
        return hospital_from_row(rows[0])

    async def update_hospital(
        self, hospital_id: str, payload: dict[str, Any], access_token: str | None = None
    ) -> Hospital | None:
        rows = await self._client.update(HOSPITALS_TABLE, hospital_id, payload, access_token)
        return hospital_from_row(rows[0]) if rows else None

    async def delete_hospital(self, hospital_id: str, access_token: str | None = None) -> None:
        await self._client.delete(HOSPITALS_TABLE, hospital_id, access_token)


class SupabaseBannerRepository:
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def list_banners(self) -> list[HeroBanner]:
        rows = await self._client.select(BANNERS_TABLE, order="order", ascending=True)
        return [banner_from_row(row) for row in rows]

    async def insert_banner(self, payload: dict[str, Any], access_token: str | None = None) -> HeroBanner:
        rows = await self._client.insert(BANNERS_TABLE, payload, access_token)
        if not rows:
            raise BackendError("BACKEND_EMPTY_RESULT", "Backend returned no inserted row")
        return banner_from_row(rows[0])

    async def update_banner(
        self, banner_id: str, payload: dict[str, Any], access_token: str | None = None
    ) -> HeroBanner | None:
        rows = await self._client.update(BANNERS_TABLE, banner_id, payload, access_token)
        return banner_from_row(rows[0]) if rows else None

    async def delete_banner(self, banner_id: str, access_token: str | None = None) -> None:
        await self._client.delete(BANNERS_TABLE, banner_id, access_token)


def _session_from_payload(payload: dict[str, Any]) -> AuthSession:
    if "access_token" in payload:
        user = payload.get("user") or {}
        return AuthSession(
            user=user_from_payload(user) if user.get("id") else None,
            access_token=payload.get("access_token"),
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
        )
    user = payload.get("user") if isinstance(payload.get("user"), dict) else payload
    if user.get("id"):
        # sign-up without an immediate session (email confirmation pending)
        return AuthSession(user=user_from_payload(user), metadata={"confirmation_pending": True})
    return AuthSession()


class SupabaseAuthGateway:
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def sign_in(self, email: str, password: str) -> AuthSession:
        return _session_from_payload(await self._client.sign_in_with_password(email, password))

    async def sign_up(self, email: str, password: str, name: str) -> AuthSession:
        return _session_from_payload(await self._client.sign_up(email, password, {"name": name}))

    async def sign_out(self, access_token: str) -> None:
        await self._client.sign_out(access_token)

    async def get_session(self, access_token: str) -> AuthSession:
        user = await self._client.get_user(access_token)
        return AuthSession(user=user_from_payload(user), access_token=access_token)


class SupabaseImageStorage:
    def __init__(self, client: SupabaseClient, bucket: str) -> None:
        self._client = client
        self._bucket = bucket

    async def upload(self, path: str, content: bytes, content_type: str, access_token: str | None = None) -> None:
        await self._client.upload(
            self._bucket,
            path,
            content,
            content_type,
            cache_control="3600",
            upsert=False,
            access_token=access_token,
        )

    def public_url(self, path: str) -> str:
        return self._client.public_url(self._bucket, path)
