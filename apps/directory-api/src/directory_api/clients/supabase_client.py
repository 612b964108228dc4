from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx

from directory_api.repositories.base import BackendError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return response.reason_phrase


class SupabaseClient:
    """Thin REST client for the hosted backend: data, auth and storage APIs."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        service_key: str | None = None,
        timeout_seconds: float = 10.0,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._service_key = service_key or api_key
        self._timeout_seconds = timeout_seconds
        self._client_factory = client_factory

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self, bearer: str | None = None, **extra: str) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {bearer or self._service_key}",
        }
        headers.update(extra)
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        factory = self._client_factory or (lambda: httpx.AsyncClient(timeout=self._timeout_seconds))
        try:
            async with factory() as client:
                response = await client.request(method, f"{self._base_url}{path}", **kwargs)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("backend_timeout", extra={"component": "supabase", "method": method, "path": path})
            raise BackendError("BACKEND_TIMEOUT", "Backend request timed out") from exc
        except httpx.HTTPStatusError as exc:
            message = _error_message(exc.response)
            logger.error(
                "backend_http_error",
                extra={
                    "component": "supabase",
                    "method": method,
                    "path": path,
                    "status_code": exc.response.status_code,
                    "error": message,
                },
            )
            raise BackendError("BACKEND_HTTP_ERROR", message, exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            logger.error("backend_unavailable", extra={"component": "supabase", "method": method, "path": path})
            raise BackendError("BACKEND_UNAVAILABLE", "Backend request failed") from exc
        return response

    # Data API

    async def select(self, table: str, order: str | None = None, ascending: bool = True) -> list[dict[str, Any]]:
        params = {"select": "*"}
        if order:
            params["order"] = f"{order}.{'asc' if ascending else 'desc'}"
        response = await self._request("GET", f"/rest/v1/{table}", params=params, headers=self._headers())
        return list(response.json())

    async def insert(
        self,
        table: str,
        payload: dict[str, Any],
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        response = await self._request(
            "POST",
            f"/rest/v1/{table}",
            json=[payload],
            headers=self._headers(access_token, Prefer="return=representation"),
        )
        return list(response.json())

    async def update(
        self,
        table: str,
        record_id: str,
        payload: dict[str, Any],
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        response = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params={"id": f"eq.{record_id}"},
            json=payload,
            headers=self._headers(access_token, Prefer="return=representation"),
        )
        return list(response.json())

    async def delete(self, table: str, record_id: str, access_token: str | None = None) -> None:
        await self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params={"id": f"eq.{record_id}"},
            headers=self._headers(access_token),
        )

    # Auth API

    async def sign_in_with_password(self, email: str, password: str) -> dict[str, Any]:
        response = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers=self._headers(self._api_key),
        )
        return response.json()

    async def sign_up(self, email: str, password: str, data: dict[str, Any]) -> dict[str, Any]:
        response = await self._request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password, "data": data},
            headers=self._headers(self._api_key),
        )
        return response.json()

    async def sign_out(self, access_token: str) -> None:
        await self._request("POST", "/auth/v1/logout", headers=self._headers(access_token))

    async def get_user(self, access_token: str) -> dict[str, Any]:
        response = await self._request("GET", "/auth/v1/user", headers=self._headers(access_token))
        return response.json()

    # Storage API

    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str,
        cache_control: str = "3600",
        upsert: bool = False,
        access_token: str | None = None,
    ) -> None:
        await self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{quote(path)}",
            content=content,
            headers=self._headers(
                access_token,
                **{
                    "content-type": content_type,
                    "cache-control": f"max-age={cache_control}",
                    "x-upsert": "true" if upsert else "false",
                },
            ),
        )

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{quote(path)}"
