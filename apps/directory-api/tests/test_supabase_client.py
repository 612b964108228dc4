import json

import httpx
import pytest

from directory_api.clients.supabase_client import SupabaseClient
from directory_api.repositories.base import BackendError
from directory_api.repositories.supabase import (
    SupabaseAuthGateway,
    SupabaseBannerRepository,
    SupabaseHospitalRepository,
    SupabaseImageStorage,
)


def _client(handler) -> SupabaseClient:
    return SupabaseClient(
        base_url="https://project.supabase.co/",
        api_key="anon-key",
        client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_hospitals_are_selected_newest_first() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["apikey"] = request.headers["apikey"]
        return httpx.Response(200, json=[{"id": "h1", "name": "RSUD Banten", "class": "B"}])

    hospitals = await SupabaseHospitalRepository(_client(handler)).list_hospitals()

    assert seen["path"] == "/rest/v1/hospitals"
    assert seen["params"] == {"select": "*", "order": "created_at.desc"}
    assert seen["apikey"] == "anon-key"
    assert hospitals[0].hospital_class == "B"


@pytest.mark.asyncio
async def test_banners_are_selected_by_order_ascending() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["order"] == "order.asc"
        return httpx.Response(200, json=[{"id": "b1", "title": "Promo", "order": 1}])

    banners = await SupabaseBannerRepository(_client(handler)).list_banners()

    assert banners[0].title == "Promo"


@pytest.mark.asyncio
async def test_insert_requests_representation() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.headers["prefer"] == "return=representation"
        body = json.loads(request.content)
        assert body == [{"name": "RS Baru"}]
        return httpx.Response(201, json=[{"id": "new-id", "name": "RS Baru"}])

    created = await SupabaseHospitalRepository(_client(handler)).insert_hospital({"name": "RS Baru"})

    assert created.id == "new-id"


@pytest.mark.asyncio
async def test_update_filters_by_id_and_returns_none_when_nothing_matched() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PATCH"
        assert request.url.params["id"] == "eq.h9"
        return httpx.Response(200, json=[])

    updated = await SupabaseHospitalRepository(_client(handler)).update_hospital("h9", {"name": "X"})

    assert updated is None


@pytest.mark.asyncio
async def test_http_error_becomes_backend_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"message": "duplicate key value"})

    with pytest.raises(BackendError) as exc_info:
        await SupabaseHospitalRepository(_client(handler)).insert_hospital({"name": "RS"})

    assert exc_info.value.code == "BACKEND_HTTP_ERROR"
    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "duplicate key value"


@pytest.mark.asyncio
async def test_timeout_becomes_backend_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(BackendError) as exc_info:
        await SupabaseHospitalRepository(_client(handler)).list_hospitals()

    assert exc_info.value.code == "BACKEND_TIMEOUT"


@pytest.mark.asyncio
async def test_connection_error_becomes_backend_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(BackendError) as exc_info:
        await SupabaseBannerRepository(_client(handler)).delete_banner("b1")

    assert exc_info.value.code == "BACKEND_UNAVAILABLE"


@pytest.mark.asyncio
async def test_sign_in_uses_password_grant_and_maps_user() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/token"
        assert request.url.params["grant_type"] == "password"
        return httpx.Response(
            200,
            json={
                "access_token": "at",
                "refresh_token": "rt",
                "expires_in": 3600,
                "user": {"id": "u1", "email": "admin@example.com", "user_metadata": {"name": "Admin"}},
            },
        )

    session = await SupabaseAuthGateway(_client(handler)).sign_in("admin@example.com", "secret")

    assert session.is_authenticated
    assert session.access_token == "at"
    assert session.user.name == "Admin"


@pytest.mark.asyncio
async def test_sign_up_sends_name_metadata_and_handles_pending_confirmation() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content)["data"] == {"name": "Siti"}
        return httpx.Response(200, json={"id": "u2", "email": "siti@example.com"})

    session = await SupabaseAuthGateway(_client(handler)).sign_up("siti@example.com", "password123", "Siti")

    assert session.user.id == "u2"
    assert session.access_token is None
    assert session.metadata == {"confirmation_pending": True}


@pytest.mark.asyncio
async def test_upload_sets_cache_control_without_upsert() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["headers"] = request.headers
        seen["body"] = request.content
        return httpx.Response(200, json={"Key": "banner-images/banners/a.png"})

    storage = SupabaseImageStorage(_client(handler), bucket="banner-images")
    await storage.upload("banners/a.png", b"png-bytes", "image/png")

    assert seen["path"] == "/storage/v1/object/banner-images/banners/a.png"
    assert seen["headers"]["cache-control"] == "max-age=3600"
    assert seen["headers"]["x-upsert"] == "false"
    assert seen["headers"]["content-type"] == "image/png"
    assert seen["body"] == b"png-bytes"
    assert (
        storage.public_url("banners/a.png")
        == "https://project.supabase.co/storage/v1/object/public/banner-images/banners/a.png"
    )


@pytest.mark.asyncio
async def test_writes_use_the_caller_token_instead_of_the_service_key() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["authorization"])
        if request.method == "POST":
            return httpx.Response(201, json=[{"id": "h1", "name": "RS Baru"}])
        return httpx.Response(204)

    client = SupabaseClient(
        base_url="https://project.supabase.co",
        api_key="anon-key",
        service_key="service-role-key",
        client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    repository = SupabaseHospitalRepository(client)

    await repository.insert_hospital({"name": "RS Baru"}, access_token="admin-jwt")
    await repository.delete_hospital("h1", access_token="admin-jwt")
    await SupabaseImageStorage(client, bucket="banner-images").upload(
        "banners/a.png", b"png", "image/png", access_token="admin-jwt"
    )

    assert seen == ["Bearer admin-jwt", "Bearer admin-jwt", "Bearer admin-jwt"]


@pytest.mark.asyncio
async def test_user_role_comes_from_app_metadata_only() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        token = request.headers["authorization"].removeprefix("Bearer ")
        if token == "admin-jwt":
            return httpx.Response(
                200,
                json={"id": "u1", "email": "a@example.com", "role": "authenticated", "app_metadata": {"role": "admin"}},
            )
        return httpx.Response(200, json={"id": "u2", "email": "b@example.com", "role": "authenticated"})

    gateway = SupabaseAuthGateway(_client(handler))

    admin = await gateway.get_session("admin-jwt")
    member = await gateway.get_session("member-jwt")

    assert admin.user.role == "admin"
    assert member.user.role == "user"
