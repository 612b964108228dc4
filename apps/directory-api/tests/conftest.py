from __future__ import annotations

import asyncio
from dataclasses import dataclass

import pytest
from devkit.config import ServiceSettings
from fastapi import FastAPI
from fastapi.testclient import TestClient

from directory_api.app import create_app
from directory_api.dependencies import (
    get_auth_gateway,
    get_banner_repository,
    get_directory_store,
    get_hospital_repository,
    get_image_storage,
    get_login_rate_limiter,
    get_settings,
)
from directory_api.rate_limit import InMemoryAttemptStore, SlidingWindowRateLimiter
from directory_api.repositories.memory import (
    InMemoryAuthGateway,
    InMemoryBannerRepository,
    InMemoryHospitalRepository,
    InMemoryImageStorage,
)
from directory_api.store import DirectoryStore, bootstrap


@dataclass
class DirectoryHarness:
    app: FastAPI
    client: TestClient
    store: DirectoryStore
    hospitals: InMemoryHospitalRepository
    banners: InMemoryBannerRepository
    gateway: InMemoryAuthGateway
    storage: InMemoryImageStorage
    settings: ServiceSettings

    def admin_headers(self) -> dict[str, str]:
        session = asyncio.run(self.gateway.sign_in("admin@example.com", "password123"))
        return {"Authorization": f"Bearer {session.access_token}"}


def build_harness(settings: ServiceSettings | None = None) -> DirectoryHarness:
    settings = settings or ServiceSettings(SERVICE_NAME="directory-api-test")
    store = DirectoryStore()
    hospitals = InMemoryHospitalRepository()
    banners = InMemoryBannerRepository()
    gateway = InMemoryAuthGateway()
    storage = InMemoryImageStorage()
    limiter = SlidingWindowRateLimiter(InMemoryAttemptStore(), max_attempts=5, window_seconds=60)
    asyncio.run(bootstrap(store, hospitals, banners))

    async def _store() -> DirectoryStore:
        return store

    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_directory_store] = _store
    app.dependency_overrides[get_hospital_repository] = lambda: hospitals
    app.dependency_overrides[get_banner_repository] = lambda: banners
    app.dependency_overrides[get_auth_gateway] = lambda: gateway
    app.dependency_overrides[get_image_storage] = lambda: storage
    app.dependency_overrides[get_login_rate_limiter] = lambda: limiter
    return DirectoryHarness(
        app=app,
        client=TestClient(app),
        store=store,
        hospitals=hospitals,
        banners=banners,
        gateway=gateway,
        storage=storage,
        settings=settings,
    )


@pytest.fixture
def harness() -> DirectoryHarness:
    return build_harness()


@pytest.fixture
def make_harness():
    return build_harness
