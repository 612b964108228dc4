from __future__ import annotations

import logging
import os

from devkit.config import ServiceSettings, load_settings
from devkit.redis import AsyncRedisManager, create_redis_client
from fastapi import Depends

from directory_api.clients.supabase_client import SupabaseClient
from directory_api.rate_limit import InMemoryAttemptStore, RedisAttemptStore, SlidingWindowRateLimiter
from directory_api.repositories.base import AuthGateway, BannerRepository, HospitalRepository, ImageStorage
from directory_api.repositories.memory import (
    InMemoryAuthGateway,
    InMemoryBannerRepository,
    InMemoryHospitalRepository,
    InMemoryImageStorage,
)
from directory_api.repositories.supabase import (
    SupabaseAuthGateway,
    SupabaseBannerRepository,
    SupabaseHospitalRepository,
    SupabaseImageStorage,
)
from directory_api.services.admin_service import AdminService
from directory_api.services.auth_service import AuthService
from directory_api.services.directory_service import DirectoryService
from directory_api.store import DirectoryStore, DirectoryStoreLoader

logger = logging.getLogger(__name__)

LOGIN_WINDOW_SECONDS = 60

_settings = load_settings(os.getenv("SERVICE_NAME", "directory-api"))

if _settings.backend_configured:
    _supabase_client = SupabaseClient(
        base_url=_settings.SUPABASE_URL or "",
        api_key=_settings.SUPABASE_ANON_KEY or "",
        service_key=_settings.SUPABASE_SERVICE_ROLE_KEY,
        timeout_seconds=_settings.BACKEND_TIMEOUT_SECONDS,
    )
    _hospital_repository: HospitalRepository = SupabaseHospitalRepository(_supabase_client)
    _banner_repository: BannerRepository = SupabaseBannerRepository(_supabase_client)
    _auth_gateway: AuthGateway = SupabaseAuthGateway(_supabase_client)
    _image_storage: ImageStorage = SupabaseImageStorage(_supabase_client, _settings.SUPABASE_BANNER_BUCKET)
else:
    logger.warning("backend_not_configured", extra={"component": "dependencies", "mode": "in_memory"})
    _hospital_repository = InMemoryHospitalRepository()
    _banner_repository = InMemoryBannerRepository()
    _auth_gateway = InMemoryAuthGateway()
    _image_storage = InMemoryImageStorage(bucket=_settings.SUPABASE_BANNER_BUCKET)

_redis_client = create_redis_client(_settings.REDIS_URL)
if _redis_client is not None:
    _attempt_store = RedisAttemptStore(_redis_client, window_seconds=LOGIN_WINDOW_SECONDS)
else:
    _attempt_store = InMemoryAttemptStore()
_login_rate_limiter = SlidingWindowRateLimiter(
    _attempt_store,
    max_attempts=_settings.LOGIN_ATTEMPTS_PER_MINUTE,
    window_seconds=LOGIN_WINDOW_SECONDS,
)

_store_loader = DirectoryStoreLoader(DirectoryStore(), _hospital_repository, _banner_repository)


def get_settings() -> ServiceSettings:
    return _settings


def realtime_webhook_configured(settings: ServiceSettings) -> bool:
    return bool(settings.REALTIME_WEBHOOK_SECRET or settings.REALTIME_WEBHOOK_TOKEN)


def get_redis_manager() -> AsyncRedisManager | None:
    return _redis_client


def get_hospital_repository() -> HospitalRepository:
    return _hospital_repository


def get_banner_repository() -> BannerRepository:
    return _banner_repository


def get_auth_gateway() -> AuthGateway:
    return _auth_gateway


def get_image_storage() -> ImageStorage:
    return _image_storage


def get_login_rate_limiter() -> SlidingWindowRateLimiter:
    return _login_rate_limiter


async def load_directory_store() -> DirectoryStore:
    """Fill the process store from the backend once; later calls are no-ops."""
    return await _store_loader.load()


async def get_directory_store() -> DirectoryStore:
    return await load_directory_store()


def get_directory_service(store: DirectoryStore = Depends(get_directory_store)) -> DirectoryService:
    return DirectoryService(store)


def get_admin_service(
    store: DirectoryStore = Depends(get_directory_store),
    hospitals: HospitalRepository = Depends(get_hospital_repository),
    banners: BannerRepository = Depends(get_banner_repository),
    storage: ImageStorage = Depends(get_image_storage),
    settings: ServiceSettings = Depends(get_settings),
) -> AdminService:
    # with a webhook configured the backend echoes every write back to us
    return AdminService(
        store,
        hospitals,
        banners,
        storage,
        echo_writes=not realtime_webhook_configured(settings),
    )


def get_auth_service(
    gateway: AuthGateway = Depends(get_auth_gateway),
    rate_limiter: SlidingWindowRateLimiter = Depends(get_login_rate_limiter),
) -> AuthService:
    return AuthService(gateway, rate_limiter)
