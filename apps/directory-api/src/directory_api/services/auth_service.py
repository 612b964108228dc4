from __future__ import annotations

import logging
import time
from collections.abc import Callable

from shared.security import is_valid_email, sanitize_input

from directory_api.errors import ApiError
from directory_api.models import AuthSession
from directory_api.rate_limit import SlidingWindowRateLimiter
from directory_api.repositories.base import AuthGateway, BackendError

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Email atau password salah"
TOO_MANY_ATTEMPTS_MESSAGE = "Terlalu banyak percobaan login. Silakan coba lagi nanti."


def _is_client_error(exc: BackendError) -> bool:
    return exc.status_code is not None and 400 <= exc.status_code < 500


class AuthService:
    def __init__(
        self,
        gateway: AuthGateway,
        rate_limiter: SlidingWindowRateLimiter,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._gateway = gateway
        self._rate_limiter = rate_limiter
        self._clock = clock

    async def login(self, email: str, password: str, client_key: str) -> AuthSession:
        if not await self._rate_limiter.allow(client_key, now_seconds=self._clock()):
            logger.warning("login_rate_limited", extra={"component": "auth", "client": client_key})
            raise ApiError("RATE_LIMIT_EXCEEDED", TOO_MANY_ATTEMPTS_MESSAGE, 429)

        normalized = sanitize_input(email).lower()
        try:
            session = await self._gateway.sign_in(normalized, password)
        except BackendError as exc:
            logger.warning("login_failed", extra={"component": "auth", "code": exc.code, "status": exc.status_code})
            if _is_client_error(exc):
                raise ApiError("UNAUTHORIZED", LOGIN_FAILED_MESSAGE, 401) from exc
            raise ApiError("BACKEND_ERROR", exc.message, 502) from exc
        if not session.is_authenticated:
            raise ApiError("UNAUTHORIZED", LOGIN_FAILED_MESSAGE, 401)

        await self._rate_limiter.reset(client_key)
        logger.info("login_succeeded", extra={"component": "auth", "user_id": session.user.id})
        return session

    async def register(self, email: str, password: str, name: str) -> AuthSession:
        normalized = sanitize_input(email).lower()
        if not is_valid_email(normalized):
            raise ApiError("VALIDATION_ERROR", "Format email tidak valid", 422)
        try:
            session = await self._gateway.sign_up(normalized, password, sanitize_input(name))
        except BackendError as exc:
            logger.warning("register_failed", extra={"component": "auth", "code": exc.code, "status": exc.status_code})
            if _is_client_error(exc):
                raise ApiError("REGISTRATION_FAILED", exc.message, 400) from exc
            raise ApiError("BACKEND_ERROR", exc.message, 502) from exc
        return session

    async def logout(self, access_token: str) -> None:
        try:
            await self._gateway.sign_out(access_token)
        except BackendError as exc:
            logger.warning("logout_failed", extra={"component": "auth", "code": exc.code})
            raise ApiError("BACKEND_ERROR", exc.message, 502) from exc

    async def current_session(self, access_token: str) -> AuthSession:
        try:
            session = await self._gateway.get_session(access_token)
        except BackendError as exc:
            if _is_client_error(exc):
                raise ApiError("UNAUTHORIZED", "Session is invalid or expired", 401) from exc
            raise ApiError("BACKEND_ERROR", exc.message, 502) from exc
        if not session.is_authenticated:
            raise ApiError("UNAUTHORIZED", "Session is invalid or expired", 401)
        return session
