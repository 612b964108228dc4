from __future__ import annotations

from fastapi import Depends, Header, Request

from directory_api.dependencies import get_auth_service
from directory_api.errors import ApiError
from directory_api.models import ADMIN_ROLE, AuthSession
from directory_api.services.auth_service import AuthService


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise ApiError("UNAUTHORIZED", "Missing bearer token", 401)
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise ApiError("UNAUTHORIZED", "Missing bearer token", 401)
    return token


def resolve_client_key(request: Request) -> str:
    # login attempts are keyed on the peer address only; client headers are not trusted
    if request.client:
        return request.client.host
    return "anonymous"


def require_role(session: AuthSession, allowed: set[str]) -> None:
    if session.user is None or session.user.role not in allowed:
        raise ApiError("FORBIDDEN", "Not enough permissions", 403)


async def require_admin(
    authorization: str | None = Header(default=None),
    service: AuthService = Depends(get_auth_service),
) -> AuthSession:
    session = await service.current_session(bearer_token(authorization))
    require_role(session, {ADMIN_ROLE})
    return session
