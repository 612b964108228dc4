from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, Header, Request

from directory_api.dependencies import get_auth_service
from directory_api.models import AuthSession
from directory_api.response import success_response
from directory_api.schemas.auth import LoginRequest, RegisterRequest
from directory_api.security import bearer_token, resolve_client_key
from directory_api.services.auth_service import AuthService

router = APIRouter(prefix="/v1/auth", tags=["auth"])


def _session_payload(session: AuthSession) -> dict[str, Any]:
    return {
        "user": asdict(session.user) if session.user is not None else None,
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_in": session.expires_in,
        **session.metadata,
    }


@router.post("/login")
async def login(
    payload: LoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> dict:
    session = await service.login(payload.email, payload.password, resolve_client_key(request))
    return success_response(_session_payload(session))


@router.post("/register")
async def register(payload: RegisterRequest, service: AuthService = Depends(get_auth_service)) -> dict:
    session = await service.register(payload.email, payload.password, payload.name)
    return success_response(_session_payload(session))


@router.post("/logout")
async def logout(
    authorization: str | None = Header(default=None),
    service: AuthService = Depends(get_auth_service),
) -> dict:
    await service.logout(bearer_token(authorization))
    return success_response({"signed_out": True})


@router.get("/session")
async def current_session(
    authorization: str | None = Header(default=None),
    service: AuthService = Depends(get_auth_service),
) -> dict:
    session = await service.current_session(bearer_token(authorization))
    return success_response(_session_payload(session))
