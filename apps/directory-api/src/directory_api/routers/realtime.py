"""Database change webhook.

The backend posts one row change per request. Authentication mirrors the
internal event endpoints: an HMAC signature over the raw body when a secret
is configured, otherwise a shared token. With neither configured the
endpoint is disabled.
"""

from __future__ import annotations

import json
import logging

from devkit.config import ServiceSettings
from fastapi import APIRouter, Depends, Header, Request
from shared.security import WebhookSignatureError, verify_webhook_signature

from directory_api.dependencies import get_directory_store, get_settings
from directory_api.errors import ApiError
from directory_api.models import BANNERS_TABLE, HOSPITALS_TABLE
from directory_api.response import success_response
from directory_api.store import ChangeApplied, DirectoryStore
from directory_api.sync import ChangeEventError, Deleted, Inserted, parse_change_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/internal/realtime", tags=["internal-realtime"])


def _authenticate(
    settings: ServiceSettings,
    *,
    body: bytes,
    token: str | None,
    signature: str | None,
    timestamp: str | None,
) -> None:
    secret = settings.REALTIME_WEBHOOK_SECRET
    expected_token = settings.REALTIME_WEBHOOK_TOKEN
    if not secret and not expected_token:
        raise ApiError("REALTIME_AUTH_NOT_CONFIGURED", "Realtime webhook auth is not configured", 503)
    if secret:
        try:
            verify_webhook_signature(secret=secret, body=body, signature=signature, timestamp=timestamp)
        except WebhookSignatureError as exc:
            raise ApiError("UNAUTHORIZED", str(exc), 401) from exc
        return
    if not token or token != expected_token:
        raise ApiError("UNAUTHORIZED", "Invalid realtime token", 401)


def _event_type(event: object) -> str:
    if isinstance(event, Inserted):
        return "INSERT"
    if isinstance(event, Deleted):
        return "DELETE"
    return "UPDATE"


@router.post("")
async def handle_change(
    request: Request,
    store: DirectoryStore = Depends(get_directory_store),
    settings: ServiceSettings = Depends(get_settings),
    x_internal_token: str | None = Header(default=None),
    x_event_signature: str | None = Header(default=None),
    x_event_timestamp: str | None = Header(default=None),
) -> dict:
    body_bytes = await request.body()
    _authenticate(
        settings,
        body=body_bytes,
        token=x_internal_token,
        signature=x_event_signature,
        timestamp=x_event_timestamp,
    )
    try:
        body = json.loads(body_bytes)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ApiError("VALIDATION_ERROR", "Body must be a JSON object", 422) from exc
    if not isinstance(body, dict):
        raise ApiError("VALIDATION_ERROR", "Body must be a JSON object", 422)

    try:
        event = parse_change_event(body)
    except ChangeEventError as exc:
        logger.warning("realtime_event_rejected", extra={"component": "realtime", "error": str(exc)})
        raise ApiError("VALIDATION_ERROR", str(exc), 422) from exc

    state = store.dispatch(ChangeApplied(event))
    event_type = _event_type(event)
    prom_metrics = getattr(request.app.state, "prom_metrics", None)
    if prom_metrics is not None:
        prom_metrics.observe_change(event.table, event_type)
        prom_metrics.set_record_count(HOSPITALS_TABLE, len(state.hospitals))
        prom_metrics.set_record_count(BANNERS_TABLE, len(state.banners))
    logger.info("realtime_change_applied", extra={"component": "realtime", "table": event.table, "type": event_type})
    return success_response(
        {"applied": True},
        meta={"table": event.table, "type": event_type},
    )
