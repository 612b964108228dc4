"""Signing for backend change webhooks.

The signature is ``sha256=<hex>`` over ``"<unix timestamp>." + raw body``
keyed with the shared secret. Receivers reject timestamps further than
``max_skew_seconds`` from their own clock.
"""

from __future__ import annotations

import hashlib
import hmac
import time

SIGNATURE_HEADER = "x-event-signature"
TIMESTAMP_HEADER = "x-event-timestamp"
SIGNATURE_PREFIX = "sha256="
DEFAULT_MAX_SKEW_SECONDS = 300


class WebhookSignatureError(ValueError):
    pass


def _as_bytes(body: bytes | str) -> bytes:
    return body if isinstance(body, bytes) else body.encode("utf-8")


def sign_webhook_body(secret: str, timestamp: str, body: bytes | str) -> str:
    if not secret:
        raise ValueError("webhook secret is empty")
    message = timestamp.encode("ascii") + b"." + _as_bytes(body)
    return SIGNATURE_PREFIX + hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def signature_headers(secret: str, body: bytes | str, *, now: float | None = None) -> dict[str, str]:
    timestamp = str(int(time.time() if now is None else now))
    return {
        TIMESTAMP_HEADER: timestamp,
        SIGNATURE_HEADER: sign_webhook_body(secret, timestamp, body),
    }


def verify_webhook_signature(
    *,
    secret: str,
    body: bytes | str,
    signature: str | None,
    timestamp: str | None,
    max_skew_seconds: int = DEFAULT_MAX_SKEW_SECONDS,
    now: float | None = None,
) -> int:
    """Check a webhook delivery and return its timestamp.

    A bare hex digest is accepted as well as the prefixed form.
    """
    if not signature or not timestamp:
        raise WebhookSignatureError("missing signature headers")
    try:
        sent_at = int(timestamp)
    except ValueError as exc:
        raise WebhookSignatureError("invalid signature timestamp") from exc
    current = time.time() if now is None else now
    if abs(current - sent_at) > max_skew_seconds:
        raise WebhookSignatureError("signature timestamp outside allowed window")

    expected = sign_webhook_body(secret, timestamp, body)
    provided = signature if signature.startswith(SIGNATURE_PREFIX) else SIGNATURE_PREFIX + signature
    if not hmac.compare_digest(expected, provided):
        raise WebhookSignatureError("invalid signature")
    return sent_at
