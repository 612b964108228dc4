from shared.security.sanitize import (
    MAX_INPUT_LENGTH,
    ValidationResult,
    is_valid_email,
    is_valid_phone_number,
    is_valid_url,
    sanitize_input,
    validate_banner_data,
    validate_hospital_data,
    validate_search_input,
)
from shared.security.webhook_signing import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    WebhookSignatureError,
    sign_webhook_body,
    signature_headers,
    verify_webhook_signature,
)

__all__ = [
    "MAX_INPUT_LENGTH",
    "SIGNATURE_HEADER",
    "TIMESTAMP_HEADER",
    "ValidationResult",
    "WebhookSignatureError",
    "is_valid_email",
    "is_valid_phone_number",
    "is_valid_url",
    "sanitize_input",
    "sign_webhook_body",
    "signature_headers",
    "validate_banner_data",
    "validate_hospital_data",
    "validate_search_input",
    "verify_webhook_signature",
]
