from __future__ import annotations

from enum import StrEnum

# Options handed to the browser's single-shot position request.
GEOLOCATION_OPTIONS: dict[str, object] = {
    "enableHighAccuracy": True,
    "timeout": 15000,
    "maximumAge": 0,
}


class GeolocationErrorReason(StrEnum):
    PERMISSION_DENIED = "PERMISSION_DENIED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    UNSUPPORTED = "UNSUPPORTED"


_BROWSER_ERROR_CODES = {
    1: GeolocationErrorReason.PERMISSION_DENIED,
    2: GeolocationErrorReason.POSITION_UNAVAILABLE,
    3: GeolocationErrorReason.TIMEOUT,
}


class LocationUnavailableError(Exception):
    """Raised when no device location can be used for nearest ranking."""

    def __init__(self, reason: GeolocationErrorReason, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or reason.value.replace("_", " ").lower())


def classify_geolocation_error(code: int | str | None) -> GeolocationErrorReason:
    """Map a browser ``GeolocationPositionError`` code or name to a reason.

    Anything that is not a known code means the capability is missing.
    """
    if isinstance(code, str):
        normalized = code.strip().upper().replace(" ", "_")
        if normalized.isdigit():
            code = int(normalized)
        else:
            try:
                return GeolocationErrorReason(normalized)
            except ValueError:
                return GeolocationErrorReason.UNSUPPORTED
    if isinstance(code, int):
        return _BROWSER_ERROR_CODES.get(code, GeolocationErrorReason.UNSUPPORTED)
    return GeolocationErrorReason.UNSUPPORTED
