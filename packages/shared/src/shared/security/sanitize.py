"""Input validation and sanitization helpers for admin and search input."""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Any
from urllib.parse import urlsplit

MAX_INPUT_LENGTH = 1000

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^(\+62|0)[0-9]{9,12}$")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def validate_search_input(value: str, max_length: int = 100) -> bool:
    if len(value) > max_length:
        return False
    if re.search(r"[;\'\"\\]", value):
        return False
    return True


def sanitize_input(value: str | None) -> str:
    if not value:
        return ""
    collapsed = _WHITESPACE_RE.sub(" ", value.strip())
    return collapsed[:MAX_INPUT_LENGTH]


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


def is_valid_phone_number(value: str) -> bool:
    """Indonesian numbers: ``+62`` or ``0`` prefix followed by 9-12 digits."""
    return bool(_PHONE_RE.match(_WHITESPACE_RE.sub("", value)))


def is_valid_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc or parts.path) and " " not in value


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def validate_hospital_data(data: dict[str, Any]) -> ValidationResult:
    errors: list[str] = []
    phone = _text(data, "phone")
    image = _text(data, "image")
    email = _text(data, "email")

    if not _text(data, "name").strip():
        errors.append("Nama rumah sakit harus diisi")
    if not _text(data, "address").strip():
        errors.append("Alamat harus diisi")
    if not phone.strip() or not is_valid_phone_number(phone):
        errors.append("Nomor telepon harus valid")
    if not data.get("city"):
        errors.append("Kota harus dipilih")
    if not _text(data, "description").strip():
        errors.append("Deskripsi harus diisi")
    if not image.strip() or not is_valid_url(image):
        errors.append("URL gambar harus valid")
    if email and not is_valid_email(email):
        errors.append("Format email tidak valid")
    return ValidationResult(errors=errors)


def validate_banner_data(data: dict[str, Any]) -> ValidationResult:
    errors: list[str] = []
    image = _text(data, "image")
    link = _text(data, "link")

    if not _text(data, "title").strip():
        errors.append("Judul banner harus diisi")
    if not image.strip() or not is_valid_url(image):
        errors.append("URL gambar harus valid")
    if link and not is_valid_url(link):
        errors.append("URL tautan tidak valid")
    return ValidationResult(errors=errors)
