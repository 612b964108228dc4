"""In-process gateways used when no backend is configured, and in tests."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from devkit.timezone import now_wib_iso

from directory_api.mapping import banner_from_row, hospital_from_row, hospital_to_dict
from directory_api.models import ADMIN_ROLE, USER_ROLE, AdminUser, AuthSession, HeroBanner, Hospital
from directory_api.repositories.base import BackendError


def _seed_hospitals() -> list[Hospital]:
    return [
        Hospital(
            id="rs-1",
            name="RSUD Banten",
            type="RS Umum",
            hospital_class="B",
            address="Jl. Syekh Nawawi Al Bantani, Banjarsari",
            city="Kota Serang",
            district="Cipocok Jaya",
            phone="02545601123",
            image="https://images.example.com/rsud-banten.jpg",
            description="Rumah sakit rujukan milik Pemerintah Provinsi Banten.",
            facilities=["IGD 24 Jam", "ICU", "Laboratorium", "Radiologi"],
            services=["Rawat Inap", "Rawat Jalan", "Bedah"],
            total_beds=250,
            has_igd=True,
            has_icu=True,
            latitude=-6.1406,
            longitude=106.1721,
            created_at="2026-01-03T08:00:00+07:00",
        ),
        Hospital(
            id="rs-2",
            name="RS Krakatau Medika",
            type="RS Umum",
            hospital_class="B",
            address="Jl. Semang Raya, Kebonsari",
            city="Kota Cilegon",
            district="Citangkil",
            phone="0254396333",
            image="https://images.example.com/krakatau-medika.jpg",
            description="Rumah sakit swasta di kawasan industri Cilegon.",
            facilities=["IGD 24 Jam", "ICU", "Hemodialisa"],
            services=["Rawat Inap", "Medical Check Up"],
            total_beds=180,
            has_igd=True,
            has_icu=True,
            latitude=-6.0138,
            longitude=106.0347,
            created_at="2026-01-02T08:00:00+07:00",
        ),
        Hospital(
            id="rs-3",
            name="RSUD Kota Tangerang",
            type="RS Umum",
            hospital_class="C",
            address="Jl. Pulau Putri Raya, Kelapa Indah",
            city="Kota Tangerang",
            district="Tangerang",
            phone="02129720200",
            image="https://images.example.com/rsud-kota-tangerang.jpg",
            description="Rumah sakit umum daerah Kota Tangerang.",
            facilities=["IGD 24 Jam", "Laboratorium"],
            services=["Rawat Jalan", "Persalinan"],
            total_beds=160,
            has_igd=True,
            has_icu=False,
            latitude=-6.1958,
            longitude=106.6402,
            created_at="2026-01-01T08:00:00+07:00",
        ),
        Hospital(
            id="rs-4",
            name="RSUD Malingping",
            type="RS Umum",
            hospital_class="D",
            address="Jl. Raya Saketi-Malingping",
            city="Kabupaten Lebak",
            district="Malingping",
            phone="0252481414",
            image="https://images.example.com/rsud-malingping.jpg",
            description="Rumah sakit daerah di Lebak selatan.",
            facilities=["IGD 24 Jam"],
            services=["Rawat Inap"],
            total_beds=100,
            has_igd=True,
            created_at="2025-12-31T08:00:00+07:00",
        ),
    ]


def _seed_banners() -> list[HeroBanner]:
    return [
        HeroBanner(
            id="bn-1",
            title="Cari rumah sakit terdekat",
            subtitle="Aktifkan lokasi untuk melihat jarak",
            image="https://images.example.com/banner-lokasi.jpg",
            is_active=True,
            order=1,
        ),
        HeroBanner(
            id="bn-2",
            title="IGD 24 jam di seluruh Banten",
            subtitle="Daftar rumah sakit dengan layanan gawat darurat",
            image="https://images.example.com/banner-igd.jpg",
            link="https://fastcare.id/igd",
            is_active=True,
            order=2,
        ),
    ]


class InMemoryHospitalRepository:
    def __init__(self, items: list[Hospital] | None = None) -> None:
        self._items: dict[str, Hospital] = {item.id: item for item in (items if items is not None else _seed_hospitals())}

    async def list_hospitals(self) -> list[Hospital]:
        return sorted(self._items.values(), key=lambda item: item.created_at or "", reverse=True)

    async def insert_hospital(self, payload: dict[str, Any], access_token: str | None = None) -> Hospital:
        now = now_wib_iso()
        hospital = hospital_from_row({**payload, "id": str(uuid4()), "created_at": now, "updated_at": now})
        self._items[hospital.id] = hospital
        return hospital

    async def update_hospital(
        self, hospital_id: str, payload: dict[str, Any], access_token: str | None = None
    ) -> Hospital | None:
        current = self._items.get(hospital_id)
        if current is None:
            return None
        row = {**hospital_to_dict(current), **payload, "updated_at": now_wib_iso()}
        updated = hospital_from_row(row)
        self._items[hospital_id] = updated
        return updated

    async def delete_hospital(self, hospital_id: str, access_token: str | None = None) -> None:
        self._items.pop(hospital_id, None)


class InMemoryBannerRepository:
    def __init__(self, items: list[HeroBanner] | None = None) -> None:
        self._items: dict[str, HeroBanner] = {item.id: item for item in (items if items is not None else _seed_banners())}

    async def list_banners(self) -> list[HeroBanner]:
        return sorted(self._items.values(), key=lambda item: item.order)

    async def insert_banner(self, payload: dict[str, Any], access_token: str | None = None) -> HeroBanner:
        banner = banner_from_row({**payload, "id": str(uuid4())})
        self._items[banner.id] = banner
        return banner

    async def update_banner(
        self, banner_id: str, payload: dict[str, Any], access_token: str | None = None
    ) -> HeroBanner | None:
        if banner_id not in self._items:
            return None
        updated = banner_from_row({**payload, "id": banner_id})
        self._items[banner_id] = updated
        return updated

    async def delete_banner(self, banner_id: str, access_token: str | None = None) -> None:
        self._items.pop(banner_id, None)


class InMemoryAuthGateway:
    def __init__(self, users: dict[str, dict[str, str]] | None = None) -> None:
        self._users = users or {
            "admin@example.com": {"password": "password123", "name": "Admin FastCare", "role": ADMIN_ROLE},
        }
        self._sessions: dict[str, AdminUser] = {}

    async def sign_in(self, email: str, password: str) -> AuthSession:
        record = self._users.get(email.lower())
        if record is None or record["password"] != password:
            raise BackendError("BACKEND_HTTP_ERROR", "Invalid login credentials", 400)
        return self._open_session(email.lower(), record)

    async def sign_up(self, email: str, password: str, name: str) -> AuthSession:
        key = email.lower()
        if key in self._users:
            raise BackendError("BACKEND_HTTP_ERROR", "User already registered", 422)
        record = {"password": password, "name": name, "role": USER_ROLE}
        self._users[key] = record
        return self._open_session(key, record)

    async def sign_out(self, access_token: str) -> None:
        self._sessions.pop(access_token, None)

    async def get_session(self, access_token: str) -> AuthSession:
        user = self._sessions.get(access_token)
        if user is None:
            raise BackendError("BACKEND_HTTP_ERROR", "Invalid JWT", 401)
        return AuthSession(user=user, access_token=access_token)

    def _open_session(self, email: str, record: dict[str, str]) -> AuthSession:
        user = AdminUser(
            id=f"user-{email}",
            email=email,
            name=record.get("name", ""),
            role=record.get("role", USER_ROLE),
        )
        token = str(uuid4())
        self._sessions[token] = user
        return AuthSession(user=user, access_token=token, refresh_token=str(uuid4()), expires_in=3600)


class InMemoryImageStorage:
    def __init__(self, bucket: str = "banner-images", base_url: str = "http://localhost:8000/storage") -> None:
        self._bucket = bucket
        self._base_url = base_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def upload(self, path: str, content: bytes, content_type: str, access_token: str | None = None) -> None:
        if path in self.objects:
            raise BackendError("BACKEND_HTTP_ERROR", "The resource already exists", 409)
        self.objects[path] = (content, content_type)

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/{self._bucket}/{path}"
