from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from devkit.timezone import pin_process_timezone


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    SERVICE_NAME: str = "service"
    SUPABASE_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_BANNER_BUCKET: str = "banner-images"
    BACKEND_TIMEOUT_SECONDS: float = 10.0
    REDIS_URL: str | None = None
    REALTIME_WEBHOOK_SECRET: str = ""
    REALTIME_WEBHOOK_TOKEN: str = ""
    LOGIN_ATTEMPTS_PER_MINUTE: int = 5

    @property
    def backend_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)


def load_settings(service_name: str) -> ServiceSettings:
    pin_process_timezone()
    return ServiceSettings(SERVICE_NAME=service_name)
