from devkit.config import load_settings


def test_load_settings_reads_env(monkeypatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setenv("REDIS_URL", "redis://example:6379/0")
    settings = load_settings("directory-api")

    assert settings.SERVICE_NAME == "directory-api"
    assert settings.SUPABASE_URL == "https://project.supabase.co"
    assert settings.REDIS_URL == "redis://example:6379/0"
    assert settings.backend_configured is True


def test_load_settings_defaults(monkeypatch) -> None:
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    monkeypatch.delenv("SUPABASE_BANNER_BUCKET", raising=False)
    monkeypatch.delenv("LOGIN_ATTEMPTS_PER_MINUTE", raising=False)
    settings = load_settings("directory-api")

    assert settings.backend_configured is False
    assert settings.SUPABASE_BANNER_BUCKET == "banner-images"
    assert settings.LOGIN_ATTEMPTS_PER_MINUTE == 5
