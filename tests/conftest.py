import pytest

from haas.config.settings import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    # Settings are lru_cached; tests that touch HAAS_* env vars need a clean load.
    for name in ("HAAS_CONFIG_PATH", "HAAS_LOG_LEVEL", "HAAS_VENUES_PATH", "HAAS_ALLOWED_RADIUS_M", "HAAS_TIMEZONE", "HAAS_ENV", "HAAS_CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
