import pytest
from pydantic import ValidationError

from haas.config.settings import get_logging_config, get_settings


def test_default_settings_from_packaged_yaml():
    settings = get_settings()
    assert settings.app.timezone == "Asia/Tokyo"
    assert settings.attendance.allowed_radius_m == 300
    assert settings.catalog.venues_path == "data/venues.json"
    assert settings.qr.png_width == 256


def test_env_overrides_are_applied(monkeypatch):
    monkeypatch.setenv("HAAS_ALLOWED_RADIUS_M", "500")
    monkeypatch.setenv("HAAS_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("HAAS_VENUES_PATH", "/tmp/venues.json")
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.attendance.allowed_radius_m == 500
    assert settings.app.log_level == "DEBUG"
    assert settings.catalog.venues_path == "/tmp/venues.json"


def test_invalid_radius_override_is_rejected(monkeypatch):
    monkeypatch.setenv("HAAS_ALLOWED_RADIUS_M", "-10")
    get_settings.cache_clear()
    with pytest.raises(ValidationError):
        get_settings()


def test_external_config_file_replaces_defaults(monkeypatch, tmp_path):
    path = tmp_path / "haas.yaml"
    path.write_text("attendance:\n  allowed_radius_m: 450\n", encoding="utf-8")
    monkeypatch.setenv("HAAS_CONFIG_PATH", str(path))
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.attendance.allowed_radius_m == 450
    # Sections missing from the file fall back to model defaults.
    assert settings.app.timezone == "Asia/Tokyo"


def test_external_config_must_be_a_mapping(monkeypatch, tmp_path):
    path = tmp_path / "haas.yaml"
    path.write_text("- not\n- a mapping\n", encoding="utf-8")
    monkeypatch.setenv("HAAS_CONFIG_PATH", str(path))
    get_settings.cache_clear()
    with pytest.raises(ValueError, match="expected a mapping"):
        get_settings()


def test_logging_config_has_console_handler():
    config = get_logging_config()
    assert config["version"] == 1
    assert "console" in config["handlers"]


def test_cors_origins_default_and_env_override(monkeypatch):
    assert get_settings().api.cors_origins == ["http://localhost:3000"]

    monkeypatch.setenv("HAAS_CORS_ORIGINS", "https://staff.example.jp, https://admin.example.jp")
    get_settings.cache_clear()
    assert get_settings().api.cors_origins == ["https://staff.example.jp", "https://admin.example.jp"]

    monkeypatch.setenv("HAAS_CORS_ORIGINS", "")
    get_settings.cache_clear()
    assert get_settings().api.cors_origins == []
