"""
Application settings (Pydantic).

Settings are loaded from `src/haas/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `HAAS_CONFIG_PATH` (replaces the packaged defaults)
- a small whitelist of environment variables (e.g., `HAAS_ALLOWED_RADIUS_M`)

Design rule:
- Tuning knobs such as the geofence radius live in YAML, not in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from haas.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `haas.config`."""
    text = resources.files("haas.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "HAAS"
    timezone: str = "Asia/Tokyo"
    log_level: str = "INFO"


class CatalogSettings(BaseModel):
    venues_path: str = "data/venues.json"


class AttendanceSettings(BaseModel):
    allowed_radius_m: float = Field(300.0, ge=0, allow_inf_nan=False)


class ApiSettings(BaseModel):
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])


class QrSettings(BaseModel):
    png_width: int = Field(256, ge=21)
    png_border: int = Field(1, ge=0)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    attendance: AttendanceSettings = Field(default_factory=AttendanceSettings)
    qr: QrSettings = Field(default_factory=QrSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("HAAS_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    tz = os.getenv("HAAS_TIMEZONE")
    if tz:
        data.setdefault("app", {})["timezone"] = tz

    venues_path = os.getenv("HAAS_VENUES_PATH")
    if venues_path:
        data.setdefault("catalog", {})["venues_path"] = venues_path

    cors = os.getenv("HAAS_CORS_ORIGINS")
    if cors is not None:
        data.setdefault("api", {})["cors_origins"] = [s.strip() for s in cors.split(",") if s.strip()]

    radius = os.getenv("HAAS_ALLOWED_RADIUS_M")
    if radius:
        # Pydantic coerces and range-checks the string.
        data.setdefault("attendance", {})["allowed_radius_m"] = radius

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("HAAS_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
