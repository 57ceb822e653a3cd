"""
API routes.

Endpoints:
- GET  `/api/health`: liveness plus a warning when the venue registry is missing.
- POST `/api/geofence/check`: distance + inclusive radius check for two coordinates.
- POST `/api/attendance/punch`: evaluate a QR-scanned punch against its venue geofence.
- POST `/api/qr/issue`: issue a one-day shift QR token (JSON or PNG).
- POST `/api/qr/verify`: check a scanned token against its purpose and expiry.
"""

from __future__ import annotations

import logging
import os
import time
from functools import lru_cache
from typing import Literal

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from haas.attendance.punch import UnknownEquipmentError, evaluate_punch
from haas.attendance.qr import is_qr_token_valid, issue_qr_token, render_qr_png
from haas.catalog.loader import VenueRegistry, load_venue_registry
from haas.config.settings import get_settings
from haas.core.env import resolve_project_path
from haas.core.geo import distance_m, is_within_radius
from haas.core.time import now_in
from haas.domain.models import (
    GeofenceCheckRequest,
    GeofenceCheckResult,
    PunchRequest,
    QrToken,
    QrTokenRequest,
    QrVerifyRequest,
    QrVerifyResult,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_STARTED_AT = time.monotonic()


@lru_cache
def _registry() -> VenueRegistry:
    settings = get_settings()
    return load_venue_registry(settings.catalog.venues_path)


@router.get("/api/health")
def get_health() -> dict:
    """Return service status for monitoring and smoke tests."""
    settings = get_settings()
    health = {
        "status": "ok",
        "timestamp": now_in(settings.app.timezone).isoformat(),
        "environment": os.getenv("HAAS_ENV", "development"),
        "uptime_seconds": round(time.monotonic() - _STARTED_AT, 3),
    }
    venues_path = resolve_project_path(settings.catalog.venues_path)
    if not venues_path.is_file():
        health["status"] = "warning"
        health["message"] = f"Venue registry not found: {venues_path}"
    return health


@router.post("/api/geofence/check", response_model=GeofenceCheckResult)
def post_geofence_check(body: GeofenceCheckRequest) -> GeofenceCheckResult:
    """Compute the distance between two coordinates and test it against a radius."""
    point = body.point.to_point()
    center = body.center.to_point()
    return GeofenceCheckResult(
        distance_m=distance_m(point, center),
        allowed_radius_m=body.radius_m,
        within=is_within_radius(point, center, body.radius_m),
    )


@router.post("/api/attendance/punch")
def post_attendance_punch(body: PunchRequest) -> dict:
    """Accept or reject a punch based on the equipment venue's geofence."""
    settings = get_settings()
    try:
        result = evaluate_punch(body, registry=_registry(), settings=settings)
    except UnknownEquipmentError as e:
        raise HTTPException(
            status_code=404,
            detail={"code": "UNKNOWN_EQUIPMENT", "message": str(e)},
        ) from e
    except Exception as e:
        logger.exception("Punch evaluation failed")
        raise HTTPException(
            status_code=500,
            detail={"code": "INTERNAL_ERROR", "message": str(e)},
        ) from e

    if not result.accepted:
        raise HTTPException(
            status_code=400,
            detail={
                "code": "OUT_OF_RANGE",
                "message": (
                    f"Location is {result.distance_m:.0f}m from the venue; "
                    f"allowed radius is {result.allowed_radius_m:.0f}m"
                ),
                "distance_m": result.distance_m,
                "allowed_radius_m": result.allowed_radius_m,
            },
        )
    return {"ok": True, "attendance": result.model_dump(mode="json")}


@router.post("/api/qr/issue", response_model=QrToken)
def post_qr_issue(body: QrTokenRequest, format: Literal["json", "png"] = "json"):
    """Issue a shift QR token; `?format=png` returns the rendered code instead of JSON."""
    token = issue_qr_token(body.shift_id, body.purpose, body.event_date)
    if format == "png":
        qr = get_settings().qr
        png = render_qr_png(token.token, width=qr.png_width, border=qr.png_border)
        return Response(content=png, media_type="image/png")
    return token


@router.post("/api/qr/verify", response_model=QrVerifyResult)
def post_qr_verify(body: QrVerifyRequest) -> QrVerifyResult:
    """Check a scanned shift token for the requested purpose at the current time."""
    now = now_in(get_settings().app.timezone)
    valid = is_qr_token_valid(body.token, purpose=body.purpose, now=now)
    if not valid:
        logger.info("Rejected %s QR token for shift=%s", body.purpose, body.token.shift_id)
    return QrVerifyResult(valid=valid, checked_at=now, expires_at=body.token.expires_at)
