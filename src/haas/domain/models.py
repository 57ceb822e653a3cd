"""
Domain models (Pydantic).

These types are the contract between the HTTP/CLI boundary and the attendance code:
- punch and geofence-check inputs (`PunchRequest`, `GeofenceCheckRequest`)
- registry entities (`Venue`, `Equipment`)
- outputs (`PunchResult`, `GeofenceCheckResult`, `QrToken`)

Coordinate range checks and NaN/Infinity rejection happen here, so the geofence
functions in `haas.core.geo` can stay pure arithmetic.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import AwareDatetime, BaseModel, Field, field_validator

from haas.core.geo import GeoPoint

PunchPurpose = Literal["checkin", "checkout"]


class Coordinate(BaseModel):
    """A geographic point in decimal degrees."""

    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lon: float = Field(..., ge=-180, le=180, allow_inf_nan=False)

    def to_point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lon=self.lon)


class Venue(BaseModel):
    """An event venue with its registered coordinate."""

    id: str = Field(..., min_length=1)
    name: str
    location: Coordinate
    allowed_radius_m: float | None = Field(default=None, ge=0, allow_inf_nan=False)


class Equipment(BaseModel):
    """A piece of equipment installed at a venue and tagged with a QR code."""

    id: str = Field(..., min_length=1)
    venue_id: str = Field(..., min_length=1)
    name: str
    qr_code: str = Field(..., min_length=1)

    @field_validator("qr_code")
    @classmethod
    def _strip_qr(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("qr_code must not be blank")
        return value


class PunchRequest(BaseModel):
    """A staff check-in/check-out scanned from an equipment QR code."""

    equipment_qr: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lon: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    purpose: PunchPurpose
    shift_id: str | None = None

    @field_validator("equipment_qr")
    @classmethod
    def _strip_qr(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("equipment_qr must not be blank")
        return value

    def to_point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lon=self.lon)


class PunchResult(BaseModel):
    """Outcome of evaluating a punch against its venue geofence."""

    accepted: bool
    reason: Literal["ok", "out_of_range"]
    purpose: PunchPurpose
    equipment_id: str
    venue_id: str
    distance_m: float
    allowed_radius_m: float
    punched_at: datetime
    shift_id: str | None = None


class GeofenceCheckRequest(BaseModel):
    point: Coordinate
    center: Coordinate
    radius_m: float = Field(..., ge=0, allow_inf_nan=False)


class GeofenceCheckResult(BaseModel):
    distance_m: float
    allowed_radius_m: float
    within: bool


class QrTokenRequest(BaseModel):
    shift_id: str = Field(..., min_length=1)
    purpose: PunchPurpose
    event_date: date


class QrToken(BaseModel):
    """A one-day punch token printed as a QR code for a shift."""

    shift_id: str
    token: str
    purpose: PunchPurpose
    issued_for_date: date
    expires_at: AwareDatetime


class QrVerifyRequest(BaseModel):
    token: QrToken
    purpose: PunchPurpose


class QrVerifyResult(BaseModel):
    valid: bool
    checked_at: datetime
    expires_at: datetime
