"""
Attendance punch evaluation.

A punch names an equipment QR code; the equipment's venue supplies the reference
coordinate. The punch is accepted when the reported GPS position lies within the
venue's allowed radius (venue override, else the configured default).
"""

from __future__ import annotations

import logging
from datetime import datetime

from haas.catalog.loader import VenueRegistry
from haas.config.settings import Settings
from haas.core.geo import distance_m, is_within_radius
from haas.core.time import ensure_tz, now_in
from haas.domain.models import PunchRequest, PunchResult, Venue

logger = logging.getLogger(__name__)


class UnknownEquipmentError(LookupError):
    """Raised when a punch names a QR code that is not registered to any equipment."""

    def __init__(self, qr_code: str):
        super().__init__(f"No equipment registered for QR code '{qr_code}'")
        self.qr_code = qr_code


def resolve_allowed_radius(venue: Venue, settings: Settings) -> float:
    if venue.allowed_radius_m is not None:
        return float(venue.allowed_radius_m)
    return float(settings.attendance.allowed_radius_m)


def evaluate_punch(
    request: PunchRequest,
    *,
    registry: VenueRegistry,
    settings: Settings,
    now: datetime | None = None,
) -> PunchResult:
    """Decide whether a punch is physically at the equipment's venue."""
    equipment = registry.find_equipment_by_qr(request.equipment_qr)
    if equipment is None:
        raise UnknownEquipmentError(request.equipment_qr)
    venue = registry.get_venue(equipment.venue_id)

    radius = resolve_allowed_radius(venue, settings)
    point = request.to_point()
    center = venue.location.to_point()
    dist = distance_m(point, center)
    accepted = is_within_radius(point, center, radius)

    punched_at = ensure_tz(now, settings.app.timezone) if now is not None else now_in(settings.app.timezone)

    if accepted:
        logger.info(
            "Accepted %s at venue=%s equipment=%s distance=%.1fm radius=%.0fm",
            request.purpose,
            venue.id,
            equipment.id,
            dist,
            radius,
        )
    else:
        logger.warning(
            "Rejected %s at venue=%s equipment=%s: distance=%.1fm exceeds radius=%.0fm",
            request.purpose,
            venue.id,
            equipment.id,
            dist,
            radius,
        )

    return PunchResult(
        accepted=accepted,
        reason="ok" if accepted else "out_of_range",
        purpose=request.purpose,
        equipment_id=equipment.id,
        venue_id=venue.id,
        distance_m=dist,
        allowed_radius_m=radius,
        punched_at=punched_at,
        shift_id=request.shift_id,
    )
