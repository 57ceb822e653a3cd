from __future__ import annotations
from dataclasses import dataclass
from math import atan2, cos, isfinite, nan, radians, sin, sqrt

"""
Geofence helpers.

Attendance punches are accepted only when the reported GPS position lies within a
radius of the venue. We use a spherical-Earth Haversine distance: it is well within
venue-scale accuracy needs and keeps this layer free of GIS dependencies.
"""

EARTH_RADIUS_M = 6_371_000.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lon: float


def distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in meters between two points.

    Identical points give exactly 0.0. Non-finite coordinates give NaN instead of
    raising, so callers comparing against a radius get `False`.
    """
    if not all(isfinite(v) for v in (a.lat, a.lon, b.lat, b.lon)):
        return nan

    phi1 = radians(a.lat)
    phi2 = radians(b.lat)
    dphi = radians(b.lat - a.lat)
    dlambda = radians(b.lon - a.lon)

    h = sin(dphi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(dlambda / 2) ** 2
    # Rounding can push h just outside [0, 1]: past 1 near antipodes, below 0 when
    # an out-of-range latitude makes cos(phi1) * cos(phi2) negative. NaN falls through.
    if h > 1.0:
        h = 1.0
    elif h < 0.0:
        h = 0.0
    return EARTH_RADIUS_M * 2 * atan2(sqrt(h), sqrt(1 - h))


def is_within_radius(point: GeoPoint, center: GeoPoint, radius_m: float) -> bool:
    """Return True if `point` is within `radius_m` meters of `center` (boundary inclusive)."""
    return distance_m(point, center) <= radius_m
