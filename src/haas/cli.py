"""
HAAS CLI entrypoint.

Intended for quick field checks and debugging without the API server: measure the
distance between two coordinates, test a geofence, dry-run a punch against the venue
registry, or issue a shift QR token.
"""

from __future__ import annotations

import argparse
import json
from datetime import date
from pathlib import Path
from typing import Any

from haas.attendance.punch import UnknownEquipmentError, evaluate_punch
from haas.attendance.qr import issue_qr_token, render_qr_png
from haas.catalog.loader import load_venue_registry
from haas.config.settings import get_settings
from haas.core.geo import GeoPoint, distance_m, is_within_radius
from haas.core.logging import configure_logging
from haas.core.time import parse_datetime
from haas.domain.models import PunchRequest


def _cmd_distance(args: argparse.Namespace) -> int:
    d = distance_m(GeoPoint(lat=args.lat1, lon=args.lon1), GeoPoint(lat=args.lat2, lon=args.lon2))
    if args.json:
        print(json.dumps({"distance_m": d}))
    else:
        print(f"{d:.1f} m")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle `check`; the exit code is 0 inside the geofence and 1 outside."""
    settings = get_settings()
    radius = float(args.radius) if args.radius is not None else settings.attendance.allowed_radius_m
    point = GeoPoint(lat=args.lat, lon=args.lon)
    center = GeoPoint(lat=args.center_lat, lon=args.center_lon)
    d = distance_m(point, center)
    within = is_within_radius(point, center, radius)
    if args.json:
        print(json.dumps({"distance_m": d, "allowed_radius_m": radius, "within": within}))
    else:
        print(f"{'inside' if within else 'outside'}: {d:.1f} m (radius {radius:.0f} m)")
    return 0 if within else 1


def _cmd_punch(args: argparse.Namespace) -> int:
    settings = get_settings()
    registry = load_venue_registry(args.venues or settings.catalog.venues_path)
    request = PunchRequest(
        equipment_qr=args.qr,
        lat=args.lat,
        lon=args.lon,
        purpose=args.purpose,
        shift_id=args.shift_id,
    )
    now = parse_datetime(args.at, settings.app.timezone) if args.at else None
    try:
        result = evaluate_punch(request, registry=registry, settings=settings, now=now)
    except UnknownEquipmentError as e:
        print(str(e))
        return 2

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
    else:
        status = "accepted" if result.accepted else "rejected"
        print(
            f"{status}: {result.purpose} at {result.venue_id} ({result.equipment_id}) "
            f"{result.distance_m:.1f} m / {result.allowed_radius_m:.0f} m"
        )
    return 0 if result.accepted else 1


def _cmd_issue_qr(args: argparse.Namespace) -> int:
    settings = get_settings()
    token = issue_qr_token(args.shift_id, args.purpose, date.fromisoformat(args.event_date))
    if args.png:
        png = render_qr_png(token.token, width=settings.qr.png_width, border=settings.qr.png_border)
        Path(args.png).write_bytes(png)
    if args.json:
        print(json.dumps(token.model_dump(mode="json"), ensure_ascii=False, indent=2))
    else:
        print(token.token)
        print(f"  expires: {token.expires_at.isoformat()}")
        if args.png:
            print(f"  png: {args.png}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the HAAS CLI."""
    parser = argparse.ArgumentParser(prog="haas")
    sub = parser.add_subparsers(dest="command", required=True)

    dist = sub.add_parser("distance", help="Great-circle distance in meters between two points.")
    dist.add_argument("lat1", type=float)
    dist.add_argument("lon1", type=float)
    dist.add_argument("lat2", type=float)
    dist.add_argument("lon2", type=float)
    dist.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    dist.set_defaults(func=_cmd_distance)

    chk = sub.add_parser("check", help="Test whether a point lies within a radius of a center.")
    chk.add_argument("--lat", required=True, type=float)
    chk.add_argument("--lon", required=True, type=float)
    chk.add_argument("--center-lat", required=True, type=float)
    chk.add_argument("--center-lon", required=True, type=float)
    chk.add_argument("--radius", type=float, default=None, help="Meters; defaults to attendance.allowed_radius_m")
    chk.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    chk.set_defaults(func=_cmd_check)

    pun = sub.add_parser("punch", help="Dry-run a punch against the venue registry.")
    pun.add_argument("--qr", required=True, help="Equipment QR code")
    pun.add_argument("--lat", required=True, type=float)
    pun.add_argument("--lon", required=True, type=float)
    pun.add_argument("--purpose", choices=["checkin", "checkout"], default="checkin")
    pun.add_argument("--shift-id", type=str, default=None)
    pun.add_argument("--venues", type=str, default=None, help="Registry JSON path (defaults to settings)")
    pun.add_argument("--at", type=str, default=None, help="ISO datetime of the punch (default: now)")
    pun.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    pun.set_defaults(func=_cmd_punch)

    qr = sub.add_parser("issue-qr", help="Issue a one-day QR token for a shift.")
    qr.add_argument("--shift-id", required=True)
    qr.add_argument("--purpose", choices=["checkin", "checkout"], required=True)
    qr.add_argument("--event-date", required=True, help="ISO date (e.g. 2026-01-05)")
    qr.add_argument("--png", type=str, default=None, help="Also write the QR code PNG to this path")
    qr.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    qr.set_defaults(func=_cmd_issue_qr)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m haas.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
