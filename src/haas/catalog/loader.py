"""
Venue registry loader.

The registry is a local JSON file (default: `data/venues.json`) listing venues with
their coordinates and the QR-tagged equipment installed at each one:

    {"venues": [...], "equipment": [...]}

It is read-only; we validate it into typed Pydantic models so the punch code can
assume every equipment item points at a known venue.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter

from haas.core.env import resolve_project_path
from haas.domain.models import Equipment, Venue


_VENUES_ADAPTER = TypeAdapter(list[Venue])
_EQUIPMENT_ADAPTER = TypeAdapter(list[Equipment])


class VenueRegistry:
    def __init__(self, venues: list[Venue], equipment: list[Equipment]):
        self._venues: dict[str, Venue] = {}
        for v in venues:
            if v.id in self._venues:
                raise ValueError(f"Duplicate venue id '{v.id}'")
            self._venues[v.id] = v

        self._by_qr: dict[str, Equipment] = {}
        for e in equipment:
            if e.venue_id not in self._venues:
                raise ValueError(f"Equipment '{e.id}' references unknown venue '{e.venue_id}'")
            if e.qr_code in self._by_qr:
                raise ValueError(f"Duplicate equipment QR code '{e.qr_code}'")
            self._by_qr[e.qr_code] = e

    @property
    def venues(self) -> list[Venue]:
        return list(self._venues.values())

    @property
    def equipment(self) -> list[Equipment]:
        return list(self._by_qr.values())

    def get_venue(self, venue_id: str) -> Venue:
        return self._venues[venue_id]

    def find_equipment_by_qr(self, qr: str) -> Equipment | None:
        return self._by_qr.get(qr.strip())


def load_venue_registry(path: str | Path) -> VenueRegistry:
    """Load and validate a venue registry JSON file."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Invalid venue registry {resolved}; expected an object with 'venues' and 'equipment'.")
    venues = _VENUES_ADAPTER.validate_python(payload.get("venues") or [])
    equipment = _EQUIPMENT_ADAPTER.validate_python(payload.get("equipment") or [])
    return VenueRegistry(venues, equipment)
