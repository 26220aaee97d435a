from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from ..geo.distance import distance_meters
from ..geo.model import Coordinate
from .model import OfficeLocation
from .repository import LocationRepository


def is_within_any_geofence(point: Coordinate, locations: Iterable[OfficeLocation]) -> bool:
    """True iff the point lies inside (or on the edge of) at least one radius."""

    return any(distance_meters(point, loc.coordinate) <= loc.radius_meters for loc in locations)


def nearest_location(point: Coordinate, locations: Iterable[OfficeLocation]) -> Optional[OfficeLocation]:
    """Closest location; ties go to the first one encountered."""

    nearest: Optional[OfficeLocation] = None
    best: Optional[float] = None
    for loc in locations:
        d = distance_meters(point, loc.coordinate)
        if best is None or d < best:
            nearest, best = loc, d
    return nearest


@dataclass(frozen=True)
class GeofenceCheck:
    """Validity of a point plus "X meters from nearest office" feedback."""

    point: Coordinate
    is_valid: bool
    nearest: Optional[OfficeLocation]
    nearest_distance_meters: Optional[float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "within_geofence": self.is_valid,
            "nearest_location": self.nearest.name if self.nearest else None,
            "nearest_location_id": self.nearest.location_id if self.nearest else None,
            "distance_meters": round(self.nearest_distance_meters) if self.nearest_distance_meters is not None else None,
        }


class LocationRegistry:
    """Read-only snapshot of the active office locations."""

    def __init__(self, locations: Iterable[OfficeLocation]):
        self._locations: tuple[OfficeLocation, ...] = tuple(loc for loc in locations if loc.is_active)

    @classmethod
    def load(cls, source: LocationRepository) -> "LocationRegistry":
        return cls(source.list_active())

    def active_locations(self) -> Sequence[OfficeLocation]:
        return self._locations

    def is_empty(self) -> bool:
        return not self._locations

    def is_within_any_geofence(self, point: Coordinate) -> bool:
        return is_within_any_geofence(point, self._locations)

    def nearest_location(self, point: Coordinate) -> Optional[OfficeLocation]:
        return nearest_location(point, self._locations)

    def evaluate(self, point: Coordinate) -> GeofenceCheck:
        nearest = self.nearest_location(point)
        return GeofenceCheck(
            point=point,
            is_valid=self.is_within_any_geofence(point),
            nearest=nearest,
            nearest_distance_meters=distance_meters(point, nearest.coordinate) if nearest else None,
        )
