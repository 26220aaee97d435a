from __future__ import annotations

from dataclasses import dataclass

from ..geo.model import Coordinate


@dataclass(frozen=True)
class OfficeLocation:
    """Registered office with the radius inside which attendance is accepted."""

    location_id: int
    name: str
    latitude: float
    longitude: float
    radius_meters: float
    is_active: bool = True

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)
