from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinate:
    """WGS84 point in degrees."""

    latitude: float
    longitude: float
