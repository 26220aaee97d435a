from __future__ import annotations

import math
from typing import Any, Optional

from ..core.exceptions import ValidationError
from ..geo.model import Coordinate


def _require_float(value: Any, field_name: str) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Location not detected")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number")
    return number


def require_coordinate(latitude: Any, longitude: Any) -> Coordinate:
    """Parse a caller-supplied WGS84 coordinate (degrees)."""

    lat = _require_float(latitude, "latitude")
    lon = _require_float(longitude, "longitude")
    if not -90.0 <= lat <= 90.0:
        raise ValidationError("latitude must be between -90 and 90")
    if not -180.0 <= lon <= 180.0:
        raise ValidationError("longitude must be between -180 and 180")
    return Coordinate(latitude=lat, longitude=lon)


def optional_text(value: Any, field_name: str) -> Optional[str]:
    """Missing -> None; otherwise must be a string, returned stripped."""

    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    return value.strip()


def optional_int(value: Any, field_name: str) -> Optional[int]:
    """Blank/missing -> None; anything else must be an integer id."""

    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} is not a valid id")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{field_name} is not a valid id")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid id") from None
