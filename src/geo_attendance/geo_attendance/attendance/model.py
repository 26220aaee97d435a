from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..geo.model import Coordinate


@dataclass(frozen=True)
class Identity:
    """Who is attending: name + division + campus (no user accounts)."""

    person_name: str
    division_id: Optional[int]
    campus_id: Optional[int]

    @classmethod
    def of(cls, person_name: Optional[str], division_id: Optional[int], campus_id: Optional[int]) -> "Identity":
        return cls(person_name=(person_name or "").strip(), division_id=division_id, campus_id=campus_id)

    @property
    def is_complete(self) -> bool:
        return bool(self.person_name.strip()) and self.division_id is not None and self.campus_id is not None

    def describe(self) -> str:
        return f"{self.person_name!r} (division={self.division_id}, campus={self.campus_id})"


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one person's attendance for one day."""

    attendance_id: int
    person_name: str
    division_id: int
    campus_id: int
    check_in_time: datetime
    check_in_lat: float
    check_in_lon: float
    check_out_time: Optional[datetime] = None
    check_out_lat: Optional[float] = None
    check_out_lon: Optional[float] = None
    division_name: Optional[str] = None
    campus_name: Optional[str] = None

    @property
    def identity(self) -> Identity:
        return Identity(person_name=self.person_name, division_id=self.division_id, campus_id=self.campus_id)

    @property
    def is_checked_out(self) -> bool:
        return self.check_out_time is not None

    def with_checkout(self, mutation: "CheckOutMutation") -> "AttendanceRecord":
        return replace(
            self,
            check_out_time=mutation.check_out_time,
            check_out_lat=mutation.point.latitude,
            check_out_lon=mutation.point.longitude,
        )


@dataclass(frozen=True)
class CheckInMutation:
    """Values to insert for a new session."""

    identity: Identity
    check_in_time: datetime
    point: Coordinate


@dataclass(frozen=True)
class CheckOutMutation:
    """The single permitted update of an existing session."""

    attendance_id: int
    check_out_time: datetime
    point: Coordinate
