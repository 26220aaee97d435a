from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import DayWindow
from .model import AttendanceRecord, CheckInMutation, CheckOutMutation, Identity


class AttendanceRepository(Protocol):
    def find_in_window(self, identity: Identity, window: DayWindow) -> Sequence[AttendanceRecord]:
        """Records of this identity whose check_in_time is in [window.start, window.end)."""

        raise NotImplementedError

    def insert(self, mutation: CheckInMutation) -> AttendanceRecord:
        """Persist a new session.

        Must enforce one session per identity and day atomically (raise
        DuplicateSession when violated).
        """

        raise NotImplementedError

    def update_checkout(self, mutation: CheckOutMutation) -> None:
        """Raises RecordNotFound if the record no longer exists."""

        raise NotImplementedError

    def list_in_window(self, window: DayWindow, *, division_id: Optional[int] = None) -> Sequence[AttendanceRecord]:
        """All records checked in during the window, latest first.

        Records carry division_name/campus_name when the store can join them.
        """

        raise NotImplementedError
