from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.datetime_utils import DayWindow, day_window
from ..core.exceptions import IntegrityError
from .model import AttendanceRecord, Identity
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class SessionResolver:
    """Finds the (at most one) session of an identity for a given day."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def find_open_or_today_session(self, identity: Identity, as_of_date: date) -> Optional[AttendanceRecord]:
        return self.find_in_window(identity, day_window(as_of_date))

    def find_in_window(self, identity: Identity, window: DayWindow) -> Optional[AttendanceRecord]:
        records = list(self._attendance.find_in_window(identity, window))
        if not records:
            return None
        if len(records) > 1:
            ids = [r.attendance_id for r in records]
            logger.error(
                "Data integrity violation: %d sessions for %s between %s and %s (ids=%s)",
                len(records),
                identity.describe(),
                window.start.isoformat(),
                window.end.isoformat(),
                ids,
            )
            raise IntegrityError(
                f"Found {len(records)} attendance records for one person on {window.start.date().isoformat()}",
                record_ids=ids,
            )
        return records[0]
