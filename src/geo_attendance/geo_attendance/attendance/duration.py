from __future__ import annotations

from datetime import timedelta
from typing import Optional

from ..core.constants import NOT_CHECKED_OUT_LABEL
from .model import AttendanceRecord


def worked_duration(record: AttendanceRecord) -> Optional[timedelta]:
    """check_out - check_in; None while the session is open.

    No floor/ceiling: clock skew can make this zero or negative.
    """

    if record.check_out_time is None:
        return None
    return record.check_out_time - record.check_in_time


def format_worked_hours(record: AttendanceRecord) -> str:
    duration = worked_duration(record)
    if duration is None:
        return NOT_CHECKED_OUT_LABEL
    minutes = int(duration.total_seconds() // 60)
    return f"{minutes // 60}h {minutes % 60}m"
