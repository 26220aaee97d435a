from __future__ import annotations

from enum import Enum


class SessionState(str, Enum):
    """Per identity, per day attendance state."""

    NO_SESSION = "NO_SESSION"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"


class AttendanceAction(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
