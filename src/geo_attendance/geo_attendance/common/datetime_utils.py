from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Protocol

from ..core.constants import DAY_WINDOW_END, DAY_WINDOW_START


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


@dataclass(frozen=True)
class DayWindow:
    """Half-open range of check-in times considered "the same day".

    The upper bound is 23:59:59 of the day, not midnight of the next one, so a
    check-in during the last second of a day falls outside every window.
    """

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def day_window(day: date) -> DayWindow:
    return DayWindow(
        start=datetime.combine(day, DAY_WINDOW_START),
        end=datetime.combine(day, DAY_WINDOW_END),
    )


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    def now(self) -> datetime:
        return now_local()


class FixedClock:
    """Clock frozen at a given moment; advance() moves it forward."""

    def __init__(self, moment: datetime):
        self._moment = moment

    def now(self) -> datetime:
        return self._moment

    def advance(self, **kwargs) -> datetime:
        self._moment = self._moment + timedelta(**kwargs)
        return self._moment

    def set(self, moment: datetime) -> None:
        self._moment = moment
