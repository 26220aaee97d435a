from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Division:
    division_id: int
    name: str


@dataclass(frozen=True)
class Campus:
    campus_id: int
    name: str
