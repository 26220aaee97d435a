from __future__ import annotations

from typing import Protocol, Sequence

from .model import OfficeLocation


class LocationRepository(Protocol):
    def list_active(self) -> Sequence[OfficeLocation]:
        raise NotImplementedError
