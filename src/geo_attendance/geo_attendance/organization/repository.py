from __future__ import annotations

from typing import Protocol, Sequence

from .model import Campus, Division


class OrganizationRepository(Protocol):
    """Read-only lookup lists offered on the check-in form."""

    def list_divisions(self) -> Sequence[Division]:
        raise NotImplementedError

    def list_campuses(self) -> Sequence[Campus]:
        raise NotImplementedError
