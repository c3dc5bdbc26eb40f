from __future__ import annotations

from typing import Optional, Protocol

from .model import Coordinator


class CoordinatorRepository(Protocol):
    """Repository interface for Coordinator.

    Note: the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, coordinator_id: int) -> Optional[Coordinator]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Coordinator]:
        raise NotImplementedError

    def create(self, *, name: str, email: str, password_hash: str, school: str) -> int:
        raise NotImplementedError
