from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import day_window
from ..core.exceptions import SchedulingConflictError
from .repository import DriveRepository


class SchedulingGuard:
    """Rejects a drive that would share location and calendar day with another.

    Note: read-then-write, so two concurrent requests can still both pass.
    """

    def __init__(self, drives: DriveRepository):
        self._drives = drives

    def has_conflict(
        self,
        *,
        coordinator_id: int,
        location: str,
        when: datetime,
        exclude_drive_id: Optional[int] = None,
    ) -> bool:
        start, end = day_window(when)
        clash = self._drives.find_on_day(
            coordinator_id=coordinator_id,
            location=location,
            start=start,
            end=end,
            exclude_drive_id=exclude_drive_id,
        )
        return clash is not None

    def ensure_free(
        self,
        *,
        coordinator_id: int,
        location: str,
        when: datetime,
        exclude_drive_id: Optional[int] = None,
    ) -> None:
        if self.has_conflict(
            coordinator_id=coordinator_id,
            location=location,
            when=when,
            exclude_drive_id=exclude_drive_id,
        ):
            raise SchedulingConflictError(
                f"There is already a vaccination drive scheduled at {location} on {when.strftime('%Y-%m-%d')}"
            )
