from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import DriveStatus
from .model import VaccinationDrive


class DriveRepository(Protocol):
    def list_for_coordinator(
        self,
        coordinator_id: int,
        *,
        statuses: Optional[Sequence[DriveStatus]] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        vaccine_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[VaccinationDrive]:
        """Drives ordered by date ascending; `start` inclusive, `end` exclusive."""

        raise NotImplementedError

    def get_for_coordinator(self, coordinator_id: int, drive_id: int) -> Optional[VaccinationDrive]:
        raise NotImplementedError

    def find_on_day(
        self,
        *,
        coordinator_id: int,
        location: str,
        start: datetime,
        end: datetime,
        exclude_drive_id: Optional[int] = None,
    ) -> Optional[VaccinationDrive]:
        """Any drive of the coordinator at `location` with date in `[start, end)`."""

        raise NotImplementedError

    def create(
        self,
        *,
        coordinator_id: int,
        name: str,
        scheduled_at: datetime,
        location: str,
        vaccine_type: str,
        description: Optional[str],
        target_count: int,
        student_ids: Sequence[int] = (),
    ) -> int:
        raise NotImplementedError

    def update_details(self, drive: VaccinationDrive) -> bool:
        """Persist name/date/location/vaccine/description/target/status."""

        raise NotImplementedError

    def delete(self, *, coordinator_id: int, drive_id: int) -> bool:
        raise NotImplementedError

    def add_enrollments(self, *, drive_id: int, student_ids: Sequence[int]) -> int:
        raise NotImplementedError

    def update_enrollment(
        self,
        *,
        drive_id: int,
        student_id: int,
        attended: bool,
        notes: Optional[str],
        vaccinated_count: int,
    ) -> bool:
        """Store attendance and the drive counter in one transaction."""

        raise NotImplementedError
