"""Drive status state machine and the operations each state permits."""

from __future__ import annotations

from ..core.enums import DriveStatus
from ..core.exceptions import InvalidTransitionError, ValidationError
from .model import VaccinationDrive

ALLOWED_TRANSITIONS: dict[DriveStatus, frozenset[DriveStatus]] = {
    DriveStatus.SCHEDULED: frozenset({DriveStatus.IN_PROGRESS, DriveStatus.CANCELLED}),
    DriveStatus.IN_PROGRESS: frozenset({DriveStatus.COMPLETED, DriveStatus.CANCELLED}),
}

TERMINAL_STATES = frozenset({DriveStatus.COMPLETED, DriveStatus.CANCELLED})
ENROLLABLE_STATES = frozenset({DriveStatus.SCHEDULED, DriveStatus.IN_PROGRESS})


def can_transition(current: DriveStatus, target: DriveStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(current: DriveStatus, target: DriveStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(f"Invalid status transition from {current.value} to {target.value}")


def ensure_editable(drive: VaccinationDrive) -> None:
    if drive.status in TERMINAL_STATES:
        raise ValidationError(f"Cannot modify a {drive.status.value} vaccination drive")


def ensure_can_enroll(drive: VaccinationDrive) -> None:
    if drive.status not in ENROLLABLE_STATES:
        raise ValidationError(f"Cannot add students to a {drive.status.value} vaccination drive")


def ensure_can_mark_attendance(drive: VaccinationDrive) -> None:
    if drive.status != DriveStatus.IN_PROGRESS:
        raise ValidationError(f"Cannot update attendance for a {drive.status.value} vaccination drive")


def ensure_can_delete(drive: VaccinationDrive) -> None:
    if drive.status != DriveStatus.SCHEDULED:
        raise ValidationError(f"Cannot delete a {drive.status.value} vaccination drive")
