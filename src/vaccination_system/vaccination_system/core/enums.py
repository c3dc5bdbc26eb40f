from __future__ import annotations

from enum import Enum


class VaccinationStatus(str, Enum):
    """Aggregate vaccination status stored on a student."""

    VACCINATED = "vaccinated"
    PARTIALLY_VACCINATED = "partially_vaccinated"
    NOT_VACCINATED = "not_vaccinated"


class DriveStatus(str, Enum):
    """Lifecycle state of a vaccination drive."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
