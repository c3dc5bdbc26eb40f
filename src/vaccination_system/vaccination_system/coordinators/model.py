from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Coordinator:
    """Domain entity: a registered coordinator who owns students and drives.

    Note: Plain data object (no DB access code).
    """

    coordinator_id: int
    name: str
    email: str
    password_hash: str
    school: str
    created_at: Optional[datetime] = None
