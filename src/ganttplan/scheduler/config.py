"""Configuration classes for the scheduling system."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel


class CriticalPathMode(str, Enum):
    """How the critical set is chosen once slack is known."""

    STRICT = "strict"  # Every zero-slack task is critical
    FLEXIBLE = "flexible"  # One continuous zero-slack chain is critical


class CriticalPathConfig(BaseModel):
    """Configuration for critical path mode selection."""

    type: CriticalPathMode = CriticalPathMode.STRICT


class ScheduleOptions(BaseModel):
    """Options shared by the scheduler and the critical path analyzer."""

    # Hard lower bound: nothing is scheduled before this date
    project_start: date | None = None
    # Hard upper bound: tasks finishing later are pulled back and reported
    project_end: date | None = None
    # Snap computed starts onto workdays when a calendar is given
    respect_calendar: bool = True
    critical_path: CriticalPathConfig = CriticalPathConfig()

    def model_post_init(self, __context: Any) -> None:
        """Validate the project window after initialization."""
        if (
            self.project_start is not None
            and self.project_end is not None
            and self.project_end < self.project_start
        ):
            raise ValueError(
                f"project_end ({self.project_end}) is before project_start ({self.project_start})"
            )
