"""Core dataclasses for scheduling results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ganttplan.models import TaskId


class ConflictKind(str, Enum):
    """Categories of diagnostics produced instead of exceptions."""

    CIRCULAR_DEPENDENCY = "circular_dependency"
    CONSTRAINT_VIOLATION = "constraint_violation"
    INVALID_DATES = "invalid_dates"


@dataclass(frozen=True)
class ScheduledDates:
    """Computed dates for one task."""

    start: date
    end: date
    changed: bool = False  # True if set for the first time or moved by this run


@dataclass(frozen=True)
class ScheduleConflict:
    """A graph-level irregularity found while scheduling."""

    kind: ConflictKind
    task_ids: tuple[TaskId, ...]  # The cycle, in order, for circular dependencies
    message: str


def _default_conflicts() -> list[ScheduleConflict]:
    return []


def _default_ids() -> frozenset[TaskId]:
    return frozenset()


@dataclass
class ScheduleResult:
    """Complete result of a scheduling run.

    Tasks that could not be given dates are absent from ``tasks``.
    """

    tasks: dict[TaskId, ScheduledDates]
    conflicts: list[ScheduleConflict] = field(default_factory=_default_conflicts)
    affected_task_ids: frozenset[TaskId] = field(default_factory=_default_ids)

    def has_conflicts(self, kind: ConflictKind | None = None) -> bool:
        """Check for conflicts, optionally of a single kind."""
        if kind is None:
            return bool(self.conflicts)
        return any(c.kind == kind for c in self.conflicts)


@dataclass(frozen=True)
class CriticalPathEntry:
    """Critical path method annotations for one task.

    Dates are inclusive days and are None when the task could not be
    anchored to any date (no own start, no project start, no predecessors).
    """

    task_id: TaskId
    early_start: date | None
    early_finish: date | None
    late_start: date | None
    late_finish: date | None
    slack: int  # Days the start can slip without moving the project end
    is_critical: bool
