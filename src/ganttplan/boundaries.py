"""Project timeline boundaries."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Task


@dataclass(frozen=True)
class ProjectBoundaries:
    """Earliest start and latest end of a project; None when unknown."""

    start: date | None = None
    end: date | None = None

    def contains(self, day: date, include_end: bool = True) -> bool:
        """Check whether ``day`` falls inside the boundaries."""
        if self.start is not None and day < self.start:
            return False
        if self.end is not None:
            return day <= self.end if include_end else day < self.end
        return True


def derive_boundaries_from_tasks(tasks: Iterable[Task]) -> ProjectBoundaries:
    """Earliest start and latest end over every task that has them."""
    task_list = list(tasks)
    starts = [task.start for task in task_list if task.start is not None]
    ends = [task.end for task in task_list if task.end is not None]
    return ProjectBoundaries(
        start=min(starts) if starts else None,
        end=max(ends) if ends else None,
    )


def resolve_project_boundaries(
    explicit_start: date | None, explicit_end: date | None, tasks: Iterable[Task]
) -> ProjectBoundaries:
    """Explicit boundaries win; missing ones are derived from the tasks."""
    derived = derive_boundaries_from_tasks(tasks)
    return ProjectBoundaries(
        start=explicit_start if explicit_start is not None else derived.start,
        end=explicit_end if explicit_end is not None else derived.end,
    )


def enforce_project_start_boundary(task_start: date, project_start: date | None) -> date:
    """Move a start that falls before the project start up to it."""
    if project_start is None:
        return task_start
    return max(task_start, project_start)


def enforce_project_end_boundary(task_end: date, project_end: date | None) -> date:
    """Pull an end that falls after the project end back to it."""
    if project_end is None:
        return task_end
    return min(task_end, project_end)

