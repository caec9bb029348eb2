"""Split tasks: one task worked in several separate date ranges.

Dates are inclusive days, so a part covering Monday through Wednesday has
a duration of 3. Every function returns new values.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from .calendar import ONE_DAY
from .exceptions import SplitTaskError
from .models import Task, TaskId


def _day_count(start: date, end: date) -> int:
    return (end - start).days + 1


def _part_id(task_id: TaskId, number: int) -> str:
    return f"{task_id}_part_{number}"


@dataclass(frozen=True)
class SplitTaskPart:
    """One contiguous working range of a split task."""

    id: str
    start: date
    end: date
    duration: int

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise SplitTaskError(f"Split part {self.id} ends ({self.end}) before it starts ({self.start})")

    @classmethod
    def spanning(cls, part_id: str, start: date, end: date) -> SplitTaskPart:
        """Create a part whose duration is the number of days it covers."""
        return cls(id=part_id, start=start, end=end, duration=_day_count(start, end))


@dataclass(frozen=True)
class SplitTask:
    id: TaskId
    parts: tuple[SplitTaskPart, ...]

    def sorted_parts(self) -> list[SplitTaskPart]:
        return sorted(self.parts, key=lambda part: part.start)


@dataclass(frozen=True)
class SplitGap:
    """Idle days between two consecutive parts."""

    start: date
    end: date
    duration: int


def create_split_task(task: Task, ranges: Iterable[tuple[date, date]]) -> SplitTask:
    """Build a split task from ``(start, end)`` ranges, numbering parts from 1."""
    parts = tuple(
        SplitTaskPart.spanning(_part_id(task.id, number), start, end)
        for number, (start, end) in enumerate(ranges, start=1)
    )
    return SplitTask(id=task.id, parts=parts)


def split_task_at(task: Task, split_date: date) -> SplitTask:
    """Split a task into two parts; the second part starts on ``split_date``.

    Raises:
        SplitTaskError: If the task has no dates, or ``split_date`` is not
            after the task start and on or before its end
    """
    if task.start is None or task.end is None:
        raise SplitTaskError(f"Task {task.id!r} must have start and end dates to split")
    if not task.start < split_date <= task.end:
        raise SplitTaskError(
            f"Split date {split_date} must be within task {task.id!r} "
            f"({task.start} - {task.end}) and after its first day"
        )

    return create_split_task(
        task, [(task.start, split_date - ONE_DAY), (split_date, task.end)]
    )


def merge_split_task(split_task: SplitTask) -> Task:
    """Collapse a split task back into one task spanning all its parts.

    The merged duration is the sum of the part durations, so idle gaps
    are not counted as work.

    Raises:
        SplitTaskError: If the split task has no parts
    """
    if not split_task.parts:
        raise SplitTaskError(f"Cannot merge split task {split_task.id!r} with no parts")

    parts = split_task.sorted_parts()
    return Task(
        id=split_task.id,
        start=parts[0].start,
        end=max(part.end for part in parts),
        duration=sum(part.duration for part in parts),
    )


def _next_part_number(split_task: SplitTask) -> int:
    """One above the highest part number in use."""
    prefix = f"{split_task.id}_part_"
    numbers = [
        int(part.id[len(prefix) :])
        for part in split_task.parts
        if part.id.startswith(prefix) and part.id[len(prefix) :].isdigit()
    ]
    return max(numbers, default=0) + 1


def add_split_part(split_task: SplitTask, start: date, end: date) -> SplitTask:
    """Append a new part, keeping parts ordered by start date."""
    part = SplitTaskPart.spanning(_part_id(split_task.id, _next_part_number(split_task)), start, end)
    parts = sorted([*split_task.parts, part], key=lambda p: p.start)
    return dataclasses.replace(split_task, parts=tuple(parts))


def remove_split_part(split_task: SplitTask, part_id: str) -> SplitTask:
    return dataclasses.replace(
        split_task, parts=tuple(part for part in split_task.parts if part.id != part_id)
    )


def update_split_part(
    split_task: SplitTask,
    part_id: str,
    start: date | None = None,
    end: date | None = None,
) -> SplitTask:
    """Move one part; its duration follows the new range.

    Raises:
        SplitTaskError: If no part has ``part_id`` or the new range is inverted
    """
    if not any(part.id == part_id for part in split_task.parts):
        raise SplitTaskError(f"Split task {split_task.id!r} has no part {part_id!r}")

    parts = tuple(
        SplitTaskPart.spanning(part.id, start or part.start, end or part.end)
        if part.id == part_id
        else part
        for part in split_task.parts
    )
    return dataclasses.replace(split_task, parts=parts)


def calculate_gaps_in_split_task(split_task: SplitTask) -> list[SplitGap]:
    """Idle ranges between consecutive parts; adjacent or overlapping parts have none."""
    parts = split_task.sorted_parts()
    gaps: list[SplitGap] = []

    for current, following in zip(parts, parts[1:]):
        gap_start = current.end + ONE_DAY
        gap_end = following.start - ONE_DAY
        if gap_start <= gap_end:
            gaps.append(SplitGap(gap_start, gap_end, _day_count(gap_start, gap_end)))

    return gaps
