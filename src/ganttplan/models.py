"""Data models for ganttplan."""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from .exceptions import ValidationError

# Task identifiers are opaque: numeric IDs from one tracker, string keys from another
TaskId = int | str


class LinkType(str, Enum):
    """Dependency type between two tasks.

    The value names the predecessor boundary first and the successor boundary
    second, e.g. ``e2s`` = end of source to start of target.
    """

    FINISH_TO_START = "e2s"
    START_TO_START = "s2s"
    FINISH_TO_FINISH = "e2e"
    START_TO_FINISH = "s2e"

    @classmethod
    def parse(cls, value: str | LinkType) -> LinkType:
        """Parse a link type string.

        Supported formats:
        - "e2s", "s2s", "e2e", "s2e" - native codes
        - "fs", "ss", "ff", "sf" - scheduling shorthand
        - "finish-to-start", "start_to_start", ... - long names
        """
        if isinstance(value, LinkType):
            return value
        key = re.sub(r"[\s_]+", "-", str(value).strip().lower())
        if key in _LINK_TYPE_ALIASES:
            return _LINK_TYPE_ALIASES[key]
        raise ValueError(f"Unknown link type: {value!r}")


_LINK_TYPE_ALIASES: dict[str, LinkType] = {
    "e2s": LinkType.FINISH_TO_START,
    "fs": LinkType.FINISH_TO_START,
    "finish-to-start": LinkType.FINISH_TO_START,
    "s2s": LinkType.START_TO_START,
    "ss": LinkType.START_TO_START,
    "start-to-start": LinkType.START_TO_START,
    "e2e": LinkType.FINISH_TO_FINISH,
    "ff": LinkType.FINISH_TO_FINISH,
    "finish-to-finish": LinkType.FINISH_TO_FINISH,
    "s2e": LinkType.START_TO_FINISH,
    "sf": LinkType.START_TO_FINISH,
    "start-to-finish": LinkType.START_TO_FINISH,
}


class ConstraintType(str, Enum):
    """Date constraints a single task can carry in addition to its links."""

    START_NO_EARLIER_THAN = "start-no-earlier-than"
    START_NO_LATER_THAN = "start-no-later-than"
    FINISH_NO_EARLIER_THAN = "finish-no-earlier-than"
    FINISH_NO_LATER_THAN = "finish-no-later-than"
    MUST_START_ON = "must-start-on"
    MUST_FINISH_ON = "must-finish-on"


@dataclass(frozen=True)
class TaskConstraint:
    """A date constraint on one task."""

    type: ConstraintType
    date: date


@dataclass(frozen=True)
class Task:
    """A schedulable unit.

    ``end`` is inclusive: a one-day task has ``start == end``. A task with
    neither dates nor duration can only receive dates through incoming links.
    """

    id: TaskId
    start: date | None = None
    end: date | None = None
    duration: int | None = None  # Whole workdays; 0 marks a milestone
    parent: TaskId | None = None  # Summary task this one is nested under
    name: str = ""
    constraints: tuple[TaskConstraint, ...] = ()

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.end < self.start:
            raise ValidationError(
                f"Task {self.id!r} ends ({self.end}) before it starts ({self.start})"
            )
        if self.duration is not None and self.duration < 0:
            raise ValidationError(f"Task {self.id!r} has negative duration {self.duration}")

    @property
    def is_scheduled(self) -> bool:
        """True if the task has both a start and an end date."""
        return self.start is not None and self.end is not None

    def with_dates(self, start: date, end: date) -> Task:
        """Return a copy of this task with new dates."""
        return dataclasses.replace(self, start=start, end=end)


@dataclass(frozen=True)
class Link:
    """A directed dependency edge from ``source`` to ``target``.

    ``lag`` is a signed number of calendar days: positive delays the target,
    negative lets it overlap the source (lead).
    """

    source: TaskId
    target: TaskId
    type: LinkType = LinkType.FINISH_TO_START
    lag: int = 0
    id: TaskId | None = None

    def __str__(self) -> str:
        """Return a compact representation for logs and CLI output."""
        text = f"{self.source} -{self.type.value}-> {self.target}"
        if self.lag:
            text += f" ({self.lag:+d}d)"
        return text


def _default_tasks() -> list[Task]:
    return []


def _default_links() -> list[Link]:
    return []


@dataclass
class Project:
    """Tasks and links loaded from one project file."""

    tasks: list[Task] = field(default_factory=_default_tasks)
    links: list[Link] = field(default_factory=_default_links)

    def get_task(self, task_id: TaskId) -> Task | None:
        """Get a task by ID."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None
