"""Pytest configuration and fixtures for ganttplan tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, timedelta

import pytest

from ganttplan import context
from ganttplan.logger import reset_logger
from ganttplan.models import Link, LinkType, Task, TaskId

# 2024-01-01 is a Monday; most tests count weekdays from here
MONDAY = date(2024, 1, 1)


def day(offset: int) -> date:
    """Date ``offset`` calendar days after MONDAY."""
    return MONDAY + timedelta(days=offset)


def task(
    task_id: TaskId,
    start: date | None = None,
    end: date | None = None,
    duration: int | None = None,
    parent: TaskId | None = None,
) -> Task:
    """Create a Task with only the fields a test cares about."""
    return Task(id=task_id, start=start, end=end, duration=duration, parent=parent)


def link(
    source: TaskId,
    target: TaskId,
    type: LinkType | str = LinkType.FINISH_TO_START,  # noqa: A002 - mirrors Link.type
    lag: int = 0,
) -> Link:
    """Create a Link, accepting shorthand type strings such as "ss"."""
    return Link(source=source, target=target, type=LinkType.parse(type), lag=lag)


def chain(*task_ids: TaskId) -> list[Link]:
    """Finish-to-start links joining consecutive task IDs."""
    return [link(a, b) for a, b in zip(task_ids, task_ids[1:])]


@pytest.fixture(autouse=True)
def isolate_global_state() -> Iterator[None]:
    """Reset the logger and CLI context around each test."""
    reset_logger()
    context.set_config_path(None)
    yield
    reset_logger()
    context.set_config_path(None)
