"""Summary/child task hierarchy.

Hierarchy is expressed only through ``Task.parent``. A summary task is any
task that at least one other task names as its parent; its dates span the
dates of everything nested under it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from typing import TYPE_CHECKING

from .boundaries import ProjectBoundaries

if TYPE_CHECKING:
    from .models import Task, TaskId
    from .scheduler.core import ScheduledDates


def get_children(summary_id: TaskId, tasks: Iterable[Task]) -> list[Task]:
    """Direct children of a task, in input order."""
    return [task for task in tasks if task.parent == summary_id]


def is_summary_task(task_id: TaskId, tasks: Iterable[Task]) -> bool:
    return any(task.parent == task_id for task in tasks)


def get_summary_chain(task_id: TaskId, tasks: Iterable[Task]) -> list[TaskId]:
    """Ancestors of a task, nearest first. Stops at the first repeated ID."""
    parents = {task.id: task.parent for task in tasks}
    chain: list[TaskId] = []
    current = parents.get(task_id)
    while current is not None and current not in chain and current != task_id:
        chain.append(current)
        current = parents.get(current)
    return chain


def _task_dates(
    task: Task, dates: Mapping[TaskId, ScheduledDates] | None
) -> tuple[date | None, date | None]:
    if dates is not None and task.id in dates:
        scheduled = dates[task.id]
        return (scheduled.start, scheduled.end)
    return (task.start, task.end)


def calculate_summary_date_range(
    summary_id: TaskId,
    tasks: Iterable[Task],
    dates: Mapping[TaskId, ScheduledDates] | None = None,
) -> ProjectBoundaries:
    """Span of every descendant's dates.

    Nested summaries are descended into rather than counted themselves.
    A milestone with only a start date counts as a single day.

    Args:
        summary_id: The summary task
        tasks: All tasks
        dates: Optional scheduled dates (e.g. ``ScheduleResult.tasks``) that
            take precedence over the tasks' stored dates

    Returns:
        ProjectBoundaries with None for both ends when no descendant has dates
    """
    task_list = list(tasks)
    children: dict[TaskId, list[Task]] = {}
    for task in task_list:
        if task.parent is not None:
            children.setdefault(task.parent, []).append(task)

    starts: list[date] = []
    ends: list[date] = []
    seen: set[TaskId] = {summary_id}
    pending = list(children.get(summary_id, []))

    while pending:
        child = pending.pop(0)
        if child.id in seen:
            continue
        seen.add(child.id)

        if child.id in children:
            pending.extend(children[child.id])
            continue

        start, end = _task_dates(child, dates)
        if start is not None:
            starts.append(start)
            ends.append(end if end is not None else start)

    return ProjectBoundaries(
        start=min(starts) if starts else None,
        end=max(ends) if ends else None,
    )


def calculate_summary_date_ranges(
    tasks: Iterable[Task], dates: Mapping[TaskId, ScheduledDates] | None = None
) -> dict[TaskId, ProjectBoundaries]:
    """Date span for every summary task, keyed in input order."""
    task_list = list(tasks)
    summary_ids = {task.parent for task in task_list if task.parent is not None}
    return {
        task.id: calculate_summary_date_range(task.id, task_list, dates)
        for task in task_list
        if task.id in summary_ids
    }
