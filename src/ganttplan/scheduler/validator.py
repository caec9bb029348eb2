"""Structural link validation run before any graph traversal."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ganttplan.logger import get_logger

if TYPE_CHECKING:
    from ganttplan.models import Link, Task, TaskId

logger = get_logger()


def _default_links() -> list[Link]:
    return []


@dataclass
class LinkValidationResult:
    """Links split into those safe to schedule and those filtered out."""

    valid_links: list[Link] = field(default_factory=_default_links)
    removed_links: list[Link] = field(default_factory=_default_links)


def _ancestors(task_id: TaskId, parents: dict[TaskId, TaskId]) -> set[TaskId]:
    """Collect every summary task above ``task_id`` in the hierarchy."""
    result: set[TaskId] = set()
    current = parents.get(task_id)
    while current is not None and current not in result:
        result.add(current)
        current = parents.get(current)
    return result


def link_removal_reason(
    link: Link, task_ids: set[TaskId], parents: dict[TaskId, TaskId]
) -> str | None:
    """Explain why a link cannot be scheduled, or return None if it is valid."""
    if link.source == link.target:
        return "self-referential"
    if link.source not in task_ids:
        return f"unknown source task {link.source!r}"
    if link.target not in task_ids:
        return f"unknown target task {link.target!r}"
    # Hierarchy is not a dependency: summary dates already span their children
    if link.source in _ancestors(link.target, parents):
        return "summary task linked to its own child"
    if link.target in _ancestors(link.source, parents):
        return "child task linked to its own summary"
    return None


def remove_invalid_links(tasks: Iterable[Task], links: Iterable[Link]) -> LinkValidationResult:
    """Filter out links the scheduler must never see.

    A link is removed (never raised as an error) when it is self-referential,
    references a task that does not exist, or connects a task with one of its
    own ancestors/descendants in the summary hierarchy.

    Returns:
        LinkValidationResult with valid and removed links, each in input order
    """
    task_list = list(tasks)
    task_ids = {task.id for task in task_list}
    parents = {task.id: task.parent for task in task_list if task.parent is not None}

    result = LinkValidationResult()
    for link in links:
        reason = link_removal_reason(link, task_ids, parents)
        if reason is None:
            result.valid_links.append(link)
        else:
            logger.changes(f"Removed link {link}: {reason}")
            result.removed_links.append(link)

    return result
