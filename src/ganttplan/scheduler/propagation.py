"""Forward date propagation through the dependency graph.

Tasks are visited in topological order. A task without scheduled
predecessors keeps its own dates (or is anchored at the project start); a
task with predecessors starts at the latest date any incoming link allows.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date, timedelta
from typing import TYPE_CHECKING

from ganttplan.boundaries import (
    ProjectBoundaries,
    enforce_project_end_boundary,
    enforce_project_start_boundary,
)
from ganttplan.calendar import (
    CONTINUOUS_CALENDAR,
    ONE_DAY,
    WorkCalendar,
    add_workdays,
    count_workdays,
    snap_to_workday,
)
from ganttplan.exceptions import TaskNotFoundError
from ganttplan.logger import checks_enabled, get_logger
from ganttplan.models import ConstraintType, LinkType, Task

from .config import ScheduleOptions
from .core import ConflictKind, ScheduleConflict, ScheduledDates, ScheduleResult
from .cycles import find_cycles
from .graph import DependencyGraph
from .validator import remove_invalid_links

if TYPE_CHECKING:
    from ganttplan.models import Link, TaskId

logger = get_logger()

ScheduleTaskCallback = Callable[["TaskId", date, date], None]


def task_duration(task: Task, calendar: WorkCalendar = CONTINUOUS_CALENDAR) -> int:
    """Working-day duration of a task.

    Uses the explicit duration, else the workdays within the task's own
    dates, else one day.
    """
    if task.duration is not None:
        return task.duration
    if task.start is not None and task.end is not None:
        return max(1, count_workdays(task.start, task.end, calendar))
    return 1


def end_from_start(start: date, duration: int, calendar: WorkCalendar) -> date:
    """Last day of a task that starts on ``start`` and spans ``duration`` workdays."""
    if duration <= 1:
        return start
    return add_workdays(start, duration - 1, calendar)


def start_from_end(end: date, duration: int, calendar: WorkCalendar) -> date:
    """First day of a task that ends on ``end`` and spans ``duration`` workdays."""
    if duration <= 1:
        return end
    return add_workdays(end, -(duration - 1), calendar)


def get_affected_successors(task_id: TaskId, links: Iterable[Link]) -> set[TaskId]:
    """Every task reachable from ``task_id`` through outgoing links.

    The starting task itself is never included, even when a cycle leads back to it.
    """
    link_list = list(links)
    endpoints = dict.fromkeys(
        [task_id, *(end for link in link_list for end in (link.source, link.target))]
    )
    graph = DependencyGraph([Task(id=end) for end in endpoints], link_list)
    return graph.reachable_from(task_id)


class ForwardScheduler:
    """Assigns dates to tasks in a given topological order.

    One instance serves a single run; its dictionaries are the only state
    the traversal touches.
    """

    def __init__(
        self,
        graph: DependencyGraph,
        calendar: WorkCalendar | None = None,
        options: ScheduleOptions | None = None,
        on_schedule_task: ScheduleTaskCallback | None = None,
    ):
        """Initialize the scheduler.

        Args:
            graph: Validated dependency graph
            calendar: Work calendar; None means every day is a workday
            options: Project window and calendar handling
            on_schedule_task: Called with (task_id, start, end) for each task
                whose dates are set or changed, in processing order
        """
        self.graph = graph
        self.calendar = calendar or CONTINUOUS_CALENDAR
        self.options = options or ScheduleOptions()
        self.window = ProjectBoundaries(self.options.project_start, self.options.project_end)
        self.on_schedule_task = on_schedule_task
        self.dates: dict[TaskId, tuple[date, date]] = {}
        self.results: dict[TaskId, ScheduledDates] = {}
        self.conflicts: list[ScheduleConflict] = []
        self.changed: list[TaskId] = []

    def keep_existing(self, task_ids: Iterable[TaskId]) -> None:
        """Carry stored dates through unchanged for tasks that are not recomputed."""
        for task_id in task_ids:
            task = self.graph.tasks[task_id]
            if task.start is not None and task.end is not None:
                self.dates[task_id] = (task.start, task.end)
                self.results[task_id] = ScheduledDates(task.start, task.end, changed=False)

    def run(self, order: Iterable[TaskId], anchors: Iterable[TaskId] = ()) -> None:
        """Schedule tasks in order.

        Args:
            order: Task IDs, predecessors before successors
            anchors: Tasks that keep their own dates even if they have predecessors
        """
        anchor_ids = set(anchors)
        for task_id in order:
            task = self.graph.tasks[task_id]
            duration = task_duration(task, self.calendar)

            if task_id in anchor_ids:
                dates = self._root_dates(task, duration)
                earliest = None
            else:
                dates, earliest = self._linked_dates(task, duration)

            if dates is None:
                logger.checks(f"Task {task_id!r} left unscheduled: no dates and no anchor")
                continue

            start, end = self._apply_constraints(task, dates[0], dates[1], duration, earliest)
            start, end = self._clamp_to_window(task, start, end, duration)
            self._record(task, start, end)

    def _snap(self, day: date) -> date:
        if self.options.respect_calendar:
            return snap_to_workday(day, self.calendar)
        return day

    def _root_dates(self, task: Task, duration: int) -> tuple[date, date] | None:
        """Dates for a task with nothing upstream: its own, else the project start."""
        project_start = self.window.start

        if task.start is not None:
            start = self._snap(task.start)
            # A stored end only stands while the start it was paired with does
            if task.end is not None and start == task.start:
                end = task.end
            else:
                end = end_from_start(start, duration, self.calendar)
        elif task.end is not None:
            end = task.end
            start = start_from_end(end, duration, self.calendar)
        elif project_start is not None:
            start = self._snap(project_start)
            end = end_from_start(start, duration, self.calendar)
        else:
            return None

        clamped = enforce_project_start_boundary(start, project_start)
        if clamped != start:
            start = self._snap(clamped)
            end = end_from_start(start, duration, self.calendar)
        return (start, end)

    def _start_bound(self, link: Link, source: tuple[date, date], duration: int) -> date:
        """Earliest start of the link's target allowed by this one link."""
        source_start, source_end = source
        lag = timedelta(days=link.lag)

        if link.type == LinkType.FINISH_TO_START:
            return source_end + ONE_DAY + lag
        if link.type == LinkType.START_TO_START:
            return source_start + lag

        # Finish-side links bound the target's end; convert through its duration
        if link.type == LinkType.FINISH_TO_FINISH:
            finish = source_end + lag
        else:
            finish = source_start - ONE_DAY + lag
        return start_from_end(self._snap(finish), duration, self.calendar)

    def _linked_dates(
        self, task: Task, duration: int
    ) -> tuple[tuple[date, date] | None, date | None]:
        """Dates driven by incoming links.

        Returns:
            Tuple of (dates, earliest start allowed by links). Falls back to
            root dates when no predecessor has dates.
        """
        bounds: list[date] = []
        for link in self.graph.incoming[task.id]:
            source = self.dates.get(link.source)
            if source is None:
                continue
            bound = self._start_bound(link, source, duration)
            if checks_enabled():
                logger.checks(f"  {link}: {task.id!r} may start {bound} or later")
            bounds.append(bound)

        if not bounds:
            return (self._root_dates(task, duration), None)

        earliest = enforce_project_start_boundary(max(bounds), self.window.start)
        start = self._snap(earliest)
        return ((start, end_from_start(start, duration, self.calendar)), earliest)

    def _apply_constraints(
        self, task: Task, start: date, end: date, duration: int, earliest: date | None
    ) -> tuple[date, date]:
        """Apply per-task date constraints on top of link-driven dates."""
        pinned = False
        for constraint in task.constraints:
            if constraint.type == ConstraintType.START_NO_EARLIER_THAN:
                if start < constraint.date:
                    start = self._snap(constraint.date)
                    end = end_from_start(start, duration, self.calendar)
            elif constraint.type == ConstraintType.FINISH_NO_EARLIER_THAN:
                if end < constraint.date:
                    end = constraint.date
                    start = start_from_end(end, duration, self.calendar)
            elif constraint.type == ConstraintType.MUST_START_ON:
                start = self._snap(constraint.date)
                end = end_from_start(start, duration, self.calendar)
                pinned = True
                if start != constraint.date:
                    self._conflict(
                        ConflictKind.CONSTRAINT_VIOLATION,
                        task.id,
                        f"Task {task.id!r} must start on {constraint.date}, which is not "
                        f"a workday; starting {start} instead",
                    )
            elif constraint.type == ConstraintType.MUST_FINISH_ON:
                end = constraint.date
                start = start_from_end(end, duration, self.calendar)
                pinned = True

        if pinned and earliest is not None and start < earliest:
            self._conflict(
                ConflictKind.CONSTRAINT_VIOLATION,
                task.id,
                f"Task {task.id!r} is pinned to start {start} but its predecessors "
                f"allow {earliest} at the earliest",
            )

        for constraint in task.constraints:
            if constraint.type == ConstraintType.START_NO_LATER_THAN and start > constraint.date:
                self._conflict(
                    ConflictKind.CONSTRAINT_VIOLATION,
                    task.id,
                    f"Task {task.id!r} must start by {constraint.date} but dependencies "
                    f"require {start}",
                )
            elif constraint.type == ConstraintType.FINISH_NO_LATER_THAN and end > constraint.date:
                self._conflict(
                    ConflictKind.CONSTRAINT_VIOLATION,
                    task.id,
                    f"Task {task.id!r} must finish by {constraint.date} but finishes {end}",
                )

        return (start, end)

    def _clamp_to_window(
        self, task: Task, start: date, end: date, duration: int
    ) -> tuple[date, date]:
        """Keep the task inside [project_start, project_end]."""
        clamped = enforce_project_start_boundary(start, self.window.start)
        if clamped != start:
            start = self._snap(clamped)
            end = end_from_start(start, duration, self.calendar)

        # start is already inside the window, so only the end can fall outside it
        if not self.window.contains(end):
            self._conflict(
                ConflictKind.INVALID_DATES,
                task.id,
                f"Task {task.id!r} would finish {end}, after the project end {self.window.end}",
            )
            end = enforce_project_end_boundary(end, self.window.end)
            start = enforce_project_start_boundary(
                start_from_end(end, duration, self.calendar), self.window.start
            )
            start = min(start, end)

        return (start, end)

    def _conflict(self, kind: ConflictKind, task_id: TaskId, message: str) -> None:
        logger.changes(message)
        self.conflicts.append(ScheduleConflict(kind=kind, task_ids=(task_id,), message=message))

    def _record(self, task: Task, start: date, end: date) -> None:
        changed = task.start != start or task.end != end
        self.dates[task.id] = (start, end)
        self.results[task.id] = ScheduledDates(start, end, changed=changed)
        if not changed:
            return

        self.changed.append(task.id)
        logger.changes(f"Task {task.id!r}: {task.start} - {task.end} -> {start} - {end}")
        if self.on_schedule_task is not None:
            self.on_schedule_task(task.id, start, end)

    def ordered_results(self) -> dict[TaskId, ScheduledDates]:
        """Results keyed in input task order."""
        return {
            task_id: self.results[task_id] for task_id in self.graph.tasks if task_id in self.results
        }


def _cycle_conflicts(
    graph: DependencyGraph, only: set[TaskId] | None = None
) -> list[ScheduleConflict]:
    conflicts: list[ScheduleConflict] = []
    for cycle in find_cycles(graph):
        if only is not None and not only.intersection(cycle):
            continue
        loop = " -> ".join(repr(task_id) for task_id in [*cycle, cycle[0]])
        message = f"Circular dependency: {loop}"
        logger.changes(message)
        conflicts.append(
            ScheduleConflict(
                kind=ConflictKind.CIRCULAR_DEPENDENCY, task_ids=tuple(cycle), message=message
            )
        )
    return conflicts


def schedule_tasks(
    tasks: Iterable[Task],
    links: Iterable[Link],
    calendar: WorkCalendar | None = None,
    on_schedule_task: ScheduleTaskCallback | None = None,
    options: ScheduleOptions | None = None,
) -> ScheduleResult:
    """Compute start/end dates for every schedulable task.

    Invalid links are filtered first. Tasks on a cycle are reported as
    ``circular_dependency`` conflicts and keep whatever dates they had;
    everything else is scheduled normally.

    Args:
        tasks: Tasks to schedule (never mutated)
        links: Dependency links
        calendar: Work calendar; None means plain calendar days
        on_schedule_task: Notified with (task_id, start, end) for each task
            whose dates were set or changed, in processing order
        options: Project window and calendar handling

    Returns:
        ScheduleResult; ``affected_task_ids`` holds the tasks whose dates changed
    """
    task_list = list(tasks)
    validation = remove_invalid_links(task_list, links)
    graph = DependencyGraph(task_list, validation.valid_links)

    conflicts = _cycle_conflicts(graph)
    cyclic = graph.cyclic_task_ids()

    scheduler = ForwardScheduler(graph, calendar, options, on_schedule_task)
    scheduler.keep_existing(task_id for task_id in graph if task_id in cyclic)
    scheduler.run(graph.topological_order(exclude=cyclic))

    return ScheduleResult(
        tasks=scheduler.ordered_results(),
        conflicts=conflicts + scheduler.conflicts,
        affected_task_ids=frozenset(scheduler.changed),
    )


def reschedule_from_task(  # noqa: PLR0913 - mirrors schedule_tasks plus the moved task
    task_id: TaskId,
    tasks: Iterable[Task],
    links: Iterable[Link],
    calendar: WorkCalendar | None = None,
    options: ScheduleOptions | None = None,
    on_schedule_task: ScheduleTaskCallback | None = None,
) -> ScheduleResult:
    """Recompute dates for a moved task and everything downstream of it.

    The moved task keeps its own stored dates and anchors the run. Tasks
    outside ``{task_id} | successors`` keep their stored dates untouched but
    still constrain the recomputed tasks through their links.

    Raises:
        TaskNotFoundError: If ``task_id`` is not among ``tasks``

    Returns:
        ScheduleResult covering all dated tasks; ``affected_task_ids`` holds
        the recomputed set
    """
    task_list = list(tasks)
    validation = remove_invalid_links(task_list, links)
    graph = DependencyGraph(task_list, validation.valid_links)

    if task_id not in graph:
        raise TaskNotFoundError(f"Cannot reschedule from unknown task {task_id!r}")

    cyclic = graph.cyclic_task_ids()
    downstream = {task_id} | graph.reachable_from(task_id)
    affected = downstream - cyclic
    conflicts = _cycle_conflicts(graph, only=downstream)

    scheduler = ForwardScheduler(graph, calendar, options, on_schedule_task)
    scheduler.keep_existing(t for t in graph if t not in affected)
    order = [t for t in graph.topological_order(exclude=cyclic) if t in affected]
    scheduler.run(order, anchors={task_id})

    return ScheduleResult(
        tasks=scheduler.ordered_results(),
        conflicts=conflicts + scheduler.conflicts,
        affected_task_ids=frozenset(affected),
    )
