"""Critical path method: forward/backward passes, slack, and the critical set."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import TYPE_CHECKING

from ganttplan.boundaries import derive_boundaries_from_tasks
from ganttplan.logger import debug_enabled, get_logger
from ganttplan.models import LinkType

from .config import CriticalPathMode, ScheduleOptions
from .core import CriticalPathEntry
from .graph import DependencyGraph
from .propagation import task_duration
from .validator import remove_invalid_links

if TYPE_CHECKING:
    from ganttplan.models import Link, Task, TaskId

logger = get_logger()


def _span(duration: int) -> timedelta:
    """Distance from first to last day of a task (milestones have none)."""
    return timedelta(days=max(duration - 1, 0))


class CriticalPathAnalyzer:
    """Computes early/late dates and slack over an acyclic dependency graph.

    Dates are whole calendar days with inclusive ends, so a task starting
    on day ``s`` with duration ``d`` finishes on ``s + d - 1``. Link bounds
    use the same semantics as forward scheduling:

    - finish-to-start: ``succ.start >= pred.end + 1 + lag``
    - start-to-start: ``succ.start >= pred.start + lag``
    - finish-to-finish: ``succ.end >= pred.end + lag``
    - start-to-finish: ``succ.end >= pred.start - 1 + lag``
    """

    def __init__(self, graph: DependencyGraph, options: ScheduleOptions | None = None):
        """Initialize the analyzer.

        Args:
            graph: Validated dependency graph
            options: Project boundaries and critical path mode
        """
        self.graph = graph
        self.options = options or ScheduleOptions()
        self.cyclic = graph.cyclic_task_ids()
        self.order = graph.topological_order(exclude=self.cyclic)
        self.derived_start = derive_boundaries_from_tasks(graph.tasks.values()).start
        self.durations = {task_id: task_duration(graph.tasks[task_id]) for task_id in graph}
        self.early_start: dict[TaskId, date] = {}
        self.early_finish: dict[TaskId, date] = {}
        self.late_start: dict[TaskId, date] = {}
        self.late_finish: dict[TaskId, date] = {}

    def _active_links(self, links: list[Link]) -> list[Link]:
        return [
            link
            for link in links
            if link.source not in self.cyclic and link.target not in self.cyclic
        ]

    def _root_start(self, task: Task) -> date | None:
        """Anchor for a task with nothing upstream."""
        project_start = self.options.project_start
        candidates = [d for d in (project_start, task.start) if d is not None]
        if candidates:
            return max(candidates)
        return self.derived_start

    def _early_start_bound(self, link: Link) -> date | None:
        """Earliest start of the link's target allowed by this link alone."""
        if link.source not in self.early_start:
            return None
        pred_start = self.early_start[link.source]
        pred_finish = self.early_finish[link.source]
        lag = timedelta(days=link.lag)
        span = _span(self.durations[link.target])

        if link.type == LinkType.FINISH_TO_START:
            return pred_finish + timedelta(days=1) + lag
        if link.type == LinkType.START_TO_START:
            return pred_start + lag
        if link.type == LinkType.FINISH_TO_FINISH:
            return pred_finish + lag - span
        return pred_start - timedelta(days=1) + lag - span

    def _late_finish_bound(self, link: Link) -> date | None:
        """Latest finish of the link's source allowed by this link alone."""
        if link.target not in self.late_start:
            return None
        succ_start = self.late_start[link.target]
        succ_finish = self.late_finish[link.target]
        lag = timedelta(days=link.lag)
        span = _span(self.durations[link.source])

        if link.type == LinkType.FINISH_TO_START:
            return succ_start - timedelta(days=1) - lag
        if link.type == LinkType.START_TO_START:
            return succ_start - lag + span
        if link.type == LinkType.FINISH_TO_FINISH:
            return succ_finish - lag
        return succ_finish + timedelta(days=1) - lag + span

    def forward_pass(self) -> None:
        """Compute early start/finish in topological order."""
        project_start = self.options.project_start

        for task_id in self.order:
            bounds = [
                bound
                for link in self._active_links(self.graph.incoming[task_id])
                if (bound := self._early_start_bound(link)) is not None
            ]
            if bounds:
                start = max(bounds)
                if project_start is not None and start < project_start:
                    start = project_start
            else:
                start = self._root_start(self.graph.tasks[task_id])
                if start is None:
                    continue

            self.early_start[task_id] = start
            self.early_finish[task_id] = start + _span(self.durations[task_id])
            if debug_enabled():
                logger.debug(f"  ES/EF {task_id!r}: {start} / {self.early_finish[task_id]}")

    def backward_pass(self) -> None:
        """Compute late start/finish in reverse topological order."""
        if not self.early_finish:
            return

        project_finish = max(self.early_finish.values())
        if self.options.project_end is not None:
            project_finish = max(project_finish, self.options.project_end)

        for task_id in reversed(self.order):
            if task_id not in self.early_start:
                continue

            bounds = [
                bound
                for link in self._active_links(self.graph.outgoing[task_id])
                if (bound := self._late_finish_bound(link)) is not None
            ]
            finish = min([*bounds, project_finish])

            self.late_finish[task_id] = finish
            self.late_start[task_id] = finish - _span(self.durations[task_id])
            if debug_enabled():
                logger.debug(f"  LS/LF {task_id!r}: {self.late_start[task_id]} / {finish}")

    def slack(self, task_id: TaskId) -> int:
        if task_id not in self.late_start:
            return 0
        return (self.late_start[task_id] - self.early_start[task_id]).days

    def _is_driving(self, link: Link) -> bool:
        """True if this link alone determines the target's early start."""
        return self._early_start_bound(link) == self.early_start.get(link.target)

    def flexible_chain(self) -> list[TaskId]:
        """Select a single critical chain by greedy forward walk.

        Starts at the first zero-slack root in input order, then repeatedly
        follows driving links into zero-slack successors, preferring the
        smallest slack and then the earliest link.
        """
        zero_slack = {
            task_id for task_id in self.early_start if self.slack(task_id) == 0
        }
        roots = [
            task_id
            for task_id in self.graph
            if task_id in zero_slack
            and not any(
                link.source in self.early_start
                for link in self._active_links(self.graph.incoming[task_id])
            )
        ]
        if not roots:
            return []

        chain = [roots[0]]
        visited = {roots[0]}
        while True:
            candidates = [
                (self.slack(link.target), index, link.target)
                for index, link in enumerate(self._active_links(self.graph.outgoing[chain[-1]]))
                if link.target in zero_slack
                and link.target not in visited
                and self._is_driving(link)
            ]
            if not candidates:
                break
            _, _, next_id = min(candidates, key=lambda c: (c[0], c[1]))
            chain.append(next_id)
            visited.add(next_id)

        return chain

    def analyze(self) -> list[CriticalPathEntry]:
        """Run both passes and build one entry per task, in input order."""
        self.forward_pass()
        self.backward_pass()

        mode = self.options.critical_path.type
        critical: set[TaskId]
        if mode == CriticalPathMode.FLEXIBLE:
            critical = set(self.flexible_chain())
        else:
            critical = {
                task_id
                for task_id in self.graph
                if task_id not in self.cyclic and self.slack(task_id) == 0
            }
        logger.checks(f"Critical path ({mode.value}): {len(critical)} of {len(self.graph)} tasks")

        return [
            CriticalPathEntry(
                task_id=task_id,
                early_start=self.early_start.get(task_id),
                early_finish=self.early_finish.get(task_id),
                late_start=self.late_start.get(task_id),
                late_finish=self.late_finish.get(task_id),
                slack=self.slack(task_id),
                is_critical=task_id in critical,
            )
            for task_id in self.graph
        ]


def calculate_critical_path(
    tasks: Iterable[Task], links: Iterable[Link], options: ScheduleOptions | None = None
) -> list[CriticalPathEntry]:
    """Annotate every task with early/late dates, slack and criticality.

    Invalid links are filtered first and tasks on cycles are left out of
    both passes (their entries carry None dates and are never critical).
    A task that cannot be anchored to any date gets slack 0 and is
    critical in strict mode.

    Args:
        tasks: Tasks to analyze
        links: Dependency links
        options: ``project_start``/``project_end`` bound the passes;
            ``critical_path.type`` selects strict or flexible marking

    Returns:
        One CriticalPathEntry per task, in input order
    """
    task_list = list(tasks)
    validation = remove_invalid_links(task_list, links)
    graph = DependencyGraph(task_list, validation.valid_links)
    return CriticalPathAnalyzer(graph, options).analyze()


def get_critical_task_ids(entries: Iterable[CriticalPathEntry]) -> list[TaskId]:
    """IDs of critical tasks, in entry order."""
    return [entry.task_id for entry in entries if entry.is_critical]


def is_task_on_critical_path(task_id: TaskId, entries: Iterable[CriticalPathEntry]) -> bool:
    return any(entry.task_id == task_id and entry.is_critical for entry in entries)
