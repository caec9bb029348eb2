"""Adjacency index over a task/link network."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ganttplan.models import Link, Task, TaskId


class DependencyGraph:
    """Incoming/outgoing link lists keyed by task ID.

    Built once per call so traversals never rescan the full link list.
    Links whose endpoints are not among ``tasks`` are ignored; run
    remove_invalid_links() first to find out which ones those are.
    Task and link input order is preserved everywhere, which keeps every
    traversal deterministic.
    """

    def __init__(self, tasks: Iterable[Task], links: Iterable[Link]):
        self.tasks: dict[TaskId, Task] = {task.id: task for task in tasks}
        self.links: list[Link] = []
        self.outgoing: dict[TaskId, list[Link]] = {task_id: [] for task_id in self.tasks}
        self.incoming: dict[TaskId, list[Link]] = {task_id: [] for task_id in self.tasks}

        for link in links:
            if link.source not in self.tasks or link.target not in self.tasks:
                continue
            self.links.append(link)
            self.outgoing[link.source].append(link)
            self.incoming[link.target].append(link)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.tasks

    def __iter__(self) -> Iterator[TaskId]:
        return iter(self.tasks)

    def __len__(self) -> int:
        return len(self.tasks)

    def successors(self, task_id: TaskId) -> list[TaskId]:
        """Targets of the task's outgoing links, in link order."""
        return [link.target for link in self.outgoing.get(task_id, [])]

    def predecessors(self, task_id: TaskId) -> list[TaskId]:
        """Sources of the task's incoming links, in link order."""
        return [link.source for link in self.incoming.get(task_id, [])]

    def reachable_from(self, task_id: TaskId) -> set[TaskId]:
        """All tasks reachable through outgoing links, excluding ``task_id`` itself."""
        reached: set[TaskId] = set()
        queue: deque[TaskId] = deque([task_id])

        while queue:
            current = queue.popleft()
            for succ in self.successors(current):
                if succ not in reached and succ != task_id:
                    reached.add(succ)
                    queue.append(succ)

        return reached

    def topological_order(self, exclude: Iterable[TaskId] = ()) -> list[TaskId]:
        """Order tasks so every predecessor precedes its successors (Kahn's algorithm).

        Args:
            exclude: Tasks to leave out; links touching them are ignored

        Returns:
            Task IDs in topological order. Tasks on a cycle that was not
            excluded never reach in-degree zero and are omitted.
        """
        excluded = set(exclude)
        in_degree = {task_id: 0 for task_id in self.tasks if task_id not in excluded}
        for link in self.links:
            if link.source in in_degree and link.target in in_degree:
                in_degree[link.target] += 1

        queue: deque[TaskId] = deque(
            task_id for task_id, degree in in_degree.items() if degree == 0
        )
        result: list[TaskId] = []

        while queue:
            task_id = queue.popleft()
            result.append(task_id)

            for link in self.outgoing[task_id]:
                if link.target not in in_degree:
                    continue
                in_degree[link.target] -= 1
                if in_degree[link.target] == 0:
                    queue.append(link.target)

        return result

    def strongly_connected_components(self) -> list[list[TaskId]]:
        """Group tasks into strongly connected components (iterative Tarjan).

        Returns:
            Components in reverse topological order of the condensed graph
        """
        index_of: dict[TaskId, int] = {}
        lowlink: dict[TaskId, int] = {}
        stack: list[TaskId] = []
        on_stack: set[TaskId] = set()
        components: list[list[TaskId]] = []
        counter = 0

        for root in self.tasks:
            if root in index_of:
                continue

            index_of[root] = lowlink[root] = counter
            counter += 1
            stack.append(root)
            on_stack.add(root)
            work: list[tuple[TaskId, Iterator[TaskId]]] = [(root, iter(self.successors(root)))]

            while work:
                node, children = work[-1]
                descended = False
                for child in children:
                    if child not in index_of:
                        index_of[child] = lowlink[child] = counter
                        counter += 1
                        stack.append(child)
                        on_stack.add(child)
                        work.append((child, iter(self.successors(child))))
                        descended = True
                        break
                    if child in on_stack:
                        lowlink[node] = min(lowlink[node], index_of[child])
                if descended:
                    continue

                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])

                if lowlink[node] == index_of[node]:
                    component: list[TaskId] = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.append(member)
                        if member == node:
                            break
                    components.append(component)

        return components

    def cyclic_task_ids(self) -> set[TaskId]:
        """Every task that lies on at least one cycle."""
        cyclic: set[TaskId] = set()
        for component in self.strongly_connected_components():
            if len(component) > 1:
                cyclic.update(component)
        for link in self.links:
            if link.source == link.target:
                cyclic.add(link.source)
        return cyclic
