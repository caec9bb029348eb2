"""Circular dependency detection."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from ganttplan.logger import debug_enabled, get_logger

from .graph import DependencyGraph

if TYPE_CHECKING:
    from ganttplan.models import Link, Task, TaskId

logger = get_logger()


def find_cycles(graph: DependencyGraph) -> list[list[TaskId]]:
    """Find cycles with a depth-first traversal over an indexed graph.

    Each back-edge (an edge to a task currently on the traversal stack)
    yields one cycle: the stack slice from that task to the current one.
    Diamonds and other shared-ancestor shapes produce no back-edges.
    """
    cycles: list[list[TaskId]] = []
    finished: set[TaskId] = set()

    for root in graph:
        if root in finished:
            continue

        path: list[TaskId] = [root]
        position: dict[TaskId, int] = {root: 0}
        work: list[Iterator[TaskId]] = [iter(graph.successors(root))]

        while work:
            descended = False
            for succ in work[-1]:
                if succ in position:
                    cycle = path[position[succ] :]
                    if debug_enabled():
                        logger.debug(f"Back-edge {path[-1]!r} -> {succ!r} closes {cycle}")
                    cycles.append(cycle)
                elif succ not in finished:
                    position[succ] = len(path)
                    path.append(succ)
                    work.append(iter(graph.successors(succ)))
                    descended = True
                    break
            if descended:
                continue

            work.pop()
            done = path.pop()
            del position[done]
            finished.add(done)

    return cycles


def detect_circular_dependencies(tasks: Iterable[Task], links: Iterable[Link]) -> list[list[TaskId]]:
    """Find all cycles in the dependency graph.

    Args:
        tasks: Tasks in the network
        links: Dependency links; links to unknown tasks are ignored

    Returns:
        One ordered list of task IDs per cycle found; empty for an acyclic graph
    """
    return find_cycles(DependencyGraph(tasks, links))
