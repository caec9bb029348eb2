"""Scheduler package - dependency-driven date propagation and critical path analysis.

Main entry points:
- schedule_tasks: Forward-propagate dates through the whole dependency graph
- reschedule_from_task: Recompute only a moved task and its successors
- calculate_critical_path: CPM forward/backward passes, slack and critical set

Graph integrity:
- remove_invalid_links: Drop self-loops, dangling and hierarchy links
- detect_circular_dependencies: Find every cycle in the graph

Configuration:
- ScheduleOptions: Project window, calendar handling, critical path mode
"""

# Configuration
from .config import CriticalPathConfig, CriticalPathMode, ScheduleOptions

# Core dataclasses
from .core import (
    ConflictKind,
    CriticalPathEntry,
    ScheduleConflict,
    ScheduledDates,
    ScheduleResult,
)

# Critical path
from .critical_path import (
    CriticalPathAnalyzer,
    calculate_critical_path,
    get_critical_task_ids,
    is_task_on_critical_path,
)

# Graph integrity
from .cycles import detect_circular_dependencies, find_cycles
from .graph import DependencyGraph

# Forward propagation
from .propagation import (
    ForwardScheduler,
    ScheduleTaskCallback,
    get_affected_successors,
    reschedule_from_task,
    schedule_tasks,
    task_duration,
)
from .validator import LinkValidationResult, remove_invalid_links

__all__ = [
    # Configuration
    "CriticalPathConfig",
    "CriticalPathMode",
    "ScheduleOptions",
    # Core
    "ConflictKind",
    "CriticalPathEntry",
    "ScheduleConflict",
    "ScheduledDates",
    "ScheduleResult",
    # Graph
    "DependencyGraph",
    "LinkValidationResult",
    "remove_invalid_links",
    "detect_circular_dependencies",
    "find_cycles",
    # Scheduling
    "ForwardScheduler",
    "ScheduleTaskCallback",
    "schedule_tasks",
    "reschedule_from_task",
    "get_affected_successors",
    "task_duration",
    # Critical path
    "CriticalPathAnalyzer",
    "calculate_critical_path",
    "get_critical_task_ids",
    "is_task_on_critical_path",
]
