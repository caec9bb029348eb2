"""ganttplan - dependency-driven project scheduling.

Computes task dates from finish/start links, lag and a work calendar, and
finds the critical path with classic forward/backward passes.
"""

from .calendar import (
    DEFAULT_CALENDAR,
    WorkCalendar,
    add_holiday,
    add_workdays,
    count_workdays,
    create_calendar,
    get_next_workday,
    get_previous_workday,
    is_workday,
    remove_holiday,
)
from .exceptions import (
    CalendarError,
    ConfigError,
    GanttplanError,
    ParseError,
    SplitTaskError,
    TaskNotFoundError,
    ValidationError,
)
from .models import ConstraintType, Link, LinkType, Project, Task, TaskConstraint, TaskId
from .scheduler import (
    ConflictKind,
    CriticalPathEntry,
    CriticalPathMode,
    ScheduleOptions,
    ScheduleResult,
    calculate_critical_path,
    detect_circular_dependencies,
    get_affected_successors,
    get_critical_task_ids,
    is_task_on_critical_path,
    remove_invalid_links,
    reschedule_from_task,
    schedule_tasks,
)

__all__ = [
    # Calendar
    "DEFAULT_CALENDAR",
    "WorkCalendar",
    "add_holiday",
    "add_workdays",
    "count_workdays",
    "create_calendar",
    "get_next_workday",
    "get_previous_workday",
    "is_workday",
    "remove_holiday",
    # Errors
    "CalendarError",
    "ConfigError",
    "GanttplanError",
    "ParseError",
    "SplitTaskError",
    "TaskNotFoundError",
    "ValidationError",
    # Models
    "ConstraintType",
    "Link",
    "LinkType",
    "Project",
    "Task",
    "TaskConstraint",
    "TaskId",
    # Scheduling
    "ConflictKind",
    "CriticalPathEntry",
    "CriticalPathMode",
    "ScheduleOptions",
    "ScheduleResult",
    "calculate_critical_path",
    "detect_circular_dependencies",
    "get_affected_successors",
    "get_critical_task_ids",
    "is_task_on_critical_path",
    "remove_invalid_links",
    "reschedule_from_task",
    "schedule_tasks",
]
