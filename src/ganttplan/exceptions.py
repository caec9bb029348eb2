"""Custom exceptions for ganttplan."""


class GanttplanError(Exception):
    """Base exception for all ganttplan errors."""

    pass


class ValidationError(GanttplanError):
    """Raised when task or link data is malformed."""

    pass


class CalendarError(ValidationError):
    """Raised when a work calendar cannot be used for date arithmetic."""

    pass


class SplitTaskError(GanttplanError):
    """Raised when a split-task operation is applied to an unsuitable task."""

    pass


class TaskNotFoundError(GanttplanError):
    """Raised when a referenced task ID does not exist."""

    pass


class ParseError(GanttplanError):
    """Raised when YAML parsing fails."""

    pass


class ConfigError(GanttplanError):
    """Raised when a configuration file is missing or invalid."""

    pass
