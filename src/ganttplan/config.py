"""Configuration file loading (ganttplan_config.yaml).

The config file combines the work calendar with default scheduler options:

    calendar:
      workdays: [mon, tue, wed, thu, fri]
      holidays: [2024-12-25, 2025-01-01]
    scheduler:
      project_start: 2024-01-08
      critical_path:
        type: flexible
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .calendar import WorkCalendar
from .exceptions import CalendarError, ConfigError
from .schemas import CalendarSchema
from .scheduler import ScheduleOptions

CONFIG_FILENAME = "ganttplan_config.yaml"

_SECTIONS = {"calendar", "scheduler"}


class PlanConfig(BaseModel):
    """Complete configuration for scheduling a project."""

    calendar: CalendarSchema | None = None  # None = every day is a workday
    scheduler: ScheduleOptions = Field(default_factory=ScheduleOptions)

    def work_calendar(self) -> WorkCalendar | None:
        """The configured calendar, or None for plain calendar-day arithmetic."""
        if self.calendar is None:
            return None
        return self.calendar.to_calendar()


def load_config(config_path: Path | str) -> PlanConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to ganttplan_config.yaml

    Returns:
        PlanConfig with the calendar and scheduler defaults

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or fails validation
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {config_path}: {e}") from e

    if not data:
        raise ConfigError(f"Empty configuration file: {config_path}")
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the root level")

    unknown = sorted(set(data) - _SECTIONS)  # type: ignore[arg-type]
    if unknown:
        raise ConfigError(
            f"Unknown section(s) in {config_path}: {', '.join(unknown)}. "
            f"Valid sections: {', '.join(sorted(_SECTIONS))}"
        )

    try:
        config = PlanConfig.model_validate(data)
        # Build the calendar now so bad weekday sets fail at load time
        config.work_calendar()
    except (ValueError, CalendarError) as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    return config
