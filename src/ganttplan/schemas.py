"""Pydantic schemas for project and config YAML data."""

from __future__ import annotations

import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .calendar import WorkCalendar, create_calendar, parse_weekday
from .exceptions import CalendarError
from .models import ConstraintType, LinkType


class ConstraintSchema(BaseModel):
    """Schema for a single task date constraint."""

    type: ConstraintType
    date: datetime.date

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        """Accept underscores and any case, e.g. MUST_START_ON."""
        if isinstance(v, str):
            return v.strip().lower().replace("_", "-")
        return v


class TaskSchema(BaseModel):
    """Schema for a task entry in a project file."""

    id: int | str
    name: str = ""
    start: datetime.date | None = None
    end: datetime.date | None = None
    duration: int | None = Field(default=None, ge=0)
    parent: int | str | None = None
    constraints: list[ConstraintSchema] = Field(default_factory=list[ConstraintSchema])

    @model_validator(mode="after")
    def check_date_order(self) -> TaskSchema:
        """Ensure the end is not before the start."""
        if self.start is not None and self.end is not None and self.end < self.start:
            raise ValueError(f"Task {self.id!r}: end {self.end} is before start {self.start}")
        return self


class LinkSchema(BaseModel):
    """Schema for a dependency link entry in a project file."""

    source: int | str
    target: int | str
    type: LinkType = LinkType.FINISH_TO_START
    lag: int = 0
    id: int | str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v: Any) -> LinkType:
        """Accept native codes (e2s), shorthand (fs) and long names."""
        if v is None:
            return LinkType.FINISH_TO_START
        return LinkType.parse(v)


class ProjectSchema(BaseModel):
    """Schema for the entire project YAML file."""

    tasks: list[TaskSchema] = Field(default_factory=list[TaskSchema])
    links: list[LinkSchema] = Field(default_factory=list[LinkSchema])

    @model_validator(mode="after")
    def check_unique_ids(self) -> ProjectSchema:
        """Ensure task IDs are unique."""
        seen: set[int | str] = set()
        duplicates: list[int | str] = []
        for task in self.tasks:
            if task.id in seen:
                duplicates.append(task.id)
            seen.add(task.id)
        if duplicates:
            raise ValueError(f"Duplicate task IDs: {', '.join(repr(d) for d in duplicates)}")
        return self


class CalendarSchema(BaseModel):
    """Schema for the ``calendar`` section of the config file."""

    workdays: list[int] | None = None  # Indices 0-6 or day names; None = Monday-Friday
    holidays: list[datetime.date] = Field(default_factory=list[datetime.date])

    @field_validator("workdays", mode="before")
    @classmethod
    def parse_workdays(cls, v: Any) -> list[int] | None:
        """Convert day names ("mon", "Tuesday") to weekday indices."""
        if v is None:
            return None
        if not isinstance(v, list):
            v = [v]
        try:
            return [parse_weekday(day) for day in v]  # type: ignore[misc]
        except CalendarError as e:
            raise ValueError(str(e)) from e

    def to_calendar(self) -> WorkCalendar:
        """Build the WorkCalendar this section describes."""
        return create_calendar(self.workdays, self.holidays)
