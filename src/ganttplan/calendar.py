"""Work calendar and workday arithmetic.

Weekday indices follow ``date.weekday()``: 0 = Monday ... 6 = Sunday.
Every function here is pure; "mutators" such as add_holiday() return a new
calendar and leave their argument untouched.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from .exceptions import CalendarError

DAYS_PER_WEEK = 7
ONE_DAY = timedelta(days=1)

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _default_workdays() -> frozenset[int]:
    return frozenset({0, 1, 2, 3, 4})


def _default_holidays() -> frozenset[date]:
    return frozenset()


@dataclass(frozen=True)
class WorkCalendar:
    """Which days count as working days.

    A day is a workday iff its weekday is in ``workdays`` and it is not
    listed in ``holidays``.
    """

    workdays: frozenset[int] = field(default_factory=_default_workdays)
    holidays: frozenset[date] = field(default_factory=_default_holidays)

    def __post_init__(self) -> None:
        bad = [d for d in self.workdays if not 0 <= d < DAYS_PER_WEEK]
        if bad:
            raise CalendarError(f"Weekday indices must be 0-6, got {sorted(bad)}")
        if not self.workdays:
            raise CalendarError("Calendar must have at least one working weekday")


DEFAULT_CALENDAR = WorkCalendar()

# Used when the caller supplies no calendar: every day is a working day
CONTINUOUS_CALENDAR = WorkCalendar(workdays=frozenset(range(DAYS_PER_WEEK)))


def parse_weekday(value: int | str) -> int:
    """Parse a weekday given as an index (0-6) or a name ("mon", "Tuesday")."""
    if isinstance(value, int):
        return value
    text = value.strip().lower()
    if text.isdigit():
        return int(text)
    for index, name in enumerate(WEEKDAY_NAMES):
        if len(text) >= 3 and name.startswith(text):
            return index
    raise CalendarError(f"Unknown weekday: {value!r}")


def create_calendar(
    workdays: Iterable[int | str] | None = None,
    holidays: Iterable[date] = (),
) -> WorkCalendar:
    """Build a calendar, defaulting to Monday-Friday with no holidays."""
    if workdays is None:
        return WorkCalendar(holidays=frozenset(holidays))
    return WorkCalendar(
        workdays=frozenset(parse_weekday(d) for d in workdays),
        holidays=frozenset(holidays),
    )


def is_holiday(day: date, calendar: WorkCalendar = DEFAULT_CALENDAR) -> bool:
    """Check whether a date is one of the calendar's holidays."""
    return day in calendar.holidays


def is_workday(day: date, calendar: WorkCalendar = DEFAULT_CALENDAR) -> bool:
    """Check whether work happens on a date."""
    return day.weekday() in calendar.workdays and day not in calendar.holidays


def get_workdays_in_range(
    start: date, end: date, calendar: WorkCalendar = DEFAULT_CALENDAR
) -> list[date]:
    """List the workdays in the inclusive range [start, end]."""
    result: list[date] = []
    current = start
    while current <= end:
        if is_workday(current, calendar):
            result.append(current)
        current += ONE_DAY
    return result


def count_workdays(start: date, end: date, calendar: WorkCalendar = DEFAULT_CALENDAR) -> int:
    """Count workdays in the inclusive range [start, end] (0 if end < start)."""
    if end < start:
        return 0

    # Whole weeks contribute a fixed count; only the remainder is walked
    total_days = (end - start).days + 1
    full_weeks, remainder = divmod(total_days, DAYS_PER_WEEK)
    count = full_weeks * len(calendar.workdays)
    tail_start = start + timedelta(days=full_weeks * DAYS_PER_WEEK)
    for offset in range(remainder):
        if (tail_start + timedelta(days=offset)).weekday() in calendar.workdays:
            count += 1

    for holiday in calendar.holidays:
        if start <= holiday <= end and holiday.weekday() in calendar.workdays:
            count -= 1
    return count


def get_next_workday(day: date, calendar: WorkCalendar = DEFAULT_CALENDAR) -> date:
    """Return the nearest workday strictly after ``day``."""
    result = day + ONE_DAY
    while not is_workday(result, calendar):
        result += ONE_DAY
    return result


def get_previous_workday(day: date, calendar: WorkCalendar = DEFAULT_CALENDAR) -> date:
    """Return the nearest workday strictly before ``day``."""
    result = day - ONE_DAY
    while not is_workday(result, calendar):
        result -= ONE_DAY
    return result


def snap_to_workday(day: date, calendar: WorkCalendar = DEFAULT_CALENDAR) -> date:
    """Return ``day`` if it is a workday, otherwise the next workday."""
    if is_workday(day, calendar):
        return day
    return get_next_workday(day, calendar)


def add_workdays(day: date, days: int, calendar: WorkCalendar = DEFAULT_CALENDAR) -> date:
    """Step ``days`` workdays forward (or backward when negative).

    Non-workdays are skipped entirely, so the result is always a workday.
    With ``days == 0`` a non-workday is snapped forward to the next workday.
    """
    if days == 0:
        return snap_to_workday(day, calendar)

    step = ONE_DAY if days > 0 else -ONE_DAY
    remaining = abs(days)
    result = day
    while remaining > 0:
        result += step
        if is_workday(result, calendar):
            remaining -= 1
    return result


def adjust_task_dates_to_workdays(
    start: date, duration: int, calendar: WorkCalendar = DEFAULT_CALENDAR
) -> tuple[date, date]:
    """Move ``start`` onto a workday and span ``duration`` workdays from it.

    Returns:
        Tuple of (start, end) where both are workdays
    """
    adjusted_start = snap_to_workday(start, calendar)
    if duration <= 1:
        return (adjusted_start, adjusted_start)
    return (adjusted_start, add_workdays(adjusted_start, duration - 1, calendar))


def get_holidays_for_year(year: int, calendar: WorkCalendar = DEFAULT_CALENDAR) -> list[date]:
    """List the calendar's holidays in a given year, in date order."""
    return sorted(h for h in calendar.holidays if h.year == year)


def add_holiday(calendar: WorkCalendar, day: date) -> WorkCalendar:
    """Return a calendar that also treats ``day`` as a holiday.

    Adding a date that is already a holiday returns the calendar unchanged.
    """
    if day in calendar.holidays:
        return calendar
    return dataclasses.replace(calendar, holidays=calendar.holidays | {day})


def remove_holiday(calendar: WorkCalendar, day: date) -> WorkCalendar:
    """Return a calendar without ``day`` among its holidays."""
    if day not in calendar.holidays:
        return calendar
    return dataclasses.replace(calendar, holidays=calendar.holidays - {day})
