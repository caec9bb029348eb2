"""Tests for incremental rescheduling."""

from datetime import date

import pytest

from ganttplan.calendar import DEFAULT_CALENDAR
from ganttplan.exceptions import TaskNotFoundError
from ganttplan.scheduler import (
    ConflictKind,
    get_affected_successors,
    reschedule_from_task,
    schedule_tasks,
)
from tests.conftest import MONDAY, chain, day, link, task


class TestGetAffectedSuccessors:
    """Test forward reachability over raw links."""

    def test_chain(self) -> None:
        """Test that every transitive successor is returned."""
        assert get_affected_successors("1", chain("1", "2", "3")) == {"2", "3"}

    def test_unrelated_branch_excluded(self) -> None:
        """Test that tasks only reachable from elsewhere are not included."""
        links = [link("1", "2"), link("4", "5"), link("5", "2")]

        assert get_affected_successors("1", links) == {"2"}

    def test_start_never_included(self) -> None:
        """Test that a cycle leading back to the start does not add it."""
        assert get_affected_successors("a", chain("a", "b", "a")) == {"b"}

    def test_sink(self) -> None:
        """Test that a task with no successors affects nothing."""
        assert get_affected_successors("3", chain("1", "2", "3")) == set()

    def test_unlinked_task(self) -> None:
        """Test that a task missing from every link affects nothing."""
        assert get_affected_successors("9", chain("1", "2")) == set()
        assert get_affected_successors("9", []) == set()


class TestRescheduleFromTask:
    """Test recomputing only a moved task and its successors."""

    def test_chain_with_unrelated_task(self) -> None:
        """Test that the recomputed set is the moved task and its successors."""
        tasks = [
            task("1", start=day(7), end=day(8)),  # just moved a week later
            task("2", start=day(2), end=day(2), duration=1),
            task("3", start=day(3), end=day(4), duration=2),
            task("4", start=MONDAY, end=day(1)),
        ]

        result = reschedule_from_task("1", tasks, chain("1", "2", "3"))

        assert result.affected_task_ids == frozenset({"1", "2", "3"})
        assert "4" not in result.affected_task_ids
        assert (result.tasks["2"].start, result.tasks["2"].end) == (day(9), day(9))
        assert (result.tasks["3"].start, result.tasks["3"].end) == (day(10), day(11))
        assert (result.tasks["4"].start, result.tasks["4"].end) == (MONDAY, day(1))
        assert not result.tasks["4"].changed

    def test_moved_task_keeps_its_dates(self) -> None:
        """Test that the moved task anchors the run even when a predecessor disagrees."""
        tasks = [
            task("p", start=day(5), end=day(9)),
            task("m", start=MONDAY, end=MONDAY),
            task("s", duration=1),
        ]

        result = reschedule_from_task("m", tasks, [link("p", "m"), link("m", "s")])

        assert (result.tasks["m"].start, result.tasks["m"].end) == (MONDAY, MONDAY)
        assert result.tasks["s"].start == day(1)
        assert result.affected_task_ids == frozenset({"m", "s"})

    def test_outside_predecessor_still_constrains(self) -> None:
        """Test that a predecessor outside the affected set contributes its stored dates."""
        tasks = [
            task("1", start=MONDAY, end=MONDAY),
            task("2", duration=1),
            task("x", start=day(10), end=day(10)),
        ]
        links = [link("1", "2"), link("x", "2")]

        result = reschedule_from_task("1", tasks, links)

        assert result.tasks["2"].start == day(11)
        assert result.tasks["x"].start == day(10)
        assert "x" not in result.affected_task_ids

    def test_matches_full_run_downstream(self) -> None:
        """Test that a reschedule from a root agrees with a full schedule."""
        tasks = [task(1, start=MONDAY, end=day(1)), task(2, duration=3), task(3, duration=2)]
        links = [*chain(1, 2, 3), link(1, 3, "ss", lag=6)]

        full = schedule_tasks(tasks, links, DEFAULT_CALENDAR)
        partial = reschedule_from_task(1, tasks, links, DEFAULT_CALENDAR)

        assert {k: (v.start, v.end) for k, v in partial.tasks.items()} == {
            k: (v.start, v.end) for k, v in full.tasks.items()
        }

    def test_callback_only_for_recomputed_tasks(self) -> None:
        """Test that unaffected tasks are never reported."""
        calls: list[object] = []
        tasks = [
            task("a", start=MONDAY, end=MONDAY),
            task("b", duration=1),
            task("z", start=MONDAY, end=MONDAY),
            task("y", duration=1),
        ]
        links = [link("a", "b"), link("z", "y")]

        reschedule_from_task(
            "a",
            tasks,
            links,
            on_schedule_task=lambda task_id, start, end: calls.append(task_id),
        )

        assert calls == ["b"]

    def test_cycle_downstream_reported(self) -> None:
        """Test that a cycle among the successors is reported and skipped."""
        tasks = [
            task("a", start=MONDAY, end=MONDAY),
            task("b", duration=1),
            task("c", duration=1),
        ]
        links = [link("a", "b"), link("b", "c"), link("c", "b")]

        result = reschedule_from_task("a", tasks, links)

        assert result.has_conflicts(ConflictKind.CIRCULAR_DEPENDENCY)
        assert result.affected_task_ids == frozenset({"a"})

    def test_unknown_task(self) -> None:
        """Test that rescheduling from a missing task raises."""
        with pytest.raises(TaskNotFoundError, match="'nope'"):
            reschedule_from_task("nope", [task("a", start=date(2024, 1, 1))], [])
