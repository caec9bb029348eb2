"""Tests for critical path analysis."""

from ganttplan.models import Link, LinkType, Task
from ganttplan.scheduler import (
    CriticalPathConfig,
    CriticalPathEntry,
    CriticalPathMode,
    ScheduleOptions,
    calculate_critical_path,
    get_critical_task_ids,
    is_task_on_critical_path,
)
from tests.conftest import MONDAY, day, link, task

STRICT = ScheduleOptions()
FLEXIBLE = ScheduleOptions(critical_path=CriticalPathConfig(type=CriticalPathMode.FLEXIBLE))


def _by_id(entries: list[CriticalPathEntry]) -> dict[object, CriticalPathEntry]:
    return {entry.task_id: entry for entry in entries}


def _diamond(b_duration: int, c_duration: int) -> tuple[list[Task], list[Link]]:
    tasks = [
        task("a", start=MONDAY, duration=1),
        task("b", duration=b_duration),
        task("c", duration=c_duration),
        task("d", duration=1),
    ]
    links = [link("a", "b"), link("a", "c"), link("b", "d"), link("c", "d")]
    return tasks, links


class TestPasses:
    """Test forward/backward pass values."""

    def test_diamond_dates_and_slack(self) -> None:
        """Test early/late dates on a diamond with one long branch."""
        tasks, links = _diamond(8, 1)

        entries = _by_id(calculate_critical_path(tasks, links))

        assert (entries["a"].early_start, entries["a"].early_finish) == (MONDAY, MONDAY)
        assert (entries["b"].early_start, entries["b"].early_finish) == (day(1), day(8))
        assert (entries["d"].early_start, entries["d"].late_finish) == (day(9), day(9))
        assert (entries["c"].late_start, entries["c"].late_finish) == (day(8), day(8))
        assert [entries[t].slack for t in "abcd"] == [0, 0, 7, 0]

    def test_entries_in_input_order(self) -> None:
        """Test that one entry is returned per task, in input order."""
        tasks, links = _diamond(2, 2)
        entries = calculate_critical_path(list(reversed(tasks)), links)

        assert [e.task_id for e in entries] == ["d", "c", "b", "a"]

    def test_project_start_clamps_early_start(self) -> None:
        """Test that a project start after a task's own start becomes its early start."""
        options = ScheduleOptions(project_start=day(3))

        entries = _by_id(calculate_critical_path([task("a", start=MONDAY, duration=2)], [], options))

        assert entries["a"].early_start == day(3)
        assert entries["a"].early_finish == day(4)

    def test_project_end_adds_slack(self) -> None:
        """Test that a later project end gives every task the same extra slack."""
        tasks, links = _diamond(8, 1)
        options = ScheduleOptions(project_end=day(20))

        entries = _by_id(calculate_critical_path(tasks, links, options))

        assert entries["d"].late_finish == day(20)
        assert [entries[t].slack for t in "abcd"] == [11, 11, 18, 11]
        assert get_critical_task_ids(entries.values()) == []

    def test_project_end_before_finish_ignored(self) -> None:
        """Test that a project end the network cannot meet never produces negative slack."""
        tasks, links = _diamond(8, 1)
        options = ScheduleOptions(project_end=day(3))

        entries = calculate_critical_path(tasks, links, options)

        assert all(e.slack >= 0 for e in entries)
        assert get_critical_task_ids(entries) == ["a", "b", "d"]

    def test_undated_root_uses_derived_project_start(self) -> None:
        """Test that a root without a start is anchored at the earliest known start."""
        tasks = [task("x", duration=2), task("y", start=day(2), duration=1)]

        entries = _by_id(calculate_critical_path(tasks, []))

        assert entries["x"].early_start == day(2)

    def test_lagged_link_types(self) -> None:
        """Test early starts through start-to-start and finish-to-finish links with lag."""
        tasks = [task("a", start=MONDAY, duration=5), task("b", duration=2), task("c", duration=3)]
        links = [
            link("a", "b", LinkType.START_TO_START, lag=1),
            link("a", "c", LinkType.FINISH_TO_FINISH, lag=2),
        ]

        entries = _by_id(calculate_critical_path(tasks, links))

        assert entries["b"].early_start == day(1)
        assert (entries["c"].early_start, entries["c"].early_finish) == (day(4), day(6))
        assert entries["c"].slack == 0
        assert entries["b"].slack == 4


class TestModes:
    """Test strict and flexible critical path marking."""

    def test_long_branch_critical_in_both_modes(self) -> None:
        """Test that the dominant branch is critical whichever mode is used."""
        tasks, links = _diamond(8, 1)

        for options in (STRICT, FLEXIBLE):
            entries = calculate_critical_path(tasks, links, options)
            assert get_critical_task_ids(entries) == ["a", "b", "d"]
            assert not is_task_on_critical_path("c", entries)

    def test_equal_branches_strict_marks_both(self) -> None:
        """Test that strict mode marks every zero-slack task."""
        tasks, links = _diamond(3, 3)

        entries = calculate_critical_path(tasks, links, STRICT)

        assert get_critical_task_ids(entries) == ["a", "b", "c", "d"]

    def test_equal_branches_flexible_marks_one_chain(self) -> None:
        """Test that flexible mode follows the first link at a tie."""
        tasks, links = _diamond(3, 3)

        entries = calculate_critical_path(tasks, links, FLEXIBLE)

        assert get_critical_task_ids(entries) == ["a", "b", "d"]
        assert all(e.slack == 0 for e in entries)

    def test_flexible_tie_break_follows_link_order(self) -> None:
        """Test that swapping link order swaps the chosen branch."""
        tasks, _ = _diamond(3, 3)
        links = [link("a", "c"), link("a", "b"), link("b", "d"), link("c", "d")]

        entries = calculate_critical_path(tasks, links, FLEXIBLE)

        assert get_critical_task_ids(entries) == ["a", "c", "d"]

    def test_flexible_skips_non_driving_link(self) -> None:
        """Test that the chain only follows links that actually set the next start."""
        tasks = [
            task("a", start=MONDAY, duration=1),
            task("b", duration=2),
            task("c", duration=1),
        ]
        # a -> c is listed first and c has zero slack, but c waits on b, not on a
        links = [link("a", "c"), link("a", "b"), link("b", "c")]

        entries = calculate_critical_path(tasks, links, FLEXIBLE)

        assert get_critical_task_ids(entries) == ["a", "b", "c"]

    def test_strict_slack_zero_iff_critical(self) -> None:
        """Test slack non-negativity and the strict-mode criticality rule."""
        tasks = [
            task(1, start=MONDAY, duration=3),
            task(2, duration=2),
            task(3, duration=4),
            task(4, duration=1),
            task(5, duration=6),
        ]
        links = [
            link(1, 2, "ss", lag=1),
            link(1, 3),
            link(2, 4, "ff", lag=-1),
            link(3, 4),
            link(1, 5, "sf", lag=5),
        ]

        entries = calculate_critical_path(tasks, links, STRICT)

        for entry in entries:
            assert entry.slack >= 0
            assert entry.is_critical == (entry.slack == 0)


class TestDegenerateInput:
    """Test best-effort results for inputs that cannot be fully analyzed."""

    def test_isolated_undated_task(self) -> None:
        """Test that a task with no anchor at all is trivially critical."""
        entries = calculate_critical_path([task("solo")], [])

        assert entries == [
            CriticalPathEntry(
                task_id="solo",
                early_start=None,
                early_finish=None,
                late_start=None,
                late_finish=None,
                slack=0,
                is_critical=True,
            )
        ]

    def test_single_dated_task(self) -> None:
        """Test that a one-task project is its own critical path."""
        entries = calculate_critical_path([task("solo", start=MONDAY, duration=3)], [])

        assert entries[0].slack == 0
        assert entries[0].is_critical

    def test_cycle_members_not_analyzed(self) -> None:
        """Test that tasks on a cycle get no dates and are not critical."""
        tasks = [task("a", start=MONDAY, duration=1), task("b"), task("c", start=MONDAY, duration=2)]
        links = [link("a", "b"), link("b", "a")]

        entries = _by_id(calculate_critical_path(tasks, links))

        assert entries["a"].early_start is None
        assert not entries["a"].is_critical
        assert not entries["b"].is_critical
        assert entries["c"].is_critical

    def test_invalid_links_ignored(self) -> None:
        """Test that self and dangling links do not affect slack."""
        tasks = [task("a", start=MONDAY, duration=2)]
        links = [link("a", "a"), link("a", "ghost")]

        entries = calculate_critical_path(tasks, links)

        assert entries[0].slack == 0
        assert entries[0].early_finish == day(1)
