from datetime import date

from orbit_core.reports import (
    archive_week,
    category_breakdown,
    current_streak,
    heatmap_grid,
    longest_streak,
    monday_of,
    velocity_series,
    weekly_summary,
)
from orbit_core.schemas import DayCounter, ScheduleSlot

TODAY = date(2025, 3, 5)  # Wednesday


def _stats(**days):
    return {k: DayCounter(completed=c, total=t) for k, (c, t) in days.items()}


def _slot(id, category, done):
    return ScheduleSlot(id=id, time_range="09:00 AM - 10:00 AM", title=id, category=category, is_completed=done)


def test_streak_empty_is_zero():
    assert current_streak({}, TODAY) == 0


def test_streak_tolerates_empty_today():
    stats = {
        "2025-03-02": DayCounter(completed=1, total=3),
        "2025-03-03": DayCounter(completed=2, total=3),
        "2025-03-04": DayCounter(completed=3, total=3),
        "2025-03-05": DayCounter(completed=0, total=3),
    }
    assert current_streak(stats, TODAY) == 3


def test_streak_counts_today_when_active():
    stats = {
        "2025-03-04": DayCounter(completed=1, total=2),
        "2025-03-05": DayCounter(completed=1, total=2),
    }
    assert current_streak(stats, TODAY) == 2


def test_streak_broken_by_gap():
    stats = {
        "2025-03-01": DayCounter(completed=4, total=4),
        "2025-03-04": DayCounter(completed=1, total=4),
    }
    assert current_streak(stats, TODAY) == 1
    assert longest_streak(stats) == 1


def test_longest_streak():
    stats = {
        "2025-02-01": DayCounter(completed=1, total=1),
        "2025-02-02": DayCounter(completed=1, total=1),
        "2025-02-03": DayCounter(completed=1, total=1),
        "2025-02-05": DayCounter(completed=1, total=1),
        "2025-02-06": DayCounter(completed=0, total=1),
    }
    assert longest_streak(stats) == 3


def test_heatmap_is_monday_aligned_and_marks_future():
    stats = {"2025-03-04": DayCounter(completed=1, total=4)}
    grid = heatmap_grid(stats, TODAY)
    assert len(grid) == 16 and all(len(col) == 7 for col in grid)
    assert date.fromisoformat(grid[0][0]["date"]).weekday() == 0
    last = grid[-1]
    assert last[0]["date"] == monday_of(TODAY).isoformat()
    assert last[1]["percentage"] == 25
    assert last[2]["future"] is False and last[3]["future"] is True
    assert grid[0][0]["percentage"] == 0


def test_velocity_is_trailing_week_ending_today():
    series = velocity_series({"2025-03-05": DayCounter(completed=2, total=3)}, TODAY)
    assert len(series) == 7
    assert series[0]["date"] == "2025-02-27"
    assert series[-1]["day"] == "Wed"
    assert series[-1]["percentage"] == 67


def test_weekly_summary_and_breakdown():
    schedule = {
        "Monday": [_slot("a", "Coding", True), _slot("b", "Coding", False)],
        "Tuesday": [_slot("c", "Physical", True), _slot("d", "Logistics", False)],
    }
    summary = weekly_summary(schedule)
    assert summary["completed"] == 2 and summary["total"] == 4
    assert summary["overallScore"] == 50
    assert summary["best"]["name"] == "Physical"
    assert summary["worst"]["name"] == "Coding"
    assert summary["daily"][0] == {"day": "Mon", "total": 2, "percentage": 50}
    assert "Logistics" not in {r["name"] for r in category_breakdown(schedule)}
    assert "Logistics" in {r["name"] for r in category_breakdown(schedule, include_logistics=True)}


def test_weekly_summary_without_data():
    summary = weekly_summary({})
    assert summary["overallScore"] == 0
    assert summary["best"] is None
    assert summary["insight"] == "SYSTEM AWAITING DATA INPUT..."


def test_archive_week():
    stats = archive_week({"Monday": [_slot("a", "Rest", True), _slot("b", "Rest", False), _slot("c", "Rest", False)]}, TODAY)
    assert (stats.completed, stats.total, stats.percentage) == (1, 3, 33)
    assert stats.date_range.endswith("2025-03-05")
