"""Streaks, heatmap and weekly report aggregation.

Everything here is recomputed from the profile on demand; nothing is cached.
"""
from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional

from orbit_core.schemas import DAYS_OF_WEEK, DayCounter, ScheduleSlot, WeeklyStats

HEATMAP_WEEKS = 16
VELOCITY_DAYS = 7


def _pct(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(math.floor(completed * 100 / total + 0.5))


def monday_of(day: date) -> date:
    return day - timedelta(days=day.weekday())


def _counter(stats: Mapping[str, DayCounter], day: date) -> Optional[DayCounter]:
    return stats.get(day.isoformat())


def day_counter(slots: Iterable[ScheduleSlot]) -> DayCounter:
    slots = list(slots)
    return DayCounter(completed=sum(1 for s in slots if s.is_completed), total=len(slots))


def current_streak(stats: Mapping[str, DayCounter], today: date) -> int:
    """Consecutive active days ending today.

    A day is active when it has at least one completed item. Today not having
    anything done yet does not break the streak.
    """
    streak = 0
    cursor = today
    todays = _counter(stats, today)
    if todays is None or todays.completed <= 0:
        cursor = today - timedelta(days=1)
    while True:
        counter = _counter(stats, cursor)
        if counter is None or counter.completed <= 0:
            return streak
        streak += 1
        cursor -= timedelta(days=1)


def longest_streak(stats: Mapping[str, DayCounter]) -> int:
    active = sorted(date.fromisoformat(k) for k, v in stats.items() if v.completed > 0)
    best = run = 0
    previous: Optional[date] = None
    for day in active:
        run = run + 1 if previous is not None and day - previous == timedelta(days=1) else 1
        best = max(best, run)
        previous = day
    return best


def heatmap_grid(stats: Mapping[str, DayCounter], today: date, weeks: int = HEATMAP_WEEKS) -> List[List[dict]]:
    """Monday-aligned columns of daily completion percentages.

    The last column is the current week; days after ``today`` are flagged
    ``future`` and report 0.
    """
    start = monday_of(today) - timedelta(weeks=weeks - 1)
    grid: List[List[dict]] = []
    for w in range(weeks):
        column = []
        for d in range(7):
            day = start + timedelta(days=w * 7 + d)
            counter = _counter(stats, day)
            completed = counter.completed if counter else 0
            total = counter.total if counter else 0
            column.append({
                "date": day.isoformat(),
                "completed": completed,
                "total": total,
                "percentage": _pct(completed, total),
                "future": day > today,
            })
        grid.append(column)
    return grid


def velocity_series(stats: Mapping[str, DayCounter], today: date, days: int = VELOCITY_DAYS) -> List[dict]:
    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        counter = _counter(stats, day)
        completed = counter.completed if counter else 0
        total = counter.total if counter else 0
        series.append({
            "date": day.isoformat(),
            "day": day.strftime("%a"),
            "completed": completed,
            "total": total,
            "percentage": _pct(completed, total),
        })
    return series


def category_breakdown(schedule: Mapping[str, List[ScheduleSlot]], include_logistics: bool = False) -> List[dict]:
    totals: Dict[str, List[int]] = {}
    for slots in schedule.values():
        for slot in slots:
            entry = totals.setdefault(slot.category, [0, 0])
            entry[1] += 1
            if slot.is_completed:
                entry[0] += 1
    rows = [
        {"name": cat, "completed": c, "total": t, "percentage": _pct(c, t)}
        for cat, (c, t) in totals.items()
        if include_logistics or cat != "Logistics"
    ]
    return rows


def _insight(score: int, total: int) -> str:
    if score > 80:
        return "ORBIT STABLE. MOMENTUM IS CRITICAL."
    if score > 50:
        return "SYSTEM OPERATIONAL. EFFICIENCY FLUCTUATIONS DETECTED."
    if total > 0:
        return "SYNC DEGRADED. RE-INITIALIZE CORE ROUTINES IMMEDIATELY."
    return "SYSTEM AWAITING DATA INPUT..."


def weekly_summary(schedule: Mapping[str, List[ScheduleSlot]]) -> dict:
    all_slots = [s for slots in schedule.values() for s in slots]
    counter = day_counter(all_slots)
    score = _pct(counter.completed, counter.total)
    daily = []
    for day in DAYS_OF_WEEK:
        c = day_counter(schedule.get(day, []))
        daily.append({"day": day[:3], "total": c.total, "percentage": _pct(c.completed, c.total)})
    categories = category_breakdown(schedule)
    ranked = sorted(categories, key=lambda r: r["percentage"], reverse=True)
    return {
        "overallScore": score,
        "completed": counter.completed,
        "total": counter.total,
        "daily": daily,
        "categories": categories,
        "best": ranked[0] if ranked else None,
        "worst": ranked[-1] if ranked else None,
        "insight": _insight(score, counter.total),
    }


def archive_week(schedule: Mapping[str, List[ScheduleSlot]], today: date) -> WeeklyStats:
    counter = day_counter(s for slots in schedule.values() for s in slots)
    return WeeklyStats(
        completed=counter.completed,
        total=counter.total,
        percentage=_pct(counter.completed, counter.total),
        date_range=f"Week ending {today.isoformat()}",
    )


__all__ = [
    "HEATMAP_WEEKS",
    "monday_of",
    "day_counter",
    "current_streak",
    "longest_streak",
    "heatmap_grid",
    "velocity_series",
    "category_breakdown",
    "weekly_summary",
    "archive_week",
]
