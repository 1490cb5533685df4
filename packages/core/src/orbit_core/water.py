"""Hydration slot generation and daily progress bookkeeping."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from orbit_core.schemas import WaterConfig
from orbit_core.timeparse import format_12h

GLASS_LITERS = 0.5
WAKE_MINUTES = 7 * 60 + 30
WINDOW_START = 9 * 60
WINDOW_END = 21 * 60


@dataclass(frozen=True)
class WaterSlot:
    id: str
    minutes: int
    time: str
    label: str


def generate_water_slots(goal: float) -> List[WaterSlot]:
    """Distribute ``ceil(goal / 0.5)`` glasses over the day.

    The first glass is always ``water-wake`` at 07:30 AM; the rest are
    ``water-0..N-1`` starting at 09:00 AM and stepping evenly towards
    09:00 PM. Ids depend only on the slot count, so a stored progress list
    stays valid for as long as the goal does not change.
    """
    if goal is None or goal <= 0:
        return []
    total = math.ceil(goal / GLASS_LITERS)
    slots = [WaterSlot("water-wake", WAKE_MINUTES, format_12h(WAKE_MINUTES), "Morning Flush")]
    remaining = total - 1
    if remaining <= 0:
        return slots
    interval = (WINDOW_END - WINDOW_START) / remaining
    for i in range(remaining):
        minutes = math.floor(WINDOW_START + i * interval)
        slots.append(WaterSlot(f"water-{i}", minutes, format_12h(minutes), "Hydration Cycle"))
    return slots


def valid_progress(config: WaterConfig) -> List[str]:
    """Progress ids that still belong to the slots generated for the goal."""
    ids = {s.id for s in generate_water_slots(config.daily_goal)}
    return [p for p in config.progress if p in ids]


def progress_for(config: WaterConfig, today: Optional[date] = None) -> List[str]:
    """Progress ids that count on ``today``.

    Progress stamped with an earlier ``last_date`` belongs to a finished day
    and counts as empty. Without ``today`` the stored progress is taken as is.
    """
    if today is not None and config.last_date != today.isoformat():
        return []
    return valid_progress(config)


def roll_day(config: WaterConfig, today: date) -> bool:
    """Clear progress when ``today`` differs from ``config.last_date``.

    Returns True when the config was changed.
    """
    stamp = today.isoformat()
    if config.last_date == stamp:
        return False
    config.last_date = stamp
    config.progress = []
    return True


@dataclass
class WaterSummary:
    consumed_liters: float
    goal_liters: float
    percentage: int
    completed: int
    total: int
    next_slot: Optional[WaterSlot]


def progress_summary(config: WaterConfig, today: Optional[date] = None) -> WaterSummary:
    slots = generate_water_slots(config.daily_goal)
    done = set(progress_for(config, today))
    completed = sum(1 for s in slots if s.id in done)
    pending = [s for s in slots if s.id not in done]
    total_liters = len(slots) * GLASS_LITERS
    consumed = completed * GLASS_LITERS
    pct = round(consumed / total_liters * 100) if total_liters else 0
    return WaterSummary(
        consumed_liters=consumed,
        goal_liters=config.daily_goal,
        percentage=pct,
        completed=completed,
        total=len(slots),
        next_slot=pending[0] if pending else None,
    )


def overdue_slots(config: WaterConfig, now_minutes: int, today: Optional[date] = None) -> List[WaterSlot]:
    """Slots whose time has passed without being marked done."""
    done = set(progress_for(config, today))
    return [s for s in generate_water_slots(config.daily_goal) if s.minutes <= now_minutes and s.id not in done]


__all__ = [
    "GLASS_LITERS",
    "WaterSlot",
    "WaterSummary",
    "generate_water_slots",
    "valid_progress",
    "progress_for",
    "roll_day",
    "progress_summary",
    "overdue_slots",
]
