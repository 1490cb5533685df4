"""Event-proximity notification evaluator.

Each tick compares the wall clock with the day's tasks, classes and hydration
slots and produces two things:

* threshold alerts: one-shot notifications (system/push). Classes have a
  15-minute and a 5-minute threshold, tasks and water a single 10-minute one.
  Fired keys are remembered so later ticks never repeat an alert.
* banners: in-app cards for anything starting within the next 20 minutes (or
  that started less than 5 minutes ago), soonest first, until dismissed.

The evaluator owns its fired/dismissed sets and clears them when the calendar
day changes. Apart from those sets and the alert sink it has no side effects.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional, Sequence, Set

from orbit_core.schemas import (
    ClassSession,
    NotificationPreferences,
    ScheduleSlot,
    UserProfile,
    WaterConfig,
)
from orbit_core.timeparse import minutes_of_day, parse_minutes, parse_start_minutes, start_of_range
from orbit_core.water import generate_water_slots, progress_for

logger = logging.getLogger("orbit_core.notifications")

LOOKAHEAD_MINUTES = 20
GRACE_MINUTES = 5
CLASS_WARNING_MINUTES = 15
CLASS_CRITICAL_MINUTES = 5
TASK_WARNING_MINUTES = 10
WATER_WARNING_MINUTES = 10


@dataclass(frozen=True)
class TimedEvent:
    id: str
    type: str  # "task" | "class" | "water"
    title: str
    start_minutes: int
    start_str: str
    category: str = ""
    venue: str = ""
    kind: str = ""


@dataclass(frozen=True)
class Alert:
    key: str
    event_id: str
    type: str
    threshold: int
    critical: bool
    title: str
    message: str

    def payload(self, url: str = "/") -> dict:
        """Push payload delivered to the service worker."""
        return {
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "tag": self.event_id,
            "url": url,
        }


@dataclass(frozen=True)
class Banner:
    id: str
    type: str
    title: str
    subtitle: str
    start_time_str: str
    minutes_until: int
    progress: float

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "subtitle": self.subtitle,
            "startTimeStr": self.start_time_str,
            "minutesUntil": self.minutes_until,
            "progress": self.progress,
        }


@dataclass
class TickResult:
    alerts: List[Alert] = field(default_factory=list)
    banners: List[Banner] = field(default_factory=list)


def collect_events(
    day_name: str,
    tasks: Iterable[ScheduleSlot] = (),
    classes: Iterable[ClassSession] = (),
    water: Optional[WaterConfig] = None,
    today: Optional[date] = None,
) -> List[TimedEvent]:
    """Flatten one weekday's entries into timed events.

    Completed tasks, finished water slots and entries without a parseable
    start time are left out. Water progress only counts when it was recorded
    on ``today``.
    """
    events: List[TimedEvent] = []
    for task in tasks:
        if task.is_completed:
            continue
        start = parse_start_minutes(task.time_range)
        if start is None:
            continue
        events.append(
            TimedEvent(
                id=f"task-{day_name}-{task.id}",
                type="task",
                title=task.title,
                start_minutes=start,
                start_str=start_of_range(task.time_range),
                category=task.category,
            )
        )
    for cls in classes:
        start = parse_minutes(cls.start_time)
        if start is None:
            continue
        events.append(
            TimedEvent(
                id=f"class-{day_name}-{cls.id}",
                type="class",
                title=cls.subject,
                start_minutes=start,
                start_str=cls.start_time,
                venue=cls.venue,
                kind=cls.type,
            )
        )
    if water is not None:
        done = set(progress_for(water, today))
        for slot in generate_water_slots(water.daily_goal):
            if slot.id in done:
                continue
            events.append(
                TimedEvent(
                    id=f"water-{day_name}-{slot.id}",
                    type="water",
                    title=slot.label,
                    start_minutes=slot.minutes,
                    start_str=slot.time,
                )
            )
    return events


def banner_progress(diff: int) -> float:
    ratio = (LOOKAHEAD_MINUTES - diff) / LOOKAHEAD_MINUTES
    return min(1.0, max(0.0, ratio)) * 100


def _subtitle(event: TimedEvent, diff: int) -> str:
    when = f"{diff}m to start" if diff > 0 else ("starting now" if diff == 0 else f"started {-diff}m ago")
    if event.type == "class":
        return f"{event.kind} @ {event.venue} • {when}"
    if event.type == "water":
        return f"Hydration Required • {when}"
    return f"Routine Protocol • {when}"


def _alert_text(event: TimedEvent, diff: int, critical: bool) -> tuple:
    if event.type == "class":
        if critical:
            return (f"Class Imminent: {event.title}", f"Starts in {diff} min at {event.venue}. Move now.")
        return (f"Academic Alert: {event.title}", f"Class starts in {diff} mins at {event.venue}. Transit recommended.")
    if event.type == "water":
        return ("Hydration Required", f"{event.title} due at {event.start_str}. Intake 500ml to stay on track.")
    return (f"Protocol Imminent: {event.title}", f"{event.category} session begins in {diff} minutes. Prepare workspace.")


AlertSink = Callable[[Alert], None]


class NotificationEvaluator:
    """Stateful wrapper around the per-tick threshold and banner rules."""

    def __init__(self, alert_sink: Optional[AlertSink] = None):
        self.alert_sink = alert_sink
        self.fired: Set[str] = set()
        self.dismissed: Set[str] = set()
        self._day: Optional[date] = None

    def reset(self) -> None:
        self.fired.clear()
        self.dismissed.clear()

    def dismiss(self, banner_id: str) -> None:
        self.dismissed.add(banner_id)

    def _roll_day(self, now: datetime) -> None:
        today = now.date()
        if self._day is not None and self._day != today:
            logger.info("notifications.rollover day=%s fired=%d dismissed=%d", today, len(self.fired), len(self.dismissed))
            self.reset()
        self._day = today

    def _thresholds(self, event: TimedEvent, prefs: NotificationPreferences) -> Sequence[tuple]:
        """(threshold, critical, also_mark) tuples, most urgent first."""
        if event.type == "class":
            if not prefs.academic:
                return ()
            return (
                (CLASS_CRITICAL_MINUTES, True, (CLASS_WARNING_MINUTES,)),
                (CLASS_WARNING_MINUTES, False, ()),
            )
        if event.type == "water":
            return ((WATER_WARNING_MINUTES, False, ()),) if prefs.water else ()
        return ((TASK_WARNING_MINUTES, False, ()),) if prefs.schedule else ()

    def _check_alerts(self, event: TimedEvent, diff: int, prefs: NotificationPreferences) -> Optional[Alert]:
        if diff <= 0:
            return None
        for threshold, critical, also_mark in self._thresholds(event, prefs):
            key = f"{event.id}@{threshold}"
            if diff > threshold or key in self.fired:
                continue
            self.fired.add(key)
            for other in also_mark:
                self.fired.add(f"{event.id}@{other}")
            title, message = _alert_text(event, diff, critical)
            return Alert(
                key=key,
                event_id=event.id,
                type=event.type,
                threshold=threshold,
                critical=critical,
                title=title,
                message=message,
            )
        return None

    def _deliver(self, alert: Alert) -> None:
        if self.alert_sink is None:
            return
        try:
            self.alert_sink(alert)
        except Exception:
            logger.warning("notifications.deliver failed key=%s; banner only", alert.key, exc_info=True)

    def evaluate_events(
        self,
        now: datetime,
        events: Iterable[TimedEvent],
        prefs: Optional[NotificationPreferences] = None,
    ) -> TickResult:
        self._roll_day(now)
        prefs = prefs or NotificationPreferences()
        now_min = minutes_of_day(now)
        result = TickResult()
        for event in events:
            diff = event.start_minutes - now_min
            alert = self._check_alerts(event, diff, prefs)
            if alert is not None:
                result.alerts.append(alert)
                self._deliver(alert)
            if -GRACE_MINUTES < diff <= LOOKAHEAD_MINUTES and event.id not in self.dismissed:
                result.banners.append(
                    Banner(
                        id=event.id,
                        type=event.type,
                        title=event.title,
                        subtitle=_subtitle(event, diff),
                        start_time_str=event.start_str,
                        minutes_until=diff,
                        progress=banner_progress(diff),
                    )
                )
        result.banners.sort(key=lambda b: b.minutes_until)
        return result

    def evaluate(
        self,
        now: datetime,
        tasks: Iterable[ScheduleSlot] = (),
        classes: Iterable[ClassSession] = (),
        water: Optional[WaterConfig] = None,
        prefs: Optional[NotificationPreferences] = None,
    ) -> TickResult:
        day_name = now.strftime("%A")
        return self.evaluate_events(now, collect_events(day_name, tasks, classes, water, now.date()), prefs)

    def evaluate_profile(self, profile: UserProfile, now: datetime) -> TickResult:
        day_name = now.strftime("%A")
        return self.evaluate(
            now,
            tasks=profile.schedule.get(day_name, []),
            classes=profile.academic_schedule.get(day_name, []),
            water=profile.water_config,
            prefs=profile.preferences.notifications,
        )


__all__ = [
    "LOOKAHEAD_MINUTES",
    "TimedEvent",
    "Alert",
    "Banner",
    "TickResult",
    "collect_events",
    "banner_progress",
    "NotificationEvaluator",
]
