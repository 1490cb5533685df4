"""Background jobs: polls the wall clock and scans every stored profile.

Three jobs run on a single daemon thread:

* ``proximity_alerts`` every minute: threshold alerts for tasks, classes and
  water slots, pushed to the user's devices.
* ``hydration_check`` every two hours: nudges users who have fallen behind on
  their water slots.
* ``daily_rollover`` once per day: water progress reset, weekly reset and the
  daily stats entry for the day that just ended.

A job runs whenever its period key (minute, two-hour block, date) differs from
the key of its previous run. One user failing never aborts the batch.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from orbit_core import reports, water
from orbit_core.config import Settings
from orbit_core.db import SessionLocal
from orbit_core.models import UserProfileRow
from orbit_core.notifications import NotificationEvaluator
from orbit_core.profile import ProfileStore
from orbit_core.push import PushDispatcher
from orbit_core.schemas import DAYS_OF_WEEK, UserProfile
from orbit_core.timeparse import minutes_of_day

logger = logging.getLogger("orbit_core.jobs")

HYDRATION_QUIET_BEFORE = 7 * 60 + 30
HYDRATION_QUIET_AFTER = 22 * 60


def minute_key(now: datetime) -> str:
    return now.strftime("%Y-%m-%d %H:%M")


def two_hour_key(now: datetime) -> str:
    return f"{now:%Y-%m-%d}/{now.hour // 2}"


def day_key(now: datetime) -> str:
    return now.strftime("%Y-%m-%d")


@dataclass
class Job:
    name: str
    period_key: Callable[[datetime], str]
    run: Callable[[datetime], object]
    last_key: Optional[str] = None


class JobRunner:
    def __init__(self, jobs: List[Job], poll_interval: float = 10, clock: Optional[Callable[[], datetime]] = None):
        self.jobs = jobs
        self.poll_interval = poll_interval
        self._clock = clock or datetime.now
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def start(self):
        logger.info("jobs.start requested poll=%ss jobs=%s", self.poll_interval, [j.name for j in self.jobs])
        if self._thread is None or not self._thread.is_alive():
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._run, name="orbit-jobs", daemon=True)
            self._thread.start()

    def stop(self):
        logger.info("jobs.stop requested")
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2)

    def tick(self, now: Optional[datetime] = None) -> List[str]:
        """Run every job whose period key changed; returns the names run."""
        now = now or self._clock()
        ran = []
        for job in self.jobs:
            key = job.period_key(now)
            if key == job.last_key:
                continue
            job.last_key = key
            try:
                job.run(now)
                ran.append(job.name)
            except Exception:
                logger.exception("jobs.%s failed key=%s", job.name, key)
        return ran

    def _run(self):  # pragma: no cover (timing + thread loop)
        while not self._stop_event.is_set():
            self.tick()
            self._stop_event.wait(self.poll_interval)


class OrbitJobs:
    """The job bodies, sharing a push dispatcher and per-user evaluators."""

    def __init__(
        self,
        dispatcher: Optional[PushDispatcher] = None,
        session_factory: sessionmaker = SessionLocal,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings()
        self.dispatcher = dispatcher or PushDispatcher(self.settings)
        self.session_factory = session_factory
        # Fired-alert bookkeeping per user; each evaluator resets itself on day change
        self.evaluators: Dict[str, NotificationEvaluator] = {}

    def _profiles(self, db: Session):
        for row in db.query(UserProfileRow).all():
            if not row.profile_data:
                continue
            try:
                yield row, UserProfile.model_validate(row.profile_data)
            except ValueError:
                logger.warning("jobs.profile invalid user=%s; skipped", row.username)

    def proximity_alerts(self, now: datetime) -> int:
        sent = 0
        seen = set()
        db = self.session_factory()
        try:
            for row, profile in self._profiles(db):
                seen.add(row.username)
                try:
                    evaluator = self.evaluators.setdefault(row.username, NotificationEvaluator())
                    result = evaluator.evaluate_profile(profile, now)
                    for alert in result.alerts:
                        logger.info("jobs.alert user=%s key=%s", row.username, alert.key)
                        sent += self.dispatcher.send_to_user(db, row.username, alert.payload(self.settings.app_url))
                except Exception:
                    logger.exception("jobs.proximity_alerts user=%s failed", row.username)
        finally:
            db.close()
        for gone in set(self.evaluators) - seen:
            del self.evaluators[gone]
        return sent

    def hydration_check(self, now: datetime) -> int:
        now_min = minutes_of_day(now)
        if not (HYDRATION_QUIET_BEFORE <= now_min < HYDRATION_QUIET_AFTER):
            return 0
        sent = 0
        db = self.session_factory()
        try:
            for row, profile in self._profiles(db):
                config = profile.water_config
                if config is None or not profile.preferences.notifications.water:
                    continue
                behind = water.overdue_slots(config, now_min, now.date())
                if not behind:
                    continue
                liters = len(behind) * water.GLASS_LITERS
                payload = {
                    "title": "Hydration Check",
                    "message": f"{len(behind)} glass(es) behind schedule. Drink {liters:g} L to catch up.",
                    "type": "water",
                    "tag": f"hydration-check-{now:%Y-%m-%d}",
                    "url": self.settings.app_url,
                }
                try:
                    sent += self.dispatcher.send_to_user(db, row.username, payload)
                except Exception:
                    logger.exception("jobs.hydration_check user=%s failed", row.username)
        finally:
            db.close()
        return sent

    def daily_rollover(self, now: datetime) -> int:
        today = now.date()
        yesterday = today - timedelta(days=1)
        changed = 0
        db = self.session_factory()
        try:
            for row, profile in self._profiles(db):
                try:
                    if self._roll_profile(row, profile, today, yesterday):
                        changed += 1
                except Exception:
                    logger.exception("jobs.daily_rollover user=%s failed", row.username)
            db.commit()
        finally:
            db.close()
        logger.info("jobs.daily_rollover day=%s changed=%d", today, changed)
        return changed

    @staticmethod
    def _roll_profile(row: UserProfileRow, profile: UserProfile, today: date, yesterday: date) -> bool:
        changed = False
        key = yesterday.isoformat()
        if key not in profile.daily_stats:
            slots = profile.schedule.get(DAYS_OF_WEEK[yesterday.weekday()], [])
            profile.daily_stats[key] = reports.day_counter(slots)
            changed = True
        store = ProfileStore(profile, clock=lambda: datetime.combine(today, datetime.min.time()))
        changed = store.roll_day(today) or changed
        if changed:
            row.profile_data = store.profile.to_json()
        return changed

    def as_jobs(self) -> List[Job]:
        return [
            Job("proximity_alerts", minute_key, self.proximity_alerts),
            Job("hydration_check", two_hour_key, self.hydration_check),
            Job("daily_rollover", day_key, self.daily_rollover),
        ]


def build_runner(settings: Optional[Settings] = None, dispatcher: Optional[PushDispatcher] = None) -> JobRunner:
    settings = settings or Settings()
    jobs = OrbitJobs(dispatcher=dispatcher, settings=settings)
    return JobRunner(jobs.as_jobs(), poll_interval=settings.job_poll_seconds, clock=settings.now)


__all__ = ["Job", "JobRunner", "OrbitJobs", "build_runner", "minute_key", "two_hour_key", "day_key"]
