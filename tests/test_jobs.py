from datetime import datetime

import pytest

from orbit_core.config import Settings
from orbit_core.db import SessionLocal
from orbit_core.jobs import Job, JobRunner, OrbitJobs, day_key, minute_key, two_hour_key
from orbit_core.models import PushSubscription, User, UserProfileRow
from orbit_core.profile import new_profile
from orbit_core.schemas import ClassSession, ScheduleSlot, WaterConfig


class FakeDispatcher:
    def __init__(self):
        self.sent = []

    def send_to_user(self, db, username, payload):
        self.sent.append((username, payload))
        return 1


def _seed(username="jo", mutate=None):
    profile = new_profile(username, now=datetime(2025, 3, 1, 8, 0))
    if mutate:
        mutate(profile)
    session = SessionLocal()
    try:
        session.add(User(username=username, password_hash="x"))
        session.add(UserProfileRow(username=username, profile_data=profile.to_json()))
        session.commit()
    finally:
        session.close()


def _stored(username="jo"):
    session = SessionLocal()
    try:
        return session.query(UserProfileRow).filter(UserProfileRow.username == username).one().profile_data
    finally:
        session.close()


@pytest.fixture
def jobs(clean_db):
    return OrbitJobs(dispatcher=FakeDispatcher(), settings=Settings())


def test_period_keys():
    now = datetime(2025, 3, 3, 13, 7)
    assert minute_key(now) == "2025-03-03 13:07"
    assert two_hour_key(now) == "2025-03-03/6"
    assert day_key(now) == "2025-03-03"


def test_runner_runs_each_job_once_per_period():
    calls = []
    runner = JobRunner([
        Job("minute", minute_key, lambda now: calls.append(("minute", now))),
        Job("day", day_key, lambda now: calls.append(("day", now))),
    ])
    assert runner.tick(datetime(2025, 3, 3, 9, 0, 5)) == ["minute", "day"]
    assert runner.tick(datetime(2025, 3, 3, 9, 0, 40)) == []
    assert runner.tick(datetime(2025, 3, 3, 9, 1)) == ["minute"]
    assert len(calls) == 3


def test_runner_isolates_failing_job():
    def boom(now):
        raise RuntimeError("x")

    runner = JobRunner([Job("bad", minute_key, boom), Job("good", minute_key, lambda now: None)])
    assert runner.tick(datetime(2025, 3, 3, 9, 0)) == ["good"]
    assert runner.is_running() is False


def test_proximity_alerts_push_once(jobs):
    def add_class(profile):
        profile.academic_schedule["Monday"] = [ClassSession(id="c1", subject="OS", venue="LT-1", start_time="10:00 AM")]
    _seed(mutate=add_class)
    assert jobs.proximity_alerts(datetime(2025, 3, 3, 9, 45)) == 1
    assert jobs.proximity_alerts(datetime(2025, 3, 3, 9, 46)) == 0
    assert jobs.proximity_alerts(datetime(2025, 3, 3, 9, 55)) == 1
    titles = [p["title"] for _, p in jobs.dispatcher.sent]
    assert titles == ["Academic Alert: OS", "Class Imminent: OS"]
    assert jobs.dispatcher.sent[0][1]["tag"] == "class-Monday-c1"


def test_hydration_check_quiet_hours_and_stale_progress(jobs):
    def add_water(profile):
        profile.water_config = WaterConfig(daily_goal=1.5, last_date="2025-03-02", progress=["water-wake", "water-0"])
    _seed(mutate=add_water)
    assert jobs.hydration_check(datetime(2025, 3, 3, 6, 0)) == 0
    assert jobs.hydration_check(datetime(2025, 3, 3, 23, 0)) == 0
    # progress belongs to yesterday, so both morning glasses are overdue today
    assert jobs.hydration_check(datetime(2025, 3, 3, 10, 0)) == 1
    payload = jobs.dispatcher.sent[0][1]
    assert payload["tag"] == "hydration-check-2025-03-03"
    assert payload["message"].startswith("2 glass(es) behind")


def test_hydration_check_respects_preference(jobs):
    def mute(profile):
        profile.water_config = WaterConfig(daily_goal=1.5, last_date="2025-03-03")
        profile.preferences.notifications.water = False
    _seed(mutate=mute)
    assert jobs.hydration_check(datetime(2025, 3, 3, 10, 0)) == 0


def test_daily_rollover_records_stats_and_resets(jobs):
    def fill(profile):
        profile.schedule["Sunday"] = [
            ScheduleSlot(id="s1", time_range="09:00 AM - 10:00 AM", title="Rest", category="Rest", is_completed=True),
            ScheduleSlot(id="s2", time_range="11:00 AM - 12:00 PM", title="Plan", category="Logistics"),
        ]
        profile.water_config = WaterConfig(daily_goal=1.0, last_date="2025-03-02", progress=["water-wake"])
    _seed(mutate=fill)
    assert jobs.daily_rollover(datetime(2025, 3, 3, 0, 0)) == 1
    data = _stored()
    assert data["dailyStats"]["2025-03-02"] == {"completed": 1, "total": 2}
    assert data["waterConfig"]["progress"] == []
    assert data["lastResetDate"] == "2025-03-03"
    assert data["lastWeekStats"]["percentage"] == 50
    assert all(not s["isCompleted"] for s in data["schedule"]["Sunday"])
    # second run on the same day changes nothing
    assert jobs.daily_rollover(datetime(2025, 3, 3, 0, 5)) == 0


def test_evaluators_of_deleted_users_are_dropped(jobs):
    _seed("keep")
    _seed("gone")
    jobs.proximity_alerts(datetime(2025, 3, 3, 9, 0))
    assert set(jobs.evaluators) == {"keep", "gone"}
    session = SessionLocal()
    try:
        session.query(UserProfileRow).filter(UserProfileRow.username == "gone").delete()
        session.query(User).filter(User.username == "gone").delete()
        session.commit()
    finally:
        session.close()
    jobs.proximity_alerts(datetime(2025, 3, 3, 9, 1))
    assert set(jobs.evaluators) == {"keep"}
