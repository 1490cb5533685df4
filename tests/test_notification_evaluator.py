from datetime import datetime

from orbit_core.notifications import NotificationEvaluator, banner_progress, collect_events
from orbit_core.schemas import ClassSession, NotificationPreferences, ScheduleSlot, UserProfile, WaterConfig

# 2025-03-03 is a Monday
MONDAY = "Monday"


def _at(h, m, day=3):
    return datetime(2025, 3, day, h, m)


def _cls(start="10:00 AM", id="c1"):
    return ClassSession(id=id, subject="Operating Systems", type="Lecture", venue="LT-2", start_time=start)


def _task(time_range, id="t1", done=False, title="Deep Work"):
    return ScheduleSlot(id=id, time_range=time_range, title=title, category="Coding", is_completed=done)


def test_class_fires_fifteen_then_five_minute_alert_once():
    ev = NotificationEvaluator()
    classes = [_cls()]
    first = ev.evaluate(_at(9, 45), classes=classes)
    assert [(a.threshold, a.critical) for a in first.alerts] == [(15, False)]
    assert ev.evaluate(_at(9, 50), classes=classes).alerts == []
    second = ev.evaluate(_at(9, 55), classes=classes)
    assert [(a.threshold, a.critical) for a in second.alerts] == [(5, True)]
    assert "class-Monday-c1@15" in ev.fired
    assert ev.evaluate(_at(9, 57), classes=classes).alerts == []


def test_late_start_jumps_straight_to_critical_alert():
    ev = NotificationEvaluator()
    res = ev.evaluate(_at(9, 57), classes=[_cls()])
    assert [a.threshold for a in res.alerts] == [5]
    assert ev.fired == {"class-Monday-c1@5", "class-Monday-c1@15"}


def test_completed_task_never_alerts_or_banners():
    ev = NotificationEvaluator()
    tasks = [_task("10:00 AM - 11:00 AM", done=True)]
    for minute in range(40, 60):
        res = ev.evaluate(_at(9, minute), tasks=tasks)
        assert res.alerts == [] and res.banners == []


def test_task_alert_at_ten_minutes():
    sent = []
    ev = NotificationEvaluator(alert_sink=sent.append)
    tasks = [_task("10:00 AM - 11:00 AM")]
    assert ev.evaluate(_at(9, 49), tasks=tasks).alerts == []
    res = ev.evaluate(_at(9, 50), tasks=tasks)
    assert len(res.alerts) == 1
    assert res.alerts[0].title == "Protocol Imminent: Deep Work"
    assert sent == res.alerts
    payload = sent[0].payload("/app")
    assert payload["tag"] == "task-Monday-t1" and payload["url"] == "/app"


def test_banners_sorted_by_minutes_until():
    ev = NotificationEvaluator()
    tasks = [_task("10:15 AM - 11:00 AM", id="late"), _task("09:58 AM - 10:30 AM", id="early")]
    res = ev.evaluate(_at(9, 56), tasks=tasks, classes=[_cls("10:05 AM")])
    mins = [b.minutes_until for b in res.banners]
    assert mins == sorted(mins) == [2, 9, 19]


def test_banner_window_includes_grace_period():
    ev = NotificationEvaluator()
    tasks = [_task("10:00 AM - 11:00 AM")]
    assert ev.evaluate(_at(9, 39), tasks=tasks).banners == []
    assert len(ev.evaluate(_at(9, 40), tasks=tasks).banners) == 1
    started = ev.evaluate(_at(10, 4), tasks=tasks).banners
    assert started[0].minutes_until == -4
    assert "started 4m ago" in started[0].subtitle
    assert ev.evaluate(_at(10, 5), tasks=tasks).banners == []


def test_dismissed_banner_stays_hidden():
    ev = NotificationEvaluator()
    tasks = [_task("10:00 AM - 11:00 AM")]
    res = ev.evaluate(_at(9, 50), tasks=tasks)
    ev.dismiss(res.banners[0].id)
    assert ev.evaluate(_at(9, 50), tasks=tasks).banners == []
    assert ev.evaluate(_at(9, 55), tasks=tasks).banners == []


def test_repeat_tick_is_idempotent():
    sent = []
    ev = NotificationEvaluator(alert_sink=sent.append)
    classes = [_cls()]
    first = ev.evaluate(_at(9, 45), classes=classes)
    fired = set(ev.fired)
    again = ev.evaluate(_at(9, 45), classes=classes)
    assert again.banners == first.banners
    assert again.alerts == []
    assert ev.fired == fired
    assert len(sent) == 1


def test_state_resets_on_new_day():
    ev = NotificationEvaluator()
    tasks = [_task("10:00 AM - 11:00 AM")]
    ev.evaluate(_at(9, 50), tasks=tasks)
    ev.dismiss("task-Monday-t1")
    ev.evaluate(_at(9, 50, day=4), tasks=[])
    assert ev.fired == set() and ev.dismissed == set()


def test_preferences_gate_alerts_not_banners():
    ev = NotificationEvaluator()
    prefs = NotificationPreferences(academic=False, schedule=False)
    res = ev.evaluate(_at(9, 50), tasks=[_task("10:00 AM - 11:00 AM")], classes=[_cls()], prefs=prefs)
    assert res.alerts == []
    assert len(res.banners) == 2


def test_failing_sink_keeps_banner():
    def boom(alert):
        raise RuntimeError("push down")

    ev = NotificationEvaluator(alert_sink=boom)
    res = ev.evaluate(_at(9, 50), tasks=[_task("10:00 AM - 11:00 AM")])
    assert len(res.alerts) == 1 and len(res.banners) == 1


def test_collect_events_skips_done_water_and_untimed_tasks():
    water = WaterConfig(daily_goal=1.0, progress=["water-wake"])
    events = collect_events(MONDAY, tasks=[_task("Anytime")], water=water)
    assert [e.id for e in events] == ["water-Monday-water-0"]


def test_evaluate_profile_uses_weekday_entries():
    profile = UserProfile(username="u", joined_date="2025-01-01")
    profile.schedule["Monday"] = [_task("10:00 AM - 11:00 AM")]
    profile.schedule["Tuesday"] = [_task("10:00 AM - 11:00 AM", id="t2")]
    res = NotificationEvaluator().evaluate_profile(profile, _at(9, 50))
    assert [b.id for b in res.banners] == ["task-Monday-t1"]


def test_banner_progress_bounds():
    assert banner_progress(20) == 0
    assert banner_progress(0) == 100
    assert banner_progress(-3) == 100
    assert banner_progress(10) == 50


def test_water_progress_from_earlier_day_does_not_count():
    water = WaterConfig(daily_goal=3.0, last_date="2025-03-02", progress=["water-wake", "water-0"])
    res = NotificationEvaluator().evaluate(_at(8, 52), water=water)
    assert [a.event_id for a in res.alerts] == ["water-Monday-water-0"]
    assert [b.id for b in res.banners] == ["water-Monday-water-0"]


def test_water_progress_from_today_still_counts():
    water = WaterConfig(daily_goal=3.0, last_date="2025-03-03", progress=["water-wake", "water-0"])
    res = NotificationEvaluator().evaluate(_at(8, 52), water=water)
    assert res.alerts == [] and res.banners == []
