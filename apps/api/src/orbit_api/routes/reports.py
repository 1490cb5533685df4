from fastapi import APIRouter, Depends
import logging
from datetime import date, datetime
from typing import Optional
from sqlalchemy.orm import Session
from orbit_core import reports, water
from orbit_core.auth import get_current_user, get_db
from orbit_core.config import Settings
from orbit_core.models import User
from orbit_core.notifications import NotificationEvaluator
from .sync import load_profile

router = APIRouter(tags=["reports"])
log = logging.getLogger("orbit_api")


@router.get("/reports/summary")
def report_summary(
    today: Optional[date] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile = load_profile(db, user)
    today = today or Settings().now().date()
    stats = profile.daily_stats
    body = {
        "streak": reports.current_streak(stats, today),
        "longestStreak": reports.longest_streak(stats),
        "heatmap": reports.heatmap_grid(stats, today),
        "velocity": reports.velocity_series(stats, today),
        "weekly": reports.weekly_summary(profile.schedule),
        "lastWeek": profile.last_week_stats.to_json() if profile.last_week_stats else None,
    }
    if profile.water_config is not None:
        summary = water.progress_summary(profile.water_config, today)
        body["water"] = {
            "consumedLiters": summary.consumed_liters,
            "goalLiters": summary.goal_liters,
            "percentage": summary.percentage,
            "completed": summary.completed,
            "total": summary.total,
            "next": summary.next_slot.time if summary.next_slot else None,
        }
    log.info("reports.summary user=%s", user.username)
    return body


@router.get("/notifications/upcoming")
def upcoming(
    at: Optional[datetime] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Banners for the caller's profile; alerts are left to the background jobs."""
    profile = load_profile(db, user)
    now = at or Settings().now()
    result = NotificationEvaluator().evaluate_profile(profile, now)
    return [b.to_json() for b in result.banners]
