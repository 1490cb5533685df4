from fastapi import APIRouter, Depends, HTTPException
import logging
from pydantic import ValidationError
from sqlalchemy.orm import Session
from orbit_core.auth import get_db, normalize_username, require_owner
from orbit_core.config import Settings
from orbit_core.models import PushSubscription, User, UserProfileRow
from orbit_core.reports import day_counter
from orbit_core.schemas import UserProfile

router = APIRouter(prefix="/admin", tags=["admin"])
log = logging.getLogger("orbit_api")


def _summary(user: User, row) -> dict:
    sync_percent = 0
    joined = user.created_at.isoformat() if user.created_at else None
    profile = None
    if row is not None and row.profile_data:
        try:
            profile = UserProfile.model_validate(row.profile_data)
        except ValidationError:
            log.warning("admin.users invalid profile user=%s; listed without stats", user.username)
    if profile is not None:
        counter = day_counter(s for slots in profile.schedule.values() for s in slots)
        sync_percent = round(counter.completed * 100 / counter.total) if counter.total else 0
        joined = profile.joined_date
    return {
        "username": user.username,
        "email": user.email,
        "joinedDate": joined,
        "syncPercent": sync_percent,
        "isOwner": Settings().is_owner(user.username),
        "lastSync": row.updated_at.isoformat() if row is not None and row.updated_at else None,
    }


@router.get("/users")
def list_users(actor: User = Depends(require_owner), db: Session = Depends(get_db)):
    rows = {r.username: r for r in db.query(UserProfileRow).all()}
    users = [_summary(u, rows.get(u.username)) for u in db.query(User).all()]
    users.sort(key=lambda u: u["joinedDate"] or "", reverse=True)
    log.info("admin.users count=%d actor=%s", len(users), actor.username)
    return users


@router.delete("/users/{username}")
def delete_user(username: str, actor: User = Depends(require_owner), db: Session = Depends(get_db)):
    username = normalize_username(username)
    if username == actor.username:
        raise HTTPException(status_code=400, detail="The owner account cannot delete itself")
    user = db.query(User).filter(User.username == username).first()
    if not user:
        log.warning("admin.delete not_found username=%s actor=%s", username, actor.username)
        raise HTTPException(status_code=404, detail="User not found")
    db.query(PushSubscription).filter(PushSubscription.username == username).delete()
    db.query(UserProfileRow).filter(UserProfileRow.username == username).delete()
    db.delete(user)
    db.commit()
    log.info("admin.delete ok username=%s actor=%s", username, actor.username)
    return {"status": "deleted"}
