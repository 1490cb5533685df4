from fastapi import APIRouter, Body, Depends, HTTPException
import logging
from datetime import datetime, timezone
from pydantic import ValidationError
from sqlalchemy.orm import Session
from orbit_core.auth import get_current_user, get_db
from orbit_core.config import Settings
from orbit_core.models import User, UserProfileRow
from orbit_core.profile import new_profile
from orbit_core.schemas import UserProfile

router = APIRouter(prefix="/sync", tags=["sync"])
log = logging.getLogger("orbit_api")


def load_profile(db: Session, user: User) -> UserProfile:
    """Stored profile for ``user``; a fresh blank one when nothing is stored."""
    row = db.query(UserProfileRow).filter(UserProfileRow.username == user.username).first()
    if row is None or not row.profile_data:
        return new_profile(user.username, owner=Settings().is_owner(user.username), email=user.email)
    return UserProfile.model_validate(row.profile_data)


@router.get("")
@router.get("/", include_in_schema=False)
def pull_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = load_profile(db, user)
    log.info("sync.pull user=%s", user.username)
    return profile.to_json()


@router.post("")
@router.post("/", include_in_schema=False)
def push_profile(payload: dict = Body(...), user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        profile = UserProfile.model_validate(payload)
    except ValidationError as e:
        log.warning("sync.push invalid user=%s errors=%d", user.username, e.error_count())
        raise HTTPException(status_code=422, detail="Invalid profile payload")
    # The row belongs to the token's user whatever the blob claims; the
    # plaintext password mirror stays on the client.
    profile.username = user.username
    profile.password = None
    data = profile.to_json()
    row = db.query(UserProfileRow).filter(UserProfileRow.username == user.username).first()
    if row is None:
        row = UserProfileRow(username=user.username, profile_data=data)
        db.add(row)
    else:
        row.profile_data = data
        row.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(row)
    log.info("sync.push ok user=%s", user.username)
    return {"status": "ok", "updatedAt": row.updated_at.isoformat() if row.updated_at else None}
