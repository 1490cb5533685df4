from fastapi import APIRouter, Depends, HTTPException, status
import logging
from pydantic import BaseModel
from typing import Optional
from sqlalchemy.orm import Session
from orbit_core.auth import (
    authenticate_user,
    create_access_token,
    get_db,
    hash_password,
    normalize_username,
)
from orbit_core.config import Settings
from orbit_core.models import User, UserProfileRow
from orbit_core.profile import new_profile

router = APIRouter(prefix="/auth", tags=["auth"])
log = logging.getLogger("orbit_api")
auth_log = logging.getLogger("orbit_api.auth")


class RegisterRequest(BaseModel):
    username: str
    password: str
    email: Optional[str] = None


class LoginRequest(BaseModel):
    username: str
    password: str


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    username = normalize_username(request.username)
    if not username or not request.password:
        raise HTTPException(status_code=400, detail="Username and password are required")
    if db.query(User).filter(User.username == username).first():
        auth_log.warning("user.register conflict username=%s", username)
        raise HTTPException(status_code=400, detail="Username already exists")
    user = User(username=username, password_hash=hash_password(request.password), email=request.email)
    db.add(user)
    profile = new_profile(username, owner=Settings().is_owner(username), email=request.email)
    db.add(UserProfileRow(username=username, profile_data=profile.to_json()))
    db.commit()
    auth_log.info("user.register ok username=%s", username)
    return {"username": username}


@router.post("/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(request.username, request.password, db)
    if not user:
        auth_log.warning("user.login fail username=%s", normalize_username(request.username))
        raise HTTPException(status_code=401, detail="Invalid username or password")
    token = create_access_token({"sub": user.username})
    auth_log.info("user.login ok id=%s username=%s", user.id, user.username)
    return {"token": token, "access_token": token, "token_type": "bearer", "username": user.username}
