"""Database initialization helper for Orbit.

Creates all tables and optionally seeds the owner account.
"""
from __future__ import annotations
import os
from sqlalchemy.orm import Session
from .config import Settings
from .db import Base, engine
from .models import User, UserProfileRow
from .auth import hash_password
from .profile import new_profile

DEFAULT_OWNER_PASS = os.environ.get("ORBIT_OWNER_PASS")


def init_db(create_owner: bool = True) -> None:
    """Create tables and optional seed records.

    Parameters
    ----------
    create_owner: bool
        If True, ``ORBIT_OWNER_PASS`` is set and the owner account does not
        exist yet, create it with the seeded template profile.
    """
    Base.metadata.create_all(bind=engine)
    if not create_owner or not DEFAULT_OWNER_PASS:
        return
    owner = Settings().owner_username
    with Session(engine) as session:
        if session.query(User).filter(User.username == owner).first():
            return
        session.add(User(username=owner, password_hash=hash_password(DEFAULT_OWNER_PASS)))
        session.add(UserProfileRow(username=owner, profile_data=new_profile(owner, owner=True).to_json()))
        session.commit()

if __name__ == "__main__":  # pragma: no cover
    init_db()
