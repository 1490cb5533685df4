"""ORM models."""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, String, UniqueConstraint
from orbit_core.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    email = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class UserProfileRow(Base):
    """One JSON profile blob per user, upserted on sync (last write wins)."""
    __tablename__ = "user_profiles"
    id = Column(Integer, primary_key=True)
    username = Column(String, ForeignKey("users.username", ondelete="CASCADE"), unique=True, index=True)
    profile_data = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class PushSubscription(Base):
    __tablename__ = "push_subscriptions"
    __table_args__ = (UniqueConstraint("username", "endpoint", name="uq_push_user_endpoint"),)
    id = Column(Integer, primary_key=True)
    username = Column(String, ForeignKey("users.username", ondelete="CASCADE"), index=True)
    endpoint = Column(String, nullable=False)
    keys = Column(JSON, nullable=False)  # {"p256dh": ..., "auth": ...}
    created_at = Column(DateTime(timezone=True), default=_utcnow)

__all__ = ["User", "UserProfileRow", "PushSubscription"]
