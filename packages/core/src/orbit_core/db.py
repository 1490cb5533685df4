"""Database setup.

Provides SQLAlchemy engine, session factory, and declarative base.

Defaults to an on-disk SQLite database under ``data/orbit.db`` at the
repository root, but respects an explicit environment override via
``ORBIT_DB_URL`` (or ``ORBIT_DATABASE_URL``), e.g. a Postgres URL in
production or a temporary file in tests.
"""
from __future__ import annotations

import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from orbit_core.config import Settings
from urllib.parse import urlparse

_settings = Settings()
_settings.load_backend_env()

_env_url = os.getenv("ORBIT_DB_URL") or os.getenv("ORBIT_DATABASE_URL")
if _env_url:
    parsed = urlparse(_env_url)
    if parsed.scheme == "sqlite" and parsed.path and parsed.path != "/:memory:":
        # parsed.path is an absolute path for sqlite URLs with 3+ slashes
        _dir = os.path.dirname(parsed.path)
        if _dir:
            os.makedirs(_dir, exist_ok=True)
    DATABASE_URL = _env_url
else:
    _data_dir = os.path.join(_settings.repo_root(), "data")
    os.makedirs(_data_dir, exist_ok=True)
    DATABASE_URL = f"sqlite:///{os.path.join(_data_dir, 'orbit.db')}"

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

__all__ = [
    "DATABASE_URL",
    "engine",
    "SessionLocal",
    "Base",
]
