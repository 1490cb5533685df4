"""Configuration utilities."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo
import os, sys
from pathlib import Path
from dotenv import load_dotenv  # type: ignore


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.getenv(name)
    return val if val not in (None, "") else default


def _env_bool(name: str, default: bool) -> bool:
    val = _env(name)
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    val = _env(name)
    try:
        return float(val) if val is not None else default
    except ValueError:
        return default


@dataclass
class Settings:
    owner_username: str = field(default_factory=lambda: (_env("ORBIT_OWNER_USER", "arihant") or "arihant").lower())
    vapid_public_key: Optional[str] = field(default_factory=lambda: _env("VAPID_PUBLIC_KEY", _env("VITE_VAPID_PUBLIC_KEY")))
    vapid_private_key: Optional[str] = field(default_factory=lambda: _env("VAPID_PRIVATE_KEY"))
    vapid_email: str = field(default_factory=lambda: _env("VAPID_EMAIL", "mailto:admin@orbit.local"))
    job_poll_seconds: float = field(default_factory=lambda: _env_float("ORBIT_JOB_POLL_SECONDS", 10.0))
    jobs_enabled: bool = field(default_factory=lambda: _env_bool("ORBIT_JOBS_ENABLED", True))
    sync_debounce_seconds: float = field(default_factory=lambda: _env_float("ORBIT_SYNC_DEBOUNCE_SECONDS", 2.0))
    api_url: str = field(default_factory=lambda: _env("ORBIT_API_URL", "http://localhost:4000"))
    state_file: str = field(default_factory=lambda: _env("ORBIT_STATE_FILE", "data/orbit_state.json"))
    app_url: str = field(default_factory=lambda: _env("ORBIT_APP_URL", "/"))
    timezone_name: Optional[str] = field(default_factory=lambda: _env("ORBIT_TIMEZONE"))

    def now(self) -> datetime:
        """Wall-clock time in the configured zone (naive local time otherwise)."""
        if self.timezone_name:
            return datetime.now(ZoneInfo(self.timezone_name))
        return datetime.now()

    def _bundle_base(self) -> Optional[str]:
        base = getattr(sys, "_MEIPASS", None)
        if base and os.path.isdir(base):
            return base
        return None

    def repo_root(self) -> str:
        base = self._bundle_base()
        if base:  # Frozen bundle base (PyInstaller, etc.)
            return base
        # Walk upward from this file looking for project markers
        cur = os.path.abspath(os.path.dirname(__file__))
        markers = ("pyproject.toml", ".git")
        for _ in range(8):
            if any(os.path.exists(os.path.join(cur, m)) for m in markers):
                return cur
            parent = os.path.dirname(cur)
            if parent == cur:
                break
            cur = parent
        # Fallback: packages/core/src/orbit_core -> repo root
        return os.path.abspath(os.path.join(os.path.dirname(__file__), "../../../../"))

    def load_backend_env(self) -> None:
        """Load canonical backend env file if present (idempotent)."""
        env_file = Path(self.repo_root()) / "config" / "env" / ".env.backend"
        if env_file.exists():
            load_dotenv(env_file, override=False)

    def resolve_path(self, p: Optional[str]) -> Optional[str]:
        if not p:
            return None
        if os.path.isabs(p):
            return p
        return os.path.abspath(os.path.join(self.repo_root(), p))

    @property
    def push_enabled(self) -> bool:
        """Push needs both halves of the VAPID key pair."""
        return bool(self.vapid_public_key and self.vapid_private_key)

    def effective_state_file(self) -> str:
        return self.resolve_path(self.state_file) or os.path.join(self.repo_root(), "data", "orbit_state.json")

    def is_owner(self, username: Optional[str]) -> bool:
        return bool(username) and username.lower() == self.owner_username
