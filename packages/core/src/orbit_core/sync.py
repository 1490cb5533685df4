"""Client side of profile sync.

Pushes and pulls the profile JSON blob to and from the backend. Pushes are
debounced: every change restarts a short timer and only the last profile is
sent. The first connection failure switches the client to offline mode, after
which every call returns straight away and the local state file remains the
only copy.
"""
from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

import httpx

from orbit_core.config import Settings
from orbit_core.schemas import UserProfile

logger = logging.getLogger("orbit_core.sync")


class SyncClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        debounce_seconds: Optional[float] = None,
        client: Optional[httpx.Client] = None,
        local_users: Optional[Dict[str, UserProfile]] = None,
    ):
        settings = Settings()
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.debounce_seconds = settings.sync_debounce_seconds if debounce_seconds is None else debounce_seconds
        self._client = client or httpx.Client(base_url=self.base_url, timeout=10.0)
        self.local_users = local_users if local_users is not None else {}
        self.token: Optional[str] = None
        self.offline = False
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[UserProfile] = None

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> Optional[dict]:
        if self.offline:
            return None
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            res = self._client.request(method, path, json=json, headers=headers)
        except httpx.TransportError as e:
            logger.info("sync.offline backend unavailable at %s (%s); using local state", self.base_url, e.__class__.__name__)
            self.offline = True
            return None
        if res.status_code in (401, 403):
            if res.status_code == 403 and "admin" in path:
                logger.warning("sync.admin denied path=%s", path)
                return None
            logger.warning("sync.auth token invalid or expired")
            self.token = None
            return None
        if res.is_error:
            logger.error("sync.request failed %s %s -> %s", method, path, res.status_code)
            return None
        return res.json()

    # ---- auth ----

    def login(self, username: str, password: str) -> bool:
        if not password:
            return False
        data = self._request("POST", "/auth/login", {"username": username, "password": password})
        if data and data.get("token"):
            self.token = data["token"]
            return True
        if self.offline:
            user = self.local_users.get(username.lower())
            if user is not None and user.password == password:
                logger.debug("sync.offline login ok user=%s", username)
                return True
        return False

    def register(self, username: str, password: str, email: Optional[str] = None) -> bool:
        if not password:
            return False
        body = {"username": username, "password": password}
        if email:
            body["email"] = email
        data = self._request("POST", "/auth/register", body)
        if data:
            return self.login(username, password)
        return self.offline

    # ---- profile ----

    def push(self, profile: UserProfile) -> bool:
        if self.offline or not self.token:
            return False
        data = self._request("POST", "/sync", profile.to_json())
        if data is not None:
            logger.debug("sync.push ok user=%s", profile.username)
        return data is not None

    def pull(self) -> Optional[UserProfile]:
        if self.offline or not self.token:
            return None
        data = self._request("GET", "/sync")
        if not data:
            return None
        return UserProfile.model_validate(data)

    def schedule_push(self, profile: UserProfile) -> None:
        """Debounced push; usable directly as a ProfileStore persister."""
        with self._lock:
            self._pending = profile.model_copy(deep=True)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self.flush)
            self._timer.daemon = True
            self._timer.start()

    __call__ = schedule_push

    def flush(self) -> bool:
        with self._lock:
            profile, self._pending = self._pending, None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if profile is None:
            return False
        return self.push(profile)

    def close(self) -> None:
        self.flush()
        self._client.close()


__all__ = ["SyncClient"]
