"""Profile store: the single in-memory user profile and its mutations.

``ProfileStore`` owns one ``UserProfile`` and applies every change the app
makes (tasks, classes, water, notes, preferences, weekly reset). After each
mutation the registered persisters are called with the profile; they mirror it
to the local state file or schedule a cloud push.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from orbit_core import reports, water
from orbit_core.schemas import (
    DAYS_OF_WEEK,
    ClassSession,
    NoteItem,
    ScheduleSlot,
    UserProfile,
    WaterConfig,
)
from orbit_core.templates import owner_schedule, owner_timetable
from orbit_core.timeparse import parse_minutes, sort_key

logger = logging.getLogger("orbit_core.profile")

Persister = Callable[[UserProfile], None]


class SlotNotFound(KeyError):
    """Raised when a task, class, note or water slot id is unknown."""


def make_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}"


def new_profile(username: str, password: Optional[str] = None, owner: bool = False,
                email: Optional[str] = None, now: Optional[datetime] = None) -> UserProfile:
    """Blank profile for a fresh account; the owner gets the seeded template."""
    now = now or datetime.now(timezone.utc)
    profile = UserProfile(
        username=username.lower(),
        password=password,
        email=email,
        joined_date=now.isoformat(),
        last_reset_date=reports.monday_of(now.date()).isoformat(),
    )
    if owner:
        profile.schedule = owner_schedule()
        profile.academic_schedule = owner_timetable()
    return profile


def _check_day(day: str) -> None:
    if day not in DAYS_OF_WEEK:
        raise ValueError(f"unknown weekday: {day!r}")


def _class_sort_key(session: ClassSession) -> int:
    value = parse_minutes(session.start_time)
    return -1 if value is None else value


class ProfileStore:
    def __init__(self, profile: UserProfile, persisters: Optional[List[Persister]] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.profile = profile
        self._persisters: List[Persister] = list(persisters or [])
        self._clock = clock or datetime.now

    # ---- plumbing ----

    def subscribe(self, persister: Persister) -> None:
        self._persisters.append(persister)

    def today(self) -> date:
        return self._clock().date()

    def _commit(self) -> UserProfile:
        for persist in self._persisters:
            try:
                persist(self.profile)
            except Exception:
                logger.warning("profile.persist failed user=%s", self.profile.username, exc_info=True)
        return self.profile

    def _refresh_today(self) -> None:
        today = self.today()
        slots = self.profile.schedule.get(DAYS_OF_WEEK[today.weekday()], [])
        self.profile.daily_stats[today.isoformat()] = reports.day_counter(slots)

    def replace(self, profile: UserProfile) -> UserProfile:
        """Swap in a profile pulled from elsewhere (cloud or another device)."""
        self.profile = profile
        return self._commit()

    # ---- tasks ----

    def _slots(self, day: str) -> List[ScheduleSlot]:
        _check_day(day)
        return self.profile.schedule.setdefault(day, [])

    def add_or_edit_slot(self, day: str, slot: ScheduleSlot) -> ScheduleSlot:
        slots = self._slots(day)
        for i, existing in enumerate(slots):
            if existing.id == slot.id:
                slots[i] = slot
                break
        else:
            slots.append(slot)
        slots.sort(key=lambda s: sort_key(s.time_range))
        self._refresh_today()
        self._commit()
        return slot

    def toggle_slot(self, day: str, slot_id: str) -> ScheduleSlot:
        for slot in self._slots(day):
            if slot.id == slot_id:
                slot.is_completed = not slot.is_completed
                self._refresh_today()
                self._commit()
                return slot
        raise SlotNotFound(slot_id)

    def remove_slot(self, day: str, slot_id: str) -> None:
        slots = self._slots(day)
        kept = [s for s in slots if s.id != slot_id]
        if len(kept) == len(slots):
            raise SlotNotFound(slot_id)
        self.profile.schedule[day] = kept
        self._refresh_today()
        self._commit()

    # ---- classes ----

    def add_or_edit_class(self, day: str, session: ClassSession) -> ClassSession:
        _check_day(day)
        sessions = self.profile.academic_schedule.setdefault(day, [])
        for i, existing in enumerate(sessions):
            if existing.id == session.id:
                sessions[i] = session
                break
        else:
            sessions.append(session)
        sessions.sort(key=_class_sort_key)
        self._commit()
        return session

    def remove_class(self, day: str, class_id: str) -> None:
        _check_day(day)
        sessions = self.profile.academic_schedule.get(day, [])
        kept = [c for c in sessions if c.id != class_id]
        if len(kept) == len(sessions):
            raise SlotNotFound(class_id)
        self.profile.academic_schedule[day] = kept
        self._commit()

    # ---- water ----

    def _water(self) -> WaterConfig:
        if self.profile.water_config is None:
            self.profile.water_config = WaterConfig(last_date=self.today().isoformat())
        return self.profile.water_config

    def set_water_goal(self, goal: float, adaptive: Optional[bool] = None) -> WaterConfig:
        if goal <= 0:
            raise ValueError("daily goal must be positive")
        config = self._water()
        config.daily_goal = goal
        if adaptive is not None:
            config.adaptive_mode = adaptive
        config.progress = water.valid_progress(config)
        self._commit()
        return config

    def toggle_water_slot(self, slot_id: str) -> WaterConfig:
        config = self._water()
        water.roll_day(config, self.today())
        if slot_id not in {s.id for s in water.generate_water_slots(config.daily_goal)}:
            raise SlotNotFound(slot_id)
        if slot_id in config.progress:
            config.progress.remove(slot_id)
        else:
            config.progress.append(slot_id)
        self._commit()
        return config

    # ---- notes ----

    def save_note(self, title: str, content: str = "", priority: str = "medium",
                  note_id: Optional[str] = None) -> NoteItem:
        if not title.strip():
            raise ValueError("note title is required")
        for i, existing in enumerate(self.profile.notes):
            if note_id is not None and existing.id == note_id:
                note = NoteItem(
                    id=existing.id,
                    title=title,
                    content=content,
                    priority=priority,
                    is_completed=existing.is_completed,
                    created_at=existing.created_at,
                )
                self.profile.notes[i] = note
                break
        else:
            note = NoteItem(
                id=note_id or make_id("note"),
                title=title,
                content=content,
                priority=priority,
                created_at=datetime.now(timezone.utc).isoformat(),
            )
            self.profile.notes.append(note)
        self._commit()
        return note

    def _note(self, note_id: str) -> NoteItem:
        for note in self.profile.notes:
            if note.id == note_id:
                return note
        raise SlotNotFound(note_id)

    def archive_note(self, note_id: str) -> NoteItem:
        note = self._note(note_id)
        note.is_completed = True
        self._commit()
        return note

    def delete_note(self, note_id: str) -> None:
        self._note(note_id)
        self.profile.notes = [n for n in self.profile.notes if n.id != note_id]
        self._commit()

    def active_notes(self) -> List[NoteItem]:
        return sorted((n for n in self.profile.notes if not n.is_completed), key=lambda n: n.created_at, reverse=True)

    def archived_notes(self) -> List[NoteItem]:
        return sorted((n for n in self.profile.notes if n.is_completed), key=lambda n: n.created_at, reverse=True)

    # ---- profile & preferences ----

    def update_profile(self, **fields) -> UserProfile:
        allowed = {"email", "avatar", "password"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"cannot update fields: {sorted(unknown)}")
        for key, value in fields.items():
            setattr(self.profile, key, value)
        return self._commit()

    def update_preferences(self, **fields) -> UserProfile:
        prefs = self.profile.preferences
        for key, value in fields.items():
            if key == "notifications":
                current = prefs.notifications.model_dump()
                current.update(value)
                prefs.notifications = type(prefs.notifications)(**current)
            elif key in type(prefs).model_fields:
                setattr(prefs, key, value)
            else:
                raise ValueError(f"unknown preference: {key}")
        return self._commit()

    # ---- rollover ----

    def weekly_reset(self, today: Optional[date] = None) -> bool:
        """Archive last week's score and clear completion flags once per week."""
        changed = self._reset_week(today or self.today())
        if changed:
            self._commit()
        return changed

    def _reset_week(self, today: date) -> bool:
        monday = reports.monday_of(today).isoformat()
        if self.profile.last_reset_date == monday:
            return False
        logger.info("profile.weekly_reset user=%s week=%s", self.profile.username, monday)
        self.profile.last_week_stats = reports.archive_week(self.profile.schedule, today)
        for slots in self.profile.schedule.values():
            for slot in slots:
                slot.is_completed = False
        self.profile.last_reset_date = monday
        return True

    def roll_water_day(self, today: Optional[date] = None) -> bool:
        changed = self._roll_water(today or self.today())
        if changed:
            self._commit()
        return changed

    def _roll_water(self, today: date) -> bool:
        if self.profile.water_config is None:
            return False
        return water.roll_day(self.profile.water_config, today)

    def roll_day(self, today: Optional[date] = None) -> bool:
        """Daily housekeeping: water progress and the weekly reset."""
        today = today or self.today()
        changed = self._roll_water(today)
        changed = self._reset_week(today) or changed
        if changed:
            self._commit()
        return changed


class LocalStateFile:
    """JSON file standing in for the browser's local storage.

    Holds the two keys the client uses: the active username and the map of
    every profile known on this device.
    """

    ACTIVE_KEY = "orbit_active_user"
    USERS_KEY = "orbit_users"

    def __init__(self, path: os.PathLike | str):
        self.path = Path(path)

    def _read(self) -> dict:
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            logger.warning("state.read corrupt file=%s; starting empty", self.path)
            return {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=".orbit-state-")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2)
        os.replace(tmp, self.path)

    def load(self) -> Tuple[Optional[str], Dict[str, UserProfile]]:
        data = self._read()
        users = {name: UserProfile.model_validate(raw) for name, raw in data.get(self.USERS_KEY, {}).items()}
        return data.get(self.ACTIVE_KEY), users

    def save_profile(self, profile: UserProfile) -> None:
        data = self._read()
        data.setdefault(self.USERS_KEY, {})[profile.username] = profile.to_json()
        self._write(data)

    def set_active_user(self, username: Optional[str]) -> None:
        data = self._read()
        if username is None:
            data.pop(self.ACTIVE_KEY, None)
        else:
            data[self.ACTIVE_KEY] = username
        self._write(data)

    __call__ = save_profile


__all__ = ["ProfileStore", "LocalStateFile", "SlotNotFound", "new_profile", "make_id"]
