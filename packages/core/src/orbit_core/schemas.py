"""Profile data model shared by the store, the API and the background jobs.

The JSON shape uses camelCase keys (the client mirrors it verbatim into local
storage and the cloud row), the Python side uses snake_case attributes.
"""
from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DAYS_OF_WEEK = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

Category = Literal["Physical", "Academic", "Coding", "Creative", "Rest", "Logistics"]
ClassType = Literal["Lecture", "Lab", "Tutorial"]
Priority = Literal["low", "medium", "high"]
ThemeMode = Literal["dark", "light", "system"]


class OrbitModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class ScheduleSlot(OrbitModel):
    id: str
    time_range: str
    title: str
    category: Category
    is_completed: bool = False
    description: Optional[str] = None
    notes: Optional[str] = None


class ClassSession(OrbitModel):
    id: str
    subject: str
    type: ClassType = "Lecture"
    professor: str = ""
    venue: str = ""
    batch: str = ""
    start_time: str
    end_time: str = ""


class WaterConfig(OrbitModel):
    daily_goal: float = 3.0
    adaptive_mode: bool = False
    last_date: str = ""
    progress: List[str] = Field(default_factory=list)


class NotificationPreferences(OrbitModel):
    water: bool = True
    schedule: bool = True
    academic: bool = True


class UserPreferences(OrbitModel):
    theme: ThemeMode = "dark"
    start_of_week: str = "Monday"
    time_format: str = "12h"
    sound_enabled: bool = True
    reduced_motion: bool = False
    haptics: bool = True
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)


class NoteItem(OrbitModel):
    id: str
    title: str
    content: str = ""
    priority: Priority = "medium"
    is_completed: bool = False
    created_at: str


class WeeklyStats(OrbitModel):
    completed: int
    total: int
    percentage: int
    date_range: str


class DayCounter(OrbitModel):
    completed: int = 0
    total: int = 0


def _blank_week() -> Dict[str, list]:
    return {day: [] for day in DAYS_OF_WEEK}


class UserProfile(OrbitModel):
    username: str
    password: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    joined_date: str
    schedule: Dict[str, List[ScheduleSlot]] = Field(default_factory=_blank_week)
    academic_schedule: Dict[str, List[ClassSession]] = Field(default_factory=_blank_week)
    water_config: Optional[WaterConfig] = None
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    notes: List[NoteItem] = Field(default_factory=list)
    last_reset_date: Optional[str] = None
    last_week_stats: Optional[WeeklyStats] = None
    daily_stats: Dict[str, DayCounter] = Field(default_factory=dict)


__all__ = [
    "DAYS_OF_WEEK",
    "Category",
    "ClassType",
    "Priority",
    "OrbitModel",
    "ScheduleSlot",
    "ClassSession",
    "WaterConfig",
    "NotificationPreferences",
    "UserPreferences",
    "NoteItem",
    "WeeklyStats",
    "DayCounter",
    "UserProfile",
]
