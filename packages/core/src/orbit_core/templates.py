"""Seed data for new profiles.

Ordinary users start with a blank week; the owner account is seeded with the
routine and timetable below.
"""
from __future__ import annotations

from typing import Dict, List

from orbit_core.schemas import DAYS_OF_WEEK, ClassSession, ScheduleSlot

_ROUTINE = {
    "Monday": [
        ("07:30 AM - 07:35 AM", "Wake Up & Hydrate", "Physical", "Do not snooze."),
        ("07:35 AM - 08:05 AM", "Warmup", "Physical", None),
        ("08:05 AM - 09:05 AM", "Gym Session", "Physical", None),
        ("09:05 AM - 09:40 AM", "Get Ready", "Logistics", "Outfit laid out night before."),
        ("09:40 AM - 10:00 AM", "Breakfast", "Physical", None),
        ("10:00 AM - 01:00 PM", "Class / Lectures", "Academic", None),
        ("01:00 PM - 02:00 PM", "Lunch Break", "Rest", None),
        ("06:00 PM - 07:30 PM", "Study Session", "Academic", "Tackle hardest subjects."),
        ("07:30 PM - 08:30 PM", "Coding", "Coding", None),
        ("09:45 PM - 10:45 PM", "Editing Work", "Creative", None),
    ],
    "Tuesday": [
        ("07:30 AM - 08:40 AM", "Wake Up & Get Ready", "Logistics", None),
        ("08:40 AM - 09:00 AM", "Breakfast", "Physical", None),
        ("09:00 AM - 11:00 AM", "Academic Block I", "Academic", None),
        ("11:00 AM - 12:00 PM", "Coding Session", "Coding", None),
        ("01:00 PM - 02:00 PM", "Lunch", "Rest", None),
        ("07:00 PM - 09:00 PM", "Study Session", "Academic", None),
        ("10:00 PM - 11:30 PM", "Edit Work", "Creative", None),
        ("12:30 AM", "Sleep", "Physical", "Critical for recovery."),
    ],
    "Wednesday": [
        ("07:40 AM - 08:40 AM", "Gym Session", "Physical", None),
        ("08:40 AM - 09:00 AM", "Breakfast", "Physical", "Mess closes at 9:00!"),
        ("10:00 AM - 11:00 AM", "Class", "Academic", None),
        ("11:00 AM - 12:00 PM", "The Coding Hour", "Coding", None),
        ("07:00 PM - 08:30 PM", "Study Session", "Academic", None),
        ("10:00 PM - 11:00 PM", "Editing", "Creative", None),
    ],
    "Thursday": [
        ("08:00 AM - 08:30 AM", "Morning Routine", "Logistics", None),
        ("08:30 AM - 09:30 AM", "Study Session", "Academic", None),
        ("11:00 AM - 01:00 PM", "Class (Fixed)", "Academic", None),
        ("05:30 PM - 06:30 PM", "Gym Session", "Physical", None),
        ("07:00 PM - 08:00 PM", "Coding", "Coding", None),
    ],
    "Friday": [
        ("07:30 AM - 08:40 AM", "Wake Up & Get Ready", "Logistics", None),
        ("09:00 AM - 11:00 AM", "Class Block 1", "Academic", None),
        ("11:00 AM - 12:00 PM", "Coding Hour", "Coding", None),
        ("07:00 PM - 08:30 PM", "Study Session", "Academic", None),
    ],
    "Saturday": [
        ("07:30 AM - 08:00 AM", "Wake Up & Hydrate", "Physical", None),
        ("09:00 AM - 01:00 PM", "Class", "Academic", None),
        ("04:00 PM - 05:00 PM", "Gym Session", "Physical", None),
        ("05:30 PM - 07:30 PM", "Deep Study", "Academic", None),
        ("10:00 PM - 11:00 PM", "Coding", "Coding", None),
    ],
    "Sunday": [
        ("All Day", "App Work & Certificates", "Coding", None),
    ],
}

_TIMETABLE = {
    "Monday": [
        ("Science of Happiness", "Lecture", "Dr. Badri Bajaj", "FF8", "10:00 AM", "10:50 AM"),
        ("Telecommunication Networks", "Lecture", "Dr Radha Raman Pandey", "FF7", "11:00 AM", "11:50 AM"),
        ("Analog and Digital Communication", "Lecture", "Vishal Narain Saxena", "FF5", "03:00 PM", "03:50 PM"),
    ],
    "Tuesday": [
        ("Digital Signal Processing", "Lecture", "Joysmita", "FF6", "09:00 AM", "09:50 AM"),
        ("Information Theory and Applications", "Lecture", "Simmi Sharma", "FF5", "12:00 PM", "12:50 PM"),
        ("Digital Signal Processing", "Tutorial", "Jyoti Mishra", "TS17", "04:00 PM", "04:50 PM"),
    ],
    "Wednesday": [
        ("Analogue Electronics", "Lecture", "Dr Hemant Kumar", "FF5", "12:00 PM", "12:50 PM"),
        ("15B11EC471", "Lab", "Dr. Rituraj, Astha Sharma", "EDC", "03:00 PM", "04:50 PM"),
    ],
    "Thursday": [
        ("15B17EC473", "Lab", "Dr. Vijay Khare", "SPL", "11:00 AM", "12:50 PM"),
    ],
    "Friday": [
        ("Telecommunication Networks", "Lecture", "Dr Radha Raman Pandey", "G4", "10:00 AM", "10:50 AM"),
        ("18B15EC212", "Lab", "Dr. Reema Buddhiraja, Dr. Smriti Kalia", "ADC", "03:00 PM", "04:50 PM"),
    ],
    "Saturday": [
        ("Information Theory and Applications", "Lecture", "Simmi Sharma", "FF6", "09:00 AM", "09:50 AM"),
    ],
    "Sunday": [],
}


def owner_schedule() -> Dict[str, List[ScheduleSlot]]:
    week: Dict[str, List[ScheduleSlot]] = {}
    for day in DAYS_OF_WEEK:
        week[day] = [
            ScheduleSlot(id=f"{day[:3]}-{i}", time_range=tr, title=title, category=cat, notes=notes)
            for i, (tr, title, cat, notes) in enumerate(_ROUTINE.get(day, []), start=1)
        ]
    return week


def owner_timetable() -> Dict[str, List[ClassSession]]:
    week: Dict[str, List[ClassSession]] = {}
    for day in DAYS_OF_WEEK:
        week[day] = [
            ClassSession(
                id=f"{day[:2].lower()}-c{i}",
                subject=subject,
                type=kind,
                professor=prof,
                venue=venue,
                batch="A5",
                start_time=start,
                end_time=end,
            )
            for i, (subject, kind, prof, venue, start, end) in enumerate(_TIMETABLE.get(day, []), start=1)
        ]
    return week


__all__ = ["owner_schedule", "owner_timetable"]
