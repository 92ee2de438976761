from __future__ import annotations

from datetime import date, datetime, time

from .db import LOCAL_TZ, iso, now_iso
from .profile import SessionContext
from .store import delete, insert, select

# Reminders are stored only; nothing sends them.
REMINDER_MESSAGES = {
    "water": "💧 Time to hydrate! Don't forget to drink water.",
    "meal": "🍽️ Time for a healthy meal! Log your food to stay on track.",
    "goal": "🎯 Check your daily progress! How are you doing with your goals?",
}


def parse_time_of_day(value: str) -> time:
    """'HH:MM' -> time; ValueError on anything else."""
    hours, sep, minutes = value.strip().partition(":")
    if not sep or not hours.isdigit() or not minutes.isdigit():
        raise ValueError(f"Invalid time of day: {value!r}")
    return time(int(hours), int(minutes))


def create_reminder(
    session: SessionContext,
    *,
    reminder_type: str,
    time_of_day: str,
    today: date | None = None,
) -> dict:
    message = REMINDER_MESSAGES.get(reminder_type)
    if message is None:
        raise ValueError(f"Unknown reminder type: {reminder_type}")

    day = today or datetime.now(LOCAL_TZ).date()
    scheduled = datetime.combine(day, parse_time_of_day(time_of_day), tzinfo=LOCAL_TZ)
    row = {
        "user_id": session.user_id,
        "reminder_type": reminder_type,
        "message": message,
        "scheduled_time": iso(scheduled),
        "status": "pending",
        "created_at": now_iso(),
    }
    row["id"] = insert("reminders", row)
    return row


def list_reminders(session: SessionContext) -> list[dict]:
    return select("reminders", {"user_id": session.user_id}, order_by="scheduled_time")


def delete_reminder(session: SessionContext, reminder_id: int) -> bool:
    # Scoped by user_id so one user cannot remove another's rows.
    return delete("reminders", {"id": reminder_id, "user_id": session.user_id}) > 0
