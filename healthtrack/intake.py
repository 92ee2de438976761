from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .db import iso, now_iso
from .profile import SessionContext
from .store import insert, select

COMMON_MEALS: tuple[dict[str, Any], ...] = (
    {"name": "Oatmeal Bowl", "calories": 300},
    {"name": "Grilled Chicken", "calories": 250},
    {"name": "Caesar Salad", "calories": 350},
    {"name": "Pasta Carbonara", "calories": 550},
    {"name": "Greek Yogurt", "calories": 150},
    {"name": "Protein Shake", "calories": 200},
    {"name": "Salmon Fillet", "calories": 400},
    {"name": "Veggie Wrap", "calories": 320},
)

QUICK_WATER_AMOUNTS_ML = (250, 500, 750, 1000)


def log_meal(session: SessionContext, *, name: str, calories: float, time: datetime | None = None) -> dict:
    row = {
        "user_id": session.user_id,
        "name": name,
        "calories": float(calories),
        "time": iso(time or datetime.now(timezone.utc)),
        "created_at": now_iso(),
    }
    row["id"] = insert("meals", row)
    return row


def log_water(session: SessionContext, *, amount_ml: float, time: datetime | None = None) -> dict:
    row = {
        "user_id": session.user_id,
        "amount_ml": float(amount_ml),
        "time": iso(time or datetime.now(timezone.utc)),
        "created_at": now_iso(),
    }
    row["id"] = insert("water_intake", row)
    return row


def list_meals(session: SessionContext, *, since: datetime | None = None) -> list[dict]:
    return select(
        "meals",
        {"user_id": session.user_id},
        since=("time", iso(since)) if since else None,
        order_by="time",
    )


def list_water(session: SessionContext, *, since: datetime | None = None) -> list[dict]:
    return select(
        "water_intake",
        {"user_id": session.user_id},
        since=("time", iso(since)) if since else None,
        order_by="time",
    )
