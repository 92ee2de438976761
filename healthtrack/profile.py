from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from . import settings
from .db import now_iso
from .store import select, upsert

PROFILE_FIELDS = (
    "height_cm",
    "weight_kg",
    "age",
    "gender",
    "activity_level",
    "goal",
    "daily_calorie_goal",
    "daily_water_goal_ml",
    "reminder_enabled",
)

# What onboarding asks for before the profile counts as complete.
REQUIRED_FIELDS = ("height_cm", "weight_kg", "age", "gender", "activity_level", "goal")


@dataclass(frozen=True)
class ProfileSnapshot:
    height_cm: float | None = None
    weight_kg: float | None = None
    age: int | None = None
    gender: str | None = None
    activity_level: str | None = None
    goal: str | None = None
    daily_calorie_goal: float | None = None
    daily_water_goal_ml: float = settings.DEFAULT_DAILY_WATER_GOAL_ML
    reminder_enabled: bool = False

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ProfileSnapshot":
        return cls(
            height_cm=row.get("height_cm"),
            weight_kg=row.get("weight_kg"),
            age=row.get("age"),
            gender=row.get("gender"),
            activity_level=row.get("activity_level"),
            # Older rows only carry goal_type.
            goal=row.get("goal") or row.get("goal_type"),
            daily_calorie_goal=row.get("daily_calorie_goal"),
            daily_water_goal_ml=row.get("daily_water_goal_ml") or settings.DEFAULT_DAILY_WATER_GOAL_ML,
            reminder_enabled=bool(row.get("reminder_enabled")),
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SessionContext:
    """The signed-in user and their profile as loaded for this request."""

    user_id: str
    profile: ProfileSnapshot | None = None


def get_profile(user_id: str) -> dict | None:
    """Stored profile row for ``user_id``; None if the user never saved one."""
    rows = select("user_profiles", {"user_id": user_id}, limit=1)
    if not rows:
        return None
    return rows[0]


def load_snapshot(user_id: str) -> ProfileSnapshot | None:
    row = get_profile(user_id)
    return ProfileSnapshot.from_row(row) if row else None


def upsert_profile(user_id: str, **kwargs) -> dict:
    """Partial update; keys not passed keep their stored value."""
    current = get_profile(user_id) or {}
    merged = {f: kwargs.get(f, current.get(f)) for f in PROFILE_FIELDS}
    if "goal_type" in kwargs and "goal" not in kwargs:
        merged["goal"] = kwargs["goal_type"]
    if merged.get("goal") is None:
        merged["goal"] = current.get("goal_type")
    if not merged.get("daily_water_goal_ml"):
        merged["daily_water_goal_ml"] = settings.DEFAULT_DAILY_WATER_GOAL_ML
    merged["reminder_enabled"] = 1 if merged.get("reminder_enabled") else 0
    merged["user_id"] = user_id
    merged["updated_at"] = now_iso()

    upsert("user_profiles", merged, "user_id")
    return get_profile(user_id)  # type: ignore[return-value]


def missing_profile_fields(profile: dict[str, Any] | None) -> list[str]:
    if not profile:
        return list(REQUIRED_FIELDS)
    missing = []
    for f in REQUIRED_FIELDS:
        value = profile.get(f)
        if f == "goal" and not value:
            value = profile.get("goal_type")
        if not value:
            missing.append(f)
    return missing
