from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Iterable

from . import settings
from .body_metrics import bmi_summary
from .buckets import WINDOW_DAYS, DayBucket, bucket_week, parse_timestamp
from .db import LOCAL_TZ, iso
from .profile import missing_profile_fields
from .store import StoreError, select

log = logging.getLogger(__name__)

STREAK_LOOKBACK_DAYS = 30

# (threshold, tier) checked top-down.
PROGRESS_TIERS = (
    (100.0, "green"),
    (75.0, "blue"),
    (50.0, "yellow"),
)
PROGRESS_TIER_FLOOR = "red"


class Metric(str, Enum):
    CALORIES = "calories"
    WATER_ML = "water_ml"


# table, value column
METRIC_SOURCES: dict[Metric, tuple[str, str]] = {
    Metric.CALORIES: ("meals", "calories"),
    Metric.WATER_ML: ("water_intake", "amount_ml"),
}


@dataclass(frozen=True)
class IntakeRecord:
    timestamp: datetime
    value: float
    metric: Metric


@dataclass(frozen=True)
class GoalProfile:
    daily_calorie_goal: float | None = None
    daily_water_goal_ml: float = settings.DEFAULT_DAILY_WATER_GOAL_ML

    @classmethod
    def from_profile(cls, profile: dict[str, Any] | None) -> "GoalProfile":
        profile = profile or {}
        cal = profile.get("daily_calorie_goal")
        water = profile.get("daily_water_goal_ml")
        return cls(
            daily_calorie_goal=float(cal) if cal else None,
            daily_water_goal_ml=float(water) if water else settings.DEFAULT_DAILY_WATER_GOAL_ML,
        )


@dataclass(frozen=True)
class Progress:
    raw: float
    display: float

    @property
    def tier(self) -> str:
        return progress_tier(self.raw)

    def as_dict(self) -> dict[str, Any]:
        return {"raw": self.raw, "display": self.display, "tier": self.tier}


@dataclass
class MetricTotal:
    metric: Metric
    total: float = 0.0
    error: str | None = None
    weekly_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.weekly_error is None

    def errors(self) -> list[str]:
        return [e for e in (self.error, self.weekly_error) if e]


def progress_ratio(total: float, goal: float | None) -> Progress:
    """Consumed/goal as a percentage. The display value is clamped to [0, 100]."""
    if not goal or goal <= 0:
        return Progress(raw=0.0, display=0.0)
    raw = float(total) / float(goal) * 100.0
    return Progress(raw=raw, display=min(max(raw, 0.0), 100.0))


def progress_tier(percent: float) -> str:
    for threshold, tier in PROGRESS_TIERS:
        if percent >= threshold:
            return tier
    return PROGRESS_TIER_FLOOR


def _aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=LOCAL_TZ)
    return dt


def start_of_day(now: datetime) -> datetime:
    now = _aware(now)
    return datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)


def total_today(records: Iterable[IntakeRecord], now: datetime) -> float:
    midnight = start_of_day(now)
    return float(sum(r.value for r in records if r.timestamp >= midnight))


def weekly_average(records: Iterable[IntakeRecord], now: datetime) -> float:
    """Sum over the last 7 days divided by 7, whether or not every day has data."""
    cutoff = _aware(now) - timedelta(days=WINDOW_DAYS)
    return float(sum(r.value for r in records if r.timestamp >= cutoff)) / WINDOW_DAYS


def rows_to_records(rows: Iterable[dict[str, Any]], metric: Metric) -> list[IntakeRecord]:
    _table, column = METRIC_SOURCES[metric]
    out: list[IntakeRecord] = []
    for r in rows:
        ts = parse_timestamp(r.get("time"))
        v = r.get(column)
        if ts is None or v is None:
            continue
        try:
            out.append(IntakeRecord(timestamp=ts, value=float(v), metric=metric))
        except (TypeError, ValueError):
            continue
    return out


def fetch_records(user_id: str, metric: Metric, since: datetime) -> list[IntakeRecord]:
    table, column = METRIC_SOURCES[metric]
    rows = select(
        table,
        {"user_id": user_id},
        columns=(column, "time"),
        since=("time", iso(since)),
    )
    return rows_to_records(rows, metric)


def today_totals(
    user_id: str,
    now: datetime,
    fetch: Callable[[str, Metric, datetime], list[IntakeRecord]] = fetch_records,
) -> dict[Metric, MetricTotal]:
    """Today's total per metric. A failed fetch leaves that metric at 0 with an error."""
    now = _aware(now)
    midnight = start_of_day(now)
    totals: dict[Metric, MetricTotal] = {}
    for metric in Metric:
        result = MetricTotal(metric=metric)
        try:
            result.total = total_today(fetch(user_id, metric, midnight), now)
        except StoreError as exc:
            log.warning("today's %s unavailable for %s: %s", metric.value, user_id, exc)
            result.error = f"Failed to fetch {metric.value} data"
        totals[metric] = result
    return totals


def metric_totals(
    user_id: str,
    now: datetime,
    fetch: Callable[[str, Metric, datetime], list[IntakeRecord]] = fetch_records,
) -> tuple[dict[Metric, MetricTotal], dict[Metric, list[IntakeRecord]]]:
    """Today's totals and the trailing week's records, one metric at a time.

    A failed fetch for one metric is recorded on that metric's MetricTotal
    (``error`` for today, ``weekly_error`` for the week) and does not stop
    the other one.
    """
    now = _aware(now)
    week_start = now - timedelta(days=WINDOW_DAYS)
    totals = today_totals(user_id, now, fetch=fetch)
    weekly: dict[Metric, list[IntakeRecord]] = {}
    for metric in Metric:
        try:
            weekly[metric] = fetch(user_id, metric, week_start)
        except StoreError as exc:
            log.warning("weekly %s unavailable for %s: %s", metric.value, user_id, exc)
            totals[metric].weekly_error = f"Failed to fetch weekly {metric.value} data"
            weekly[metric] = []
    return totals, weekly


def logging_streak(user_id: str, now: datetime, *, lookback_days: int = STREAK_LOOKBACK_DAYS) -> int:
    """Consecutive days ending today with at least one meal."""
    midnight = start_of_day(now)
    rows = select(
        "meals",
        {"user_id": user_id},
        columns=("time",),
        since=("time", iso(midnight - timedelta(days=lookback_days - 1))),
    )
    logged_days = set()
    for r in rows:
        ts = parse_timestamp(r.get("time"))
        if ts is not None:
            logged_days.add(ts.astimezone(midnight.tzinfo).date())

    streak = 0
    day = midnight.date()
    while streak < lookback_days and day in logged_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def _with_day_progress(week: list[DayBucket], goals: GoalProfile) -> list[DayBucket]:
    for bucket in week:
        p = progress_ratio(bucket.calorie_total, goals.daily_calorie_goal)
        bucket.extra["calorieProgress"] = p.as_dict()
    return week


def build_dashboard(session: Any, now: datetime | None = None, *, mode: str | None = None) -> dict[str, Any]:
    """Everything the overview page shows for one user."""
    now = _aware(now or datetime.now(timezone.utc).astimezone(LOCAL_TZ))
    mode = mode or settings.WEEKLY_BUCKETING
    profile = session.profile.as_dict() if session.profile else None
    goals = GoalProfile.from_profile(profile)

    totals, weekly = metric_totals(session.user_id, now)
    calories = totals[Metric.CALORIES]
    water = totals[Metric.WATER_ML]

    week = bucket_week(
        now,
        ((r.timestamp, r.value) for r in weekly[Metric.CALORIES]),
        ((r.timestamp, r.value) for r in weekly[Metric.WATER_ML]),
        mode=mode,
    )
    _with_day_progress(week, goals)

    errors = [e for t in totals.values() for e in t.errors()]
    try:
        streak = logging_streak(session.user_id, now)
    except StoreError as exc:
        log.warning("streak unavailable for %s: %s", session.user_id, exc)
        streak = 0

    return {
        "date": start_of_day(now).date().isoformat(),
        "calories": {
            "total": calories.total,
            "goal": goals.daily_calorie_goal,
            "progress": progress_ratio(calories.total, goals.daily_calorie_goal).as_dict(),
            "weeklyAverage": round(weekly_average(weekly[Metric.CALORIES], now)),
        },
        "water": {
            "total": water.total,
            "goal": goals.daily_water_goal_ml,
            "progress": progress_ratio(water.total, goals.daily_water_goal_ml).as_dict(),
            "weeklyAverage": round(weekly_average(weekly[Metric.WATER_ML], now)),
        },
        "weekly": [b.as_dict() for b in week],
        "bucketing": mode,
        "bmi": bmi_summary(
            profile.get("height_cm") if profile else None,
            profile.get("weight_kg") if profile else None,
        ),
        "streak": streak,
        "activityLevel": (profile or {}).get("activity_level"),
        "missingProfileFields": missing_profile_fields(profile),
        "errors": errors,
    }
