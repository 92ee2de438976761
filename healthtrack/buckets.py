from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable

WINDOW_DAYS = 7

# Indexed by date.isoweekday() % 7, i.e. Sunday first.
DAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

MODE_WEEKDAY = "weekday"
MODE_CALENDAR = "calendar"


@dataclass
class DayBucket:
    day_label: str
    date: date
    calorie_total: float = 0.0
    water_total: float = 0.0
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        out = {
            "day": self.day_label,
            "date": self.date.isoformat(),
            "calories": self.calorie_total,
            "water": self.water_total,
        }
        out.update(self.extra)
        return out


def day_label(d: date) -> str:
    return DAY_LABELS[d.isoweekday() % 7]


def parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _to_value(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _local_date(dt: datetime, today: datetime) -> date:
    if today.tzinfo is None:
        return dt.date()
    return dt.astimezone(today.tzinfo).date()


def day_offset(record_day: date, today_day: date, mode: str = MODE_WEEKDAY) -> int:
    """Slot index of ``record_day`` in the window ending at ``today_day`` (6 = today).

    The weekday mode only looks at the day of week, so anything that shares
    today's weekday lands in today's slot no matter how old it is.
    """
    if mode == MODE_CALENDAR:
        return (WINDOW_DAYS - 1) - (today_day - record_day).days
    if mode != MODE_WEEKDAY:
        raise ValueError(f"Unknown bucketing mode: {mode}")
    return (record_day.isoweekday() - today_day.isoweekday() + (WINDOW_DAYS - 1)) % WINDOW_DAYS


def empty_week(today: datetime) -> list[DayBucket]:
    today_day = today.date()
    return [
        DayBucket(day_label=day_label(d), date=d)
        for d in (today_day - timedelta(days=(WINDOW_DAYS - 1) - i) for i in range(WINDOW_DAYS))
    ]


def bucket_values(
    today: datetime,
    records: Iterable[tuple[Any, Any]],
    *,
    mode: str = MODE_WEEKDAY,
) -> list[float]:
    """Sum ``(timestamp, value)`` pairs into the 7 slots ending at ``today``."""
    today_day = today.date()
    totals = [0.0] * WINDOW_DAYS
    for ts, raw in records:
        dt = parse_timestamp(ts)
        value = _to_value(raw)
        if dt is None or value is None:
            continue
        idx = day_offset(_local_date(dt, today), today_day, mode)
        if 0 <= idx < WINDOW_DAYS:
            totals[idx] += value
    return totals


def bucket_week(
    today: datetime,
    calories: Iterable[tuple[Any, Any]] = (),
    water: Iterable[tuple[Any, Any]] = (),
    *,
    mode: str = MODE_WEEKDAY,
) -> list[DayBucket]:
    """Seven DayBuckets, oldest first, for the days ``today-6 .. today``."""
    week = empty_week(today)
    for bucket, kcal, ml in zip(
        week,
        bucket_values(today, calories, mode=mode),
        bucket_values(today, water, mode=mode),
    ):
        bucket.calorie_total = kcal
        bucket.water_total = ml
    return week
