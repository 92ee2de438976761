from __future__ import annotations

import logging
import sqlite3
from typing import Any, Iterable

from .db import db

log = logging.getLogger(__name__)

# Queryable tables and the columns callers may touch. Anything else is rejected
# before it reaches SQL.
TABLES: dict[str, tuple[str, ...]] = {
    "meals": ("id", "user_id", "name", "calories", "time", "created_at"),
    "water_intake": ("id", "user_id", "amount_ml", "time", "created_at"),
    "user_profiles": (
        "user_id",
        "height_cm",
        "weight_kg",
        "age",
        "gender",
        "activity_level",
        "goal",
        "goal_type",
        "daily_calorie_goal",
        "daily_water_goal_ml",
        "reminder_enabled",
        "updated_at",
    ),
    "reminders": (
        "id",
        "user_id",
        "reminder_type",
        "message",
        "scheduled_time",
        "sent_at",
        "status",
        "created_at",
    ),
}


class StoreError(RuntimeError):
    """A read or write against the store failed."""

    def __init__(self, table: str, message: str) -> None:
        super().__init__(f"{table}: {message}")
        self.table = table


def _check_columns(table: str, columns: Iterable[str]) -> list[str]:
    allowed = TABLES.get(table)
    if allowed is None:
        raise StoreError(table, "unknown table")
    cols = list(columns)
    for c in cols:
        if c not in allowed:
            raise StoreError(table, f"unknown column {c!r}")
    return cols


def select(
    table: str,
    filters: dict[str, Any] | None = None,
    *,
    columns: Iterable[str] | None = None,
    since: tuple[str, str] | None = None,
    until: tuple[str, str] | None = None,
    order_by: str | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Equality filters plus optional ``(column, value)`` lower/upper bounds.

    ``since`` is inclusive, ``until`` exclusive, matching how day windows are queried.
    """
    filters = filters or {}
    cols = _check_columns(table, columns or TABLES.get(table, ()))
    _check_columns(table, filters.keys())

    where: list[str] = []
    params: list[Any] = []
    for k, v in filters.items():
        where.append(f"{k} = ?")
        params.append(v)
    if since is not None:
        _check_columns(table, [since[0]])
        where.append(f"{since[0]} >= ?")
        params.append(since[1])
    if until is not None:
        _check_columns(table, [until[0]])
        where.append(f"{until[0]} < ?")
        params.append(until[1])

    sql = f"SELECT {', '.join(cols)} FROM {table}"
    if where:
        sql += " WHERE " + " AND ".join(where)
    if order_by:
        _check_columns(table, [order_by])
        sql += f" ORDER BY {order_by} ASC"
    if limit is not None:
        sql += " LIMIT ?"
        params.append(int(limit))

    try:
        with db() as conn:
            rows = conn.execute(sql, params).fetchall()
    except sqlite3.Error as exc:
        log.warning("select from %s failed: %s", table, exc)
        raise StoreError(table, str(exc)) from exc
    return [dict(r) for r in rows]


def insert(table: str, row: dict[str, Any]) -> int:
    """Insert one row and return its rowid."""
    cols = _check_columns(table, row.keys())
    placeholders = ",".join("?" for _ in cols)
    sql = f"INSERT INTO {table}({', '.join(cols)}) VALUES({placeholders})"
    try:
        with db() as conn:
            cur = conn.execute(sql, [row[c] for c in cols])
    except sqlite3.Error as exc:
        log.warning("insert into %s failed: %s", table, exc)
        raise StoreError(table, str(exc)) from exc
    return int(cur.lastrowid or 0)


def upsert(table: str, row: dict[str, Any], conflict_key: str) -> None:
    cols = _check_columns(table, row.keys())
    _check_columns(table, [conflict_key])
    if conflict_key not in row:
        raise StoreError(table, f"conflict key {conflict_key!r} missing from row")

    placeholders = ",".join("?" for _ in cols)
    updates = [f"{c}=excluded.{c}" for c in cols if c != conflict_key]
    sql = f"INSERT INTO {table}({', '.join(cols)}) VALUES({placeholders})"
    if updates:
        sql += f" ON CONFLICT({conflict_key}) DO UPDATE SET " + ", ".join(updates)
    else:
        sql += f" ON CONFLICT({conflict_key}) DO NOTHING"
    try:
        with db() as conn:
            conn.execute(sql, [row[c] for c in cols])
    except sqlite3.Error as exc:
        log.warning("upsert into %s failed: %s", table, exc)
        raise StoreError(table, str(exc)) from exc


def delete(table: str, filters: dict[str, Any]) -> int:
    """Delete matching rows; returns how many went away."""
    if not filters:
        raise StoreError(table, "refusing to delete without filters")
    cols = _check_columns(table, filters.keys())
    sql = f"DELETE FROM {table} WHERE " + " AND ".join(f"{c} = ?" for c in cols)
    try:
        with db() as conn:
            cur = conn.execute(sql, [filters[c] for c in cols])
    except sqlite3.Error as exc:
        log.warning("delete from %s failed: %s", table, exc)
        raise StoreError(table, str(exc)) from exc
    return cur.rowcount
