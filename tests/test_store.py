from __future__ import annotations

import importlib
import os
import tempfile
import unittest
from datetime import date


class StoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self._tmp.name, "test_store.db")
        self._old_db_path = os.environ.get("DB_PATH")
        os.environ["DB_PATH"] = self.db_path

        import healthtrack.db as db_mod
        importlib.reload(db_mod)
        import healthtrack.store as store_mod

        db_mod.init_db()
        self.store = store_mod

    def tearDown(self) -> None:
        if self._old_db_path is None:
            os.environ.pop("DB_PATH", None)
        else:
            os.environ["DB_PATH"] = self._old_db_path
        self._tmp.cleanup()

    def _meal(self, user_id: str, calories: float, time: str) -> int:
        return self.store.insert(
            "meals",
            {"user_id": user_id, "name": "m", "calories": calories, "time": time, "created_at": time},
        )

    def test_select_filters_and_since(self) -> None:
        self._meal("u1", 100, "2026-10-18T10:00:00+00:00")
        self._meal("u1", 200, "2026-10-19T10:00:00+00:00")
        self._meal("u2", 300, "2026-10-19T11:00:00+00:00")

        rows = self.store.select(
            "meals",
            {"user_id": "u1"},
            columns=("calories", "time"),
            since=("time", "2026-10-19T00:00:00+00:00"),
        )
        self.assertEqual(rows, [{"calories": 200.0, "time": "2026-10-19T10:00:00+00:00"}])

    def test_order_and_limit(self) -> None:
        self._meal("u1", 2, "2026-10-19T10:00:00+00:00")
        self._meal("u1", 1, "2026-10-18T10:00:00+00:00")
        rows = self.store.select("meals", {"user_id": "u1"}, order_by="time", limit=1)
        self.assertEqual(rows[0]["calories"], 1.0)

    def test_unknown_table_or_column_is_rejected(self) -> None:
        with self.assertRaises(self.store.StoreError):
            self.store.select("users")
        with self.assertRaises(self.store.StoreError):
            self.store.select("meals", {"user_id; DROP TABLE meals": "x"})
        with self.assertRaises(self.store.StoreError):
            self.store.insert("meals", {"bogus": 1})

    def test_write_failure_surfaces_as_store_error(self) -> None:
        # name is NOT NULL
        with self.assertRaises(self.store.StoreError):
            self.store.insert("meals", {"user_id": "u1", "calories": 1, "time": "t", "created_at": "t"})

    def test_upsert_replaces_on_conflict(self) -> None:
        row = {"user_id": "u1", "age": 30, "updated_at": "2026-10-19T00:00:00+00:00"}
        self.store.upsert("user_profiles", row, "user_id")
        self.store.upsert("user_profiles", {**row, "age": 31}, "user_id")
        rows = self.store.select("user_profiles", {"user_id": "u1"})
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["age"], 31)

    def test_delete_requires_filters(self) -> None:
        with self.assertRaises(self.store.StoreError):
            self.store.delete("meals", {})


class RemindersTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self._tmp.name, "test_reminders.db")
        self._old_db_path = os.environ.get("DB_PATH")
        os.environ["DB_PATH"] = self.db_path

        import healthtrack.db as db_mod
        importlib.reload(db_mod)
        import healthtrack.reminders as reminders_mod
        from healthtrack.profile import SessionContext

        db_mod.init_db()
        self.reminders = reminders_mod
        self.alice = SessionContext(user_id="alice")
        self.bob = SessionContext(user_id="bob")

    def tearDown(self) -> None:
        if self._old_db_path is None:
            os.environ.pop("DB_PATH", None)
        else:
            os.environ["DB_PATH"] = self._old_db_path
        self._tmp.cleanup()

    def test_create_and_list_in_time_order(self) -> None:
        day = date(2026, 10, 19)
        self.reminders.create_reminder(self.alice, reminder_type="meal", time_of_day="18:30", today=day)
        self.reminders.create_reminder(self.alice, reminder_type="water", time_of_day="08:00", today=day)
        rows = self.reminders.list_reminders(self.alice)
        self.assertEqual([r["reminder_type"] for r in rows], ["water", "meal"])
        self.assertEqual(rows[0]["status"], "pending")
        self.assertIn("hydrate", rows[0]["message"])
        self.assertEqual(self.reminders.list_reminders(self.bob), [])

    def test_delete_is_owner_scoped(self) -> None:
        row = self.reminders.create_reminder(self.alice, reminder_type="goal", time_of_day="12:00")
        self.assertFalse(self.reminders.delete_reminder(self.bob, row["id"]))
        self.assertTrue(self.reminders.delete_reminder(self.alice, row["id"]))
        self.assertFalse(self.reminders.delete_reminder(self.alice, row["id"]))

    def test_invalid_input(self) -> None:
        with self.assertRaises(ValueError):
            self.reminders.create_reminder(self.alice, reminder_type="sleep", time_of_day="12:00")
        with self.assertRaises(ValueError):
            self.reminders.create_reminder(self.alice, reminder_type="water", time_of_day="25:00")
        with self.assertRaises(ValueError):
            self.reminders.create_reminder(self.alice, reminder_type="water", time_of_day="noon")


if __name__ == "__main__":
    unittest.main()
