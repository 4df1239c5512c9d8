import os
import sys
import unittest
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import (
    ExerciseSheetRepository,
    HistorySheetRepository,
    KeyValueRepository,
    LogRepository,
)
from models import LogEntry, Side


class RepositoryTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_repositories.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def test_key_value_scopes(self) -> None:
        mine = KeyValueRepository(self.db_path, scope="me")
        theirs = KeyValueRepository(self.db_path, scope="coach")
        mine.set("statuses", {"2026-02-04": "膝蓋輕鬆"})
        mine.set("statuses", {"2026-02-04": "痠"})
        self.assertEqual(mine.get("statuses"), {"2026-02-04": "痠"})
        self.assertIsNone(theirs.get("statuses"))
        self.assertEqual(theirs.get("statuses", {}), {})

    def test_corrupt_value_falls_back(self) -> None:
        repo = KeyValueRepository(self.db_path)
        repo.execute(
            "INSERT INTO kv_store (scope, key, value) VALUES (?, ?, ?);",
            ("default", "logs", "{not json"),
        )
        with self.assertLogs("db", level="WARNING"):
            self.assertEqual(repo.get("logs", []), [])

    def test_log_repository_round_trip(self) -> None:
        repo = LogRepository(self.db_path)
        entry = LogEntry(
            date="2026-02-04",
            exercise_name="弓箭步",
            category="器械與負重 (Gym & Weights)",
            side=Side.LEFT,
            sets=3,
            value="10kg 8下",
            unit="組",
            notes="慢",
        )
        repo.save_entries([entry])
        repo.save_statuses({"2026-02-04": "膝蓋輕鬆"})
        stored = repo.get(LogRepository.LOGS_KEY)
        self.assertEqual(stored[0]["exerciseName"], "弓箭步")
        self.assertEqual(stored[0]["side"], "左")
        self.assertEqual(repo.load_entries(), [entry])
        self.assertEqual(repo.load_statuses(), {"2026-02-04": "膝蓋輕鬆"})

    def test_exercise_sheet_rows(self) -> None:
        repo = ExerciseSheetRepository(self.db_path)
        repo.add("a", "橋式", "物理治療與穩定 (PT & Stability)")
        repo.add("b", "弓箭步", "器械與負重 (Gym & Weights)", "TRUE", "STRENGTH", "", "8")
        rows = repo.fetch_rows()
        self.assertEqual([r["id"] for r in rows], ["a", "b"])
        self.assertEqual(rows[1]["isUnilateral"], "TRUE")
        self.assertEqual(rows[1]["defaultQuantity"], "8")
        self.assertEqual(rows[0]["mode"], "REPS_ONLY")
        repo.delete_all()
        self.assertEqual(repo.fetch_rows(), [])

    def test_history_upsert(self) -> None:
        repo = HistorySheetRepository(self.db_path)
        self.assertEqual(repo.upsert("2026-02-03", "深蹲: 10下 x3組"), "SUCCESS: Inserted New Row")
        self.assertEqual(repo.upsert(" 2026-02-04 ", "[休息]"), "SUCCESS: Inserted New Row")
        self.assertEqual(repo.find_row("2026-02-04"), 3)
        self.assertEqual(repo.upsert("2026-02-04", "[改了]"), "SUCCESS: Updated Row 3")
        self.assertEqual(
            repo.fetch_rows(),
            [
                {"date": "2026-02-03", "content": "深蹲: 10下 x3組"},
                {"date": "2026-02-04", "content": "[改了]"},
            ],
        )
        self.assertIsNone(repo.find_row("2026-03-01"))


if __name__ == "__main__":
    unittest.main()
