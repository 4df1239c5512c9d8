import os
import sqlite3
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import Database


class TestSchemaMigration:
    def test_drops_existing_backup_table(self, tmp_path):
        db_file = tmp_path / "test.db"
        conn = sqlite3.connect(str(db_file))
        conn.execute(
            "CREATE TABLE sheet_history (position INTEGER PRIMARY KEY AUTOINCREMENT, date TEXT NOT NULL)"
        )
        conn.execute("INSERT INTO sheet_history (date) VALUES ('2026-02-04')")
        conn.execute("CREATE TABLE sheet_history_old (position INTEGER)")
        conn.commit()
        conn.close()

        Database(str(db_file))

        conn = sqlite3.connect(str(db_file))
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='sheet_history_old'"
        )
        assert cur.fetchone() is None
        cur = conn.execute("PRAGMA table_info(sheet_history)")
        cols = [row[1] for row in cur.fetchall()]
        assert "content" in cols
        rows = conn.execute("SELECT date, content FROM sheet_history").fetchall()
        assert rows == [("2026-02-04", "")]
        conn.close()
