import sqlite3
import json
import logging
from contextlib import contextmanager
from typing import Any, List, Optional, Tuple

from models import LogEntry

logger = logging.getLogger(__name__)


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "kv_store": (
            """CREATE TABLE kv_store (
                    scope TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    PRIMARY KEY (scope, key)
                );""",
            ["scope", "key", "value"],
        ),
        "sheet_exercises": (
            """CREATE TABLE sheet_exercises (
                    position INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT '',
                    is_unilateral TEXT NOT NULL DEFAULT 'FALSE',
                    mode TEXT NOT NULL DEFAULT 'REPS_ONLY',
                    default_unit TEXT NOT NULL DEFAULT '',
                    default_quantity TEXT NOT NULL DEFAULT ''
                );""",
            [
                "position",
                "id",
                "name",
                "category",
                "is_unilateral",
                "mode",
                "default_unit",
                "default_quantity",
            ],
        ),
        "sheet_history": (
            """CREATE TABLE sheet_history (
                    position INTEGER PRIMARY KEY AUTOINCREMENT,
                    date TEXT NOT NULL,
                    content TEXT NOT NULL DEFAULT ''
                );""",
            ["position", "date", "content"],
        ),
    }

    def __init__(self, db_path: str = "rehab.db") -> None:
        self._db_path = db_path
        self._ensure_schema()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)
        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            conn.execute(f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;")
        conn.execute(f"DROP TABLE {table}_old;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _delete_all(self, table: str) -> None:
        self.execute(f"DELETE FROM {table};")


class KeyValueRepository(BaseRepository):
    """JSON values stored under string keys, partitioned by user scope."""

    def __init__(self, db_path: str = "rehab.db", scope: str = "default") -> None:
        super().__init__(db_path)
        self.scope = scope

    def get(self, key: str, default: Any = None) -> Any:
        rows = self.fetch_all(
            "SELECT value FROM kv_store WHERE scope = ? AND key = ?;",
            (self.scope, key),
        )
        if not rows:
            return default
        try:
            return json.loads(rows[0][0])
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt value stored under %s/%s", self.scope, key)
            return default

    def set(self, key: str, value: Any) -> None:
        self.execute(
            "INSERT INTO kv_store (scope, key, value) VALUES (?, ?, ?) "
            "ON CONFLICT(scope, key) DO UPDATE SET value = excluded.value;",
            (self.scope, key, json.dumps(value, ensure_ascii=False)),
        )


class LogRepository(KeyValueRepository):
    """Persists the ``logs`` and ``statuses`` keys, always in full."""

    LOGS_KEY = "logs"
    STATUSES_KEY = "statuses"

    def load_entries(self) -> List[LogEntry]:
        return [LogEntry.model_validate(row) for row in self.get(self.LOGS_KEY, [])]

    def save_entries(self, entries: List[LogEntry]) -> None:
        self.set(self.LOGS_KEY, [entry.to_json() for entry in entries])

    def load_statuses(self) -> dict[str, str]:
        return dict(self.get(self.STATUSES_KEY, {}))

    def save_statuses(self, statuses: dict[str, str]) -> None:
        self.set(self.STATUSES_KEY, statuses)


class ExerciseSheetRepository(BaseRepository):
    """Catalog rows as kept by the sheet endpoint (display strings)."""

    COLUMNS = [
        "id",
        "name",
        "category",
        "isUnilateral",
        "mode",
        "defaultUnit",
        "defaultQuantity",
    ]

    def add(
        self,
        exercise_id: str,
        name: str,
        category: str = "",
        is_unilateral: str = "FALSE",
        mode: str = "REPS_ONLY",
        default_unit: str = "",
        default_quantity: str = "",
    ) -> int:
        return self.execute(
            "INSERT INTO sheet_exercises (id, name, category, is_unilateral, mode, default_unit, default_quantity) "
            "VALUES (?, ?, ?, ?, ?, ?, ?);",
            (
                exercise_id,
                name,
                category,
                is_unilateral,
                mode,
                default_unit,
                default_quantity,
            ),
        )

    def fetch_rows(self) -> List[dict]:
        rows = self.fetch_all(
            "SELECT id, name, category, is_unilateral, mode, default_unit, default_quantity "
            "FROM sheet_exercises ORDER BY position;"
        )
        return [dict(zip(self.COLUMNS, row)) for row in rows]

    def delete_all(self) -> None:
        self._delete_all("sheet_exercises")


class HistorySheetRepository(BaseRepository):
    """Day lines as kept by the sheet endpoint, one row per date."""

    def fetch_rows(self) -> List[dict]:
        rows = self.fetch_all(
            "SELECT date, content FROM sheet_history ORDER BY position;"
        )
        return [{"date": d, "content": c} for d, c in rows]

    def find_row(self, date: str) -> Optional[int]:
        """Return the sheet row number whose date cell contains ``date``.

        Row 1 is the header, so the first data row is row 2.
        """
        rows = self.fetch_all("SELECT date FROM sheet_history ORDER BY position;")
        for idx, (cell,) in enumerate(rows):
            if date in str(cell).strip():
                return idx + 2
        return None

    def upsert(self, date: str, content: str) -> str:
        target = date.strip()
        row = self.find_row(target)
        if row is not None:
            positions = self.fetch_all(
                "SELECT position FROM sheet_history ORDER BY position;"
            )
            self.execute(
                "UPDATE sheet_history SET content = ? WHERE position = ?;",
                (content, positions[row - 2][0]),
            )
            return f"SUCCESS: Updated Row {row}"
        self.execute(
            "INSERT INTO sheet_history (date, content) VALUES (?, ?);",
            (target, content),
        )
        return "SUCCESS: Inserted New Row"

    def delete_all(self) -> None:
        self._delete_all("sheet_history")
