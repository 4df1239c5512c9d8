import logging
import os
import threading

from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import PlainTextResponse

from db import ExerciseSheetRepository, HistorySheetRepository
from models import TRUE_STRINGS
from settings_schema import SettingsSchema, load_settings

logger = logging.getLogger(__name__)


class SheetAPI:
    """Spreadsheet-style endpoint serving the exercise list and day history.

    Writes upsert one row per date and are serialised by a lock that is
    waited on for at most ``lock_timeout`` seconds.
    """

    def __init__(self, db_path: str = "sheet.db", lock_timeout: float = 10.0) -> None:
        self.exercises = ExerciseSheetRepository(db_path)
        self.history = HistorySheetRepository(db_path)
        self.lock = threading.Lock()
        self.lock_timeout = lock_timeout
        self.app = FastAPI(
            title="RehabFlow Sheet",
            description="Exercise list and rehab history endpoint",
        )
        self._setup_routes()

    @classmethod
    def from_settings(cls, settings: SettingsSchema, db_path: str = "sheet.db") -> "SheetAPI":
        return cls(db_path=db_path, lock_timeout=settings.lock_timeout)

    def catalog_rows(self) -> list[dict]:
        rows = self.exercises.fetch_rows()
        for row in rows:
            row["isUnilateral"] = str(row["isUnilateral"]).strip() in TRUE_STRINGS
        return rows

    def write_day(self, date: str, content: str) -> str:
        if not self.lock.acquire(timeout=self.lock_timeout):
            logger.warning("Lock wait exceeded for %s", date)
            return "ERROR: lock timeout"
        try:
            return self.history.upsert(date, content)
        finally:
            self.lock.release()

    def _setup_routes(self) -> None:
        @self.app.get("/")
        def read(type: str | None = None):
            if type == "history":
                return self.history.fetch_rows()
            return self.catalog_rows()

        @self.app.post("/", response_class=PlainTextResponse)
        def write(payload: dict = Body(...)):
            date = str(payload.get("date") or "").strip()
            if not date:
                raise HTTPException(status_code=400, detail="date required")
            return self.write_day(date, str(payload.get("content") or ""))


api = SheetAPI.from_settings(
    load_settings(), db_path=os.environ.get("SHEET_DB_PATH", "sheet.db")
)
app = api.app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app)
