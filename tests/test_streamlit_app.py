import os
import sys
import unittest
import datetime

from streamlit.testing.v1 import AppTest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import LogRepository
from models import Side

ROOT = os.path.dirname(os.path.dirname(__file__))
SCRIPT = os.path.join(ROOT, "streamlit_app.py")


class StreamlitAppTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_gui.db"
        self.yaml_path = "test_gui_settings.yaml"
        self._cleanup()
        self._env = {
            k: os.environ.get(k)
            for k in ("DB_PATH", "YAML_PATH", "CATALOG_PATH", "REHAB_ENDPOINT")
        }
        os.environ["DB_PATH"] = self.db_path
        os.environ["YAML_PATH"] = self.yaml_path
        os.environ["CATALOG_PATH"] = os.path.join(ROOT, "exercises.yaml")
        os.environ.pop("REHAB_ENDPOINT", None)
        self.today = datetime.date.today().isoformat()

    def tearDown(self) -> None:
        self._cleanup()
        for key, value in self._env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value

    def _cleanup(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def _app(self) -> AppTest:
        at = AppTest.from_file(SCRIPT, default_timeout=20)
        at.run(timeout=20)
        self.assertFalse(at.exception)
        return at

    def _entries(self):
        return LogRepository(self.db_path).load_entries()

    def test_add_entry_with_defaults(self) -> None:
        at = self._app()
        at.button(key="save_entry").click().run()
        entries = self._entries()
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].exercise_name, "A 直膝抬腿")
        self.assertEqual(entries[0].side, Side.LEFT)
        self.assertEqual((entries[0].value, entries[0].sets), ("10下", 3))
        self.assertEqual(entries[0].date, self.today)
        self.assertTrue(at.success)

    def test_status_is_saved(self) -> None:
        at = self._app()
        at.text_area(key=f"status_{self.today}").input("膝蓋輕鬆").run()
        statuses = LogRepository(self.db_path).load_statuses()
        self.assertEqual(statuses, {self.today: "膝蓋輕鬆"})
        self.assertTrue(any(self.today in s.value for s in at.subheader))

    def test_edit_keeps_entry_id(self) -> None:
        at = self._app()
        at.button(key="save_entry").click().run()
        entry = self._entries()[0]
        at.button(key=f"edit_{entry.id}").click().run()
        self.assertFalse(at.exception)
        key = f"rehab-a_{entry.id}"
        self.assertEqual(at.text_input(key=f"reps_{key}").value, "10")
        at.text_input(key=f"reps_{key}").input("15").run()
        at.button(key="save_entry").click().run()
        entries = self._entries()
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].id, entry.id)
        self.assertEqual(entries[0].value, "15下")

    def test_edit_switching_to_other_mode(self) -> None:
        at = self._app()
        at.button(key="save_entry").click().run()
        entry = self._entries()[0]
        at.button(key=f"edit_{entry.id}").click().run()
        picker = at.selectbox(key=f"exercise_{entry.id}")
        index = next(i for i, label in enumerate(picker.options) if label.endswith("飛輪"))
        picker.select_index(index).run()
        self.assertFalse(at.exception)
        self.assertEqual(at.text_input(key=f"time_court-bike_{entry.id}").value, "15")
        at.button(key="save_entry").click().run()
        self.assertFalse(at.exception)
        entries = self._entries()
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].id, entry.id)
        self.assertEqual(entries[0].exercise_name, "飛輪")
        self.assertEqual((entries[0].sets, entries[0].unit), (15, "分鐘"))
        self.assertEqual(entries[0].side, Side.NONE)

    def test_delete_entry_and_all(self) -> None:
        at = self._app()
        at.button(key="save_entry").click().run()
        at.button(key="save_entry").click().run()
        first = self._entries()[0]
        at.button(key=f"delete_{first.id}").click().run()
        self.assertEqual(len(self._entries()), 1)
        at.checkbox(key="confirm_delete_all").check().run()
        at.button(key="delete_all").click().run()
        self.assertEqual(self._entries(), [])

    def test_empty_catalog_warns(self) -> None:
        os.environ["CATALOG_PATH"] = os.path.join(ROOT, "missing.yaml")
        at = self._app()
        self.assertTrue(at.warning)
        self.assertNotIn("save_entry", [b.key for b in at.button])


if __name__ == "__main__":
    unittest.main()
