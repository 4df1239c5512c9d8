import os

from catalog import ExerciseCatalog
from db import ExerciseSheetRepository


def seed(db_path: str = "sheet.db", catalog_path: str = "exercises.yaml") -> int:
    """Fill the sheet endpoint's exercise list from a YAML catalog."""
    sheet = ExerciseSheetRepository(db_path)
    if sheet.fetch_rows():
        print("Sheet already contains exercises")
        return 0
    catalog = ExerciseCatalog.from_yaml(catalog_path)
    for ex in catalog:
        sheet.add(
            ex.id,
            ex.name,
            ex.category,
            "TRUE" if ex.is_unilateral else "FALSE",
            ex.mode.value,
            ex.default_unit or "",
            f"{ex.default_quantity:g}" if ex.default_quantity is not None else "",
        )
    print(f"Seeded {len(catalog)} exercises")
    return len(catalog)


if __name__ == "__main__":
    seed(os.environ.get("SHEET_DB_PATH", "sheet.db"))
