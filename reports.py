from typing import Iterable, Optional

from catalog import ExerciseCatalog
from formats import parse_value
from models import DayGroup, LogEntry, Mode, Side

REPORT_HEADER = "動作項目\t側邊\t負重\t表現\t組數\t備註"
DAY_SEPARATOR = "\n\n" + "─" * 30 + "\n\n"


def _report_row(entry: LogEntry, catalog: Optional[ExerciseCatalog]) -> str:
    side = Side.BOTH.value if entry.side in (Side.NONE, Side.BOTH) else entry.side.value
    load, perf, sets = "-", "-", f"{entry.sets}組"
    definition = catalog.by_name(entry.exercise_name) if catalog else None
    mode = definition.mode if definition else None
    if mode == Mode.STRENGTH:
        inputs = parse_value(definition, entry)
        load = f"{inputs.weight or 0}公斤"
        perf = f"{inputs.reps}{definition.reps_unit}" if inputs.reps else entry.value
    elif mode in (Mode.REPS_ONLY, Mode.TIME_ONLY):
        perf = entry.value
    elif mode in (Mode.CYCLING, Mode.TREADMILL):
        load = entry.value
        perf = f"{entry.sets}{entry.unit}" if entry.sets > 0 else "-"
        sets = "-"
    elif mode == Mode.RELAX:
        perf = entry.value
        sets = "-"
    return "\t".join([entry.exercise_name, side, load, perf, sets, entry.notes])


def day_report(group: DayGroup, catalog: Optional[ExerciseCatalog] = None) -> str:
    """Tab separated summary of one day, ready to paste into a spreadsheet."""
    lines = [
        f"📅 【{group.date} 復健日誌】",
        f"🧠 今日狀況：{group.status or '未填寫'}",
        "",
        REPORT_HEADER,
    ]
    lines.extend(_report_row(entry, catalog) for entry in group.entries)
    return "\n".join(lines)


def export_report(
    groups: Iterable[DayGroup], catalog: Optional[ExerciseCatalog] = None
) -> str:
    return DAY_SEPARATOR.join(day_report(group, catalog) for group in groups)
