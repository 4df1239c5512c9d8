"""Encode a day of log entries into one text line and parse it back.

A day line looks like::

    2026-02-04,"[膝蓋輕鬆]｜深蹲: 0kg 10下 x3組｜弓箭步【左】: 12下 x2組 (慢)"

The status note (if any) comes first in square brackets, followed by one
segment per entry, all joined with a full-width vertical bar.
"""

import logging
import re
from typing import Iterable, List, Optional

from catalog import ExerciseCatalog
from models import (
    DayGroup,
    LogEntry,
    MINUTE_UNIT,
    SET_UNIT,
    Side,
    UNKNOWN_CATEGORY,
)

logger = logging.getLogger(__name__)

SEPARATOR = "｜"

SEGMENT_RE = re.compile(
    r"^(?P<name>.+?)"
    r"(?:【(?P<side>[^】]*)】)?"
    r":\s?(?P<value>.*?)"
    r"(?:\s+x(?P<sets>\d+)" + SET_UNIT + r"|\s+(?P<minutes>\d+)" + MINUTE_UNIT + r")?"
    r"(?:\s+\((?P<notes>.*)\))?$",
    re.DOTALL,
)


def encode_segment(entry: LogEntry) -> str:
    text = entry.exercise_name
    if entry.side != Side.NONE:
        text += f"【{entry.side.value}】"
    text += f": {entry.value}"
    if entry.sets > 0:
        if entry.unit == MINUTE_UNIT:
            text += f" {entry.sets}{MINUTE_UNIT}"
        else:
            text += f" x{entry.sets}{SET_UNIT}"
    if entry.notes:
        text += f" ({entry.notes})"
    return text


def encode_group(group: DayGroup) -> str:
    """Return the joined content of ``group`` without the date prefix."""
    segments = []
    if group.status:
        segments.append(f"[{group.status}]")
    segments.extend(encode_segment(entry) for entry in group.entries)
    return SEPARATOR.join(segments)


def encode_line(group: DayGroup) -> str:
    return f'{group.date},"{encode_group(group)}"'


def export_lines(groups: Iterable[DayGroup]) -> str:
    """Clipboard/spreadsheet export: one storage line per day."""
    return "\n".join(encode_line(group) for group in groups)


def _side(text: Optional[str]) -> Side:
    if not text:
        return Side.NONE
    try:
        return Side(text.strip())
    except ValueError:
        logger.warning("Unknown side marker %r, recording as %s", text, Side.NONE.value)
        return Side.NONE


def decode_segment(
    segment: str, date: str, catalog: Optional[ExerciseCatalog] = None
) -> Optional[LogEntry]:
    """Parse one entry segment, returning ``None`` when it does not match."""
    match = SEGMENT_RE.match(segment.strip())
    if match is None:
        return None
    name = match.group("name").strip()
    if match.group("minutes") is not None:
        sets, unit = int(match.group("minutes")), MINUTE_UNIT
    elif match.group("sets") is not None:
        sets, unit = int(match.group("sets")), SET_UNIT
    else:
        sets, unit = 0, ""
    category = UNKNOWN_CATEGORY
    definition = catalog.by_name(name) if catalog is not None else None
    if definition is not None:
        category = definition.category
    else:
        logger.warning("No catalog entry named %r, category set to %s", name, category)
    return LogEntry(
        date=date,
        exercise_name=name,
        category=category,
        side=_side(match.group("side")),
        sets=sets,
        value=match.group("value").strip(),
        unit=unit,
        notes=(match.group("notes") or "").strip(),
    )


def decode_content(
    content: str, date: str, catalog: Optional[ExerciseCatalog] = None
) -> DayGroup:
    """Rebuild a day group from its joined content.

    Segments that do not follow the entry grammar are logged and skipped so
    that one bad segment never loses the rest of the day.
    """
    segments = [s for s in content.split(SEPARATOR) if s.strip()]
    status = ""
    if segments and segments[0].lstrip().startswith("["):
        head = segments.pop(0).strip()
        end = head.rfind("]")
        status = head[1:end] if end > 0 else head[1:]
    entries: List[LogEntry] = []
    for segment in segments:
        entry = decode_segment(segment, date, catalog)
        if entry is None:
            logger.warning("Dropping unrecognised segment on %s: %r", date, segment)
            continue
        entries.append(entry)
    return DayGroup(date=date, status=status, entries=entries)


def decode_row(row: dict, catalog: Optional[ExerciseCatalog] = None) -> DayGroup:
    """Decode a ``{date, content}`` row returned by the history endpoint."""
    date = str(row.get("date") or "").strip()
    return decode_content(str(row.get("content") or ""), date, catalog)


def decode_line(line: str, catalog: Optional[ExerciseCatalog] = None) -> DayGroup:
    """Decode a full storage line ``<date>,"<content>"``."""
    date, _, content = line.strip().partition(",")
    content = content.strip()
    if len(content) >= 2 and content.startswith('"') and content.endswith('"'):
        content = content[1:-1]
    return decode_content(content, date.strip(), catalog)


def decode_lines(text: str, catalog: Optional[ExerciseCatalog] = None) -> List[DayGroup]:
    return [decode_line(line, catalog) for line in text.splitlines() if line.strip()]
