import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from pydantic import BaseModel, TypeAdapter

from catalog import ExerciseCatalog, NoExerciseSelected
from db import LogRepository
from formats import ExerciseInput, default_input, format_value, parse_value
from models import (
    DayGroup,
    ExerciseDefinition,
    LogEntry,
    RECORD_BOTH_LABEL,
    Side,
)

logger = logging.getLogger(__name__)

_INPUT_ADAPTER = TypeAdapter(ExerciseInput)


@dataclass
class EditSession:
    """Form state reconstructed from a saved entry."""

    entry: LogEntry
    definition: ExerciseDefinition
    inputs: BaseModel


def resolve_side(definition: ExerciseDefinition, side: Union[Side, str, None]) -> Side:
    if not definition.is_unilateral:
        return Side.NONE
    if side is None:
        return Side.LEFT
    if isinstance(side, str) and side == RECORD_BOTH_LABEL:
        return Side.BOTH
    side = Side(side)
    return Side.BOTH if side == Side.NONE else side


class LogStore:
    """Owns the log entries, daily statuses and the edit cursor.

    Every mutation rewrites both persisted keys in full.
    """

    def __init__(
        self, repository: LogRepository, catalog: Optional[ExerciseCatalog] = None
    ) -> None:
        self.repository = repository
        self.catalog = catalog or ExerciseCatalog()
        self.entries: List[LogEntry] = repository.load_entries()
        self.statuses: dict[str, str] = repository.load_statuses()
        self.editing_id: Optional[str] = None

    def _persist(self) -> None:
        self.repository.save_entries(self.entries)
        self.repository.save_statuses(self.statuses)

    def set_catalog(self, catalog: ExerciseCatalog) -> None:
        self.catalog = catalog

    def get(self, entry_id: str) -> Optional[LogEntry]:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    # statuses

    def status_for(self, date: str) -> str:
        return self.statuses.get(date, "")

    def set_status(self, date: str, text: str) -> bool:
        """Store the status note for ``date``; return True if it changed."""
        if text.strip():
            if self.statuses.get(date) == text:
                return False
            self.statuses[date] = text
        elif date in self.statuses:
            del self.statuses[date]
        else:
            return False
        self._persist()
        return True

    # editing

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    def start_editing(self, entry_id: str) -> EditSession:
        """Open ``entry_id`` for editing, replacing any edit in progress."""
        entry = self.get(entry_id)
        if entry is None:
            raise KeyError(entry_id)
        definition = self.catalog.by_name(entry.exercise_name)
        if definition is None:
            raise NoExerciseSelected(f"no catalog entry named {entry.exercise_name}")
        if self.editing_id is not None and self.editing_id != entry_id:
            logger.info("Discarding edit of %s in favour of %s", self.editing_id, entry_id)
        self.editing_id = entry_id
        return EditSession(entry, definition, parse_value(definition, entry))

    def cancel_editing(self) -> None:
        self.editing_id = None

    def save_entry(
        self,
        date: str,
        exercise_id: Optional[str],
        inputs: Union[BaseModel, dict, None] = None,
        side: Union[Side, str, None] = None,
        notes: str = "",
        status: Optional[str] = None,
    ) -> Optional[LogEntry]:
        """Create a new entry, or overwrite the one being edited.

        A status passed along is stored only once the inputs have been
        formatted, so a rejected save changes nothing. When no exercise can
        be resolved the save only succeeds if that status actually changed,
        in which case ``None`` is returned.
        """
        definition = self.catalog.by_id(exercise_id)
        if definition is None:
            if status is not None and self.set_status(date, status):
                return None
            raise NoExerciseSelected("no exercise selected")
        if inputs is None:
            inputs = default_input(definition)
        elif isinstance(inputs, dict):
            inputs = _INPUT_ADAPTER.validate_python(inputs)
        formatted = format_value(definition, inputs)
        fields = dict(
            date=date,
            exercise_name=definition.name,
            category=definition.category,
            side=resolve_side(definition, side),
            sets=formatted.sets,
            value=formatted.value,
            unit=formatted.unit,
            notes=notes.strip(),
        )
        if status is not None:
            self.set_status(date, status)
        editing = self.get(self.editing_id) if self.editing_id else None
        if editing is not None:
            saved = LogEntry(id=editing.id, **fields)
            self.entries = [saved if e.id == editing.id else e for e in self.entries]
        else:
            saved = LogEntry(**fields)
            self.entries.insert(0, saved)
        self.editing_id = None
        self._persist()
        return saved

    # deletion

    def delete_entry(self, entry_id: str) -> bool:
        before = len(self.entries)
        self.entries = [e for e in self.entries if e.id != entry_id]
        if self.editing_id == entry_id:
            self.editing_id = None
        if len(self.entries) == before:
            return False
        self._persist()
        return True

    def delete_day(self, date: str) -> int:
        removed = [e for e in self.entries if e.date == date]
        self.entries = [e for e in self.entries if e.date != date]
        self.statuses.pop(date, None)
        if self.editing_id in {e.id for e in removed}:
            self.editing_id = None
        self._persist()
        return len(removed)

    def delete_all(self) -> None:
        self.entries = []
        self.statuses = {}
        self.editing_id = None
        self._persist()

    # grouping

    def dates(self) -> List[str]:
        dates = {e.date for e in self.entries}
        dates.update(d for d, text in self.statuses.items() if text)
        return sorted(dates, reverse=True)

    def day_group(self, date: str) -> DayGroup:
        return DayGroup(
            date=date,
            status=self.status_for(date),
            entries=[e for e in self.entries if e.date == date],
        )

    def day_groups(self) -> List[DayGroup]:
        return [self.day_group(date) for date in self.dates()]

    def merge_remote(self, groups: Iterable[DayGroup]) -> int:
        """Replace the local days present in ``groups``; return entries restored."""
        groups = [g for g in groups if g.date]
        restored_dates = {g.date for g in groups}
        entries = [e for e in self.entries if e.date not in restored_dates]
        count = 0
        for group in groups:
            entries.extend(group.entries)
            count += len(group.entries)
            if group.status:
                self.statuses[group.date] = group.status
            else:
                self.statuses.pop(group.date, None)
        self.entries = entries
        if self.editing_id is not None and self.get(self.editing_id) is None:
            logger.info("Entry %s was replaced by the restore, edit cancelled", self.editing_id)
            self.editing_id = None
        self._persist()
        return count
