import logging
from typing import Iterable, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from models import BODY_PARTS, ExerciseDefinition

logger = logging.getLogger(__name__)


class NoExerciseSelected(ValueError):
    """Raised when an entry is saved without a resolvable exercise."""


class ExerciseCatalog:
    """Read-only, ordered set of exercise definitions."""

    def __init__(self, definitions: Iterable[ExerciseDefinition] = ()) -> None:
        self._definitions: list[ExerciseDefinition] = list(definitions)
        self._by_id = {d.id: d for d in self._definitions}
        self._by_name: dict[str, ExerciseDefinition] = {}
        for definition in self._definitions:
            self._by_name.setdefault(definition.name, definition)

    @classmethod
    def from_rows(cls, rows: Iterable[dict]) -> "ExerciseCatalog":
        """Build a catalog from endpoint rows, skipping unusable ones."""
        definitions = []
        for row in rows:
            if not str(row.get("name") or "").strip():
                continue
            try:
                definitions.append(ExerciseDefinition.model_validate(row))
            except ValidationError as e:
                logger.warning("Skipping catalog row %r: %s", row.get("name"), e)
        return cls(definitions)

    @classmethod
    def from_yaml(cls, path: str) -> "ExerciseCatalog":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or []
        if isinstance(data, dict):
            data = data.get("exercises", [])
        return cls.from_rows(data)

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self):
        return iter(self._definitions)

    @property
    def is_empty(self) -> bool:
        return not self._definitions

    def by_id(self, exercise_id: Optional[str]) -> Optional[ExerciseDefinition]:
        if exercise_id is None:
            return None
        return self._by_id.get(exercise_id)

    def by_name(self, name: str) -> Optional[ExerciseDefinition]:
        return self._by_name.get(name.strip())

    def require(self, exercise_id: Optional[str]) -> ExerciseDefinition:
        definition = self.by_id(exercise_id)
        if definition is None:
            raise NoExerciseSelected("no exercise selected")
        return definition

    def categories(self) -> List[str]:
        """Known body parts first, then any other category as first seen."""
        present = []
        for definition in self._definitions:
            if definition.category not in present:
                present.append(definition.category)
        ordered = [c for c in BODY_PARTS if c in present]
        ordered.extend(c for c in present if c not in BODY_PARTS)
        return ordered

    def search(self, query: str = "") -> List[ExerciseDefinition]:
        needle = query.strip().lower()
        if not needle:
            return list(self._definitions)
        return [
            d
            for d in self._definitions
            if needle in d.name.lower() or needle in d.category.lower()
        ]

    def grouped(self, query: str = "") -> List[Tuple[str, List[ExerciseDefinition]]]:
        matches = self.search(query)
        groups = []
        for category in self.categories():
            members = [d for d in matches if d.category == category]
            if members:
                groups.append((category, members))
        return groups
