import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Mode(str, Enum):
    STRENGTH = "STRENGTH"
    REPS_ONLY = "REPS_ONLY"
    TIME_ONLY = "TIME_ONLY"
    CYCLING = "CYCLING"
    TREADMILL = "TREADMILL"
    RELAX = "RELAX"


class Side(str, Enum):
    LEFT = "左"
    RIGHT = "右"
    BOTH = "雙側"
    NONE = "N/A"


# Label offered by the form for unilateral moves; stored as Side.BOTH.
RECORD_BOTH_LABEL = "記錄雙側"

SET_UNIT = "組"
MINUTE_UNIT = "分鐘"
DEFAULT_REPS_UNIT = "下"
UNKNOWN_CATEGORY = "未分類"

BODY_PARTS = [
    "復健 A-G 系列 (Rehab)",
    "物理治療與穩定 (PT & Stability)",
    "器械與負重 (Gym & Weights)",
    "功能性與步伐 (Court & Cardio)",
    "放鬆與伸展 (Mobility)",
]

TRUE_STRINGS = {"TRUE", "true", "True", "是", "1"}


class ExerciseDefinition(BaseModel):
    """Catalog entry describing one exercise."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    category: str = UNKNOWN_CATEGORY
    is_unilateral: bool = Field(False, alias="isUnilateral")
    mode: Mode = Mode.REPS_ONLY
    default_unit: Optional[str] = Field(None, alias="defaultUnit")
    default_quantity: Optional[float] = Field(None, alias="defaultQuantity")

    @field_validator("id", "name", "category", mode="before")
    @classmethod
    def _strip(cls, value):
        return str(value).strip() if value is not None else value

    @field_validator("is_unilateral", mode="before")
    @classmethod
    def _coerce_bool(cls, value):
        if isinstance(value, str):
            return value.strip() in TRUE_STRINGS
        return bool(value)

    @field_validator("mode", mode="before")
    @classmethod
    def _coerce_mode(cls, value):
        if isinstance(value, str):
            return value.strip().upper() or Mode.REPS_ONLY
        return value

    @field_validator("default_unit", "default_quantity", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def reps_unit(self) -> str:
        return self.default_unit or DEFAULT_REPS_UNIT

    def to_row(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def new_entry_id() -> str:
    return uuid.uuid4().hex


class LogEntry(BaseModel):
    """One recorded performance of one exercise on one date."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_entry_id)
    date: str
    exercise_name: str = Field(alias="exerciseName")
    category: str = UNKNOWN_CATEGORY
    side: Side = Side.NONE
    sets: int = 0
    value: str = ""
    unit: str = ""
    notes: str = ""

    @property
    def is_duration(self) -> bool:
        return self.unit == MINUTE_UNIT

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def same_record(self, other: "LogEntry") -> bool:
        """Compare everything except the generated id."""
        return self.model_dump(exclude={"id"}) == other.model_dump(exclude={"id"})


@dataclass
class DayGroup:
    """All entries plus the status note sharing one calendar date."""

    date: str
    status: str = ""
    entries: list[LogEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)
