"""Per-mode value formatting and its inverse.

Every exercise mode owns one row in ``VALUE_FORMATS``: the form input it
accepts, how that input renders into the persisted ``value`` string and
``unit`` label, and the pattern that recovers the input fields from a saved
entry when it is opened for editing.
"""

import re
from dataclasses import dataclass
from typing import Annotated, Callable, Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, Field

from models import (
    ExerciseDefinition,
    LogEntry,
    MINUTE_UNIT,
    Mode,
    SET_UNIT,
)


class StrengthInput(BaseModel):
    mode: Literal[Mode.STRENGTH] = Mode.STRENGTH
    weight: str = ""
    reps: str = ""
    sets: int = Field(3, ge=1)


class RepsOnlyInput(BaseModel):
    mode: Literal[Mode.REPS_ONLY] = Mode.REPS_ONLY
    reps: str = ""
    sets: int = Field(3, ge=1)


class TimeOnlyInput(BaseModel):
    mode: Literal[Mode.TIME_ONLY] = Mode.TIME_ONLY
    time: str = ""
    sets: int = Field(3, ge=1)


class CyclingInput(BaseModel):
    mode: Literal[Mode.CYCLING] = Mode.CYCLING
    resistance: str = ""
    time: str = ""


class TreadmillInput(BaseModel):
    mode: Literal[Mode.TREADMILL] = Mode.TREADMILL
    slope: str = ""
    speed: str = ""
    time: str = ""


class RelaxInput(BaseModel):
    mode: Literal[Mode.RELAX] = Mode.RELAX


ExerciseInput = Annotated[
    Union[
        StrengthInput,
        RepsOnlyInput,
        TimeOnlyInput,
        CyclingInput,
        TreadmillInput,
        RelaxInput,
    ],
    Field(discriminator="mode"),
]


class FormattedValue(NamedTuple):
    value: str
    sets: int
    unit: str


@dataclass(frozen=True)
class ValueFormat:
    """Grammar row for one mode."""

    mode: Mode
    input_type: type
    render: Callable[[BaseModel, str], str]
    duration: bool = False
    pattern: Optional[str] = None
    fields: tuple[str, ...] = ()
    fallback_field: Optional[str] = None
    fallback_strip: tuple[str, ...] = ()

    def compile(self, reps_unit: str) -> Optional[re.Pattern]:
        if self.pattern is None:
            return None
        return re.compile(self.pattern.replace("{unit}", re.escape(reps_unit)))


_NUM = r"(\d+(?:\.\d+)?)"
RELAX_VALUE = "已完成"


def _render_strength(data: StrengthInput, reps_unit: str) -> str:
    weight = data.weight.strip()
    reps = f"{data.reps.strip()}{reps_unit}"
    return f"{weight}kg {reps}" if weight else reps


VALUE_FORMATS: dict[Mode, ValueFormat] = {
    fmt.mode: fmt
    for fmt in (
        ValueFormat(
            Mode.STRENGTH,
            StrengthInput,
            _render_strength,
            pattern=_NUM + r"kg\s+" + _NUM + "{unit}",
            fields=("weight", "reps"),
            fallback_field="reps",
            fallback_strip=("{unit}",),
        ),
        ValueFormat(
            Mode.REPS_ONLY,
            RepsOnlyInput,
            lambda d, u: f"{d.reps.strip()}{u}",
            pattern="^" + _NUM + r"\s*{unit}$",
            fields=("reps",),
            fallback_field="reps",
            fallback_strip=("{unit}",),
        ),
        ValueFormat(
            Mode.TIME_ONLY,
            TimeOnlyInput,
            lambda d, u: f"{d.time.strip()}秒",
            pattern="^" + _NUM + r"\s*秒$",
            fields=("time",),
            fallback_field="time",
            fallback_strip=("秒",),
        ),
        ValueFormat(
            Mode.CYCLING,
            CyclingInput,
            lambda d, u: f"阻力{d.resistance.strip()}",
            duration=True,
            pattern=r"^阻力(.*)$",
            fields=("resistance",),
            fallback_field="resistance",
        ),
        ValueFormat(
            Mode.TREADMILL,
            TreadmillInput,
            lambda d, u: f"坡度{d.slope.strip()} 速度{d.speed.strip()}",
            duration=True,
            pattern=r"坡度([\d.]+)\s+速度([\d.]+)",
            fields=("slope", "speed"),
            fallback_field="slope",
            fallback_strip=("坡度",),
        ),
        ValueFormat(Mode.RELAX, RelaxInput, lambda d, u: RELAX_VALUE),
    )
}


def _minutes(text: str) -> int:
    try:
        return max(int(float(text.strip())), 0)
    except (ValueError, OverflowError):
        return 0


def format_value(definition: ExerciseDefinition, data: BaseModel) -> FormattedValue:
    """Render ``data`` into the persisted ``(value, sets, unit)`` triple."""
    fmt = VALUE_FORMATS[definition.mode]
    if not isinstance(data, fmt.input_type):
        raise ValueError(
            f"{definition.name} expects {definition.mode.value} input, got {data.mode.value}"
        )
    value = fmt.render(data, definition.reps_unit)
    if fmt.duration:
        return FormattedValue(value, _minutes(data.time), MINUTE_UNIT)
    if definition.mode == Mode.RELAX:
        return FormattedValue(value, 0, "")
    return FormattedValue(value, data.sets, SET_UNIT)


def parse_value(definition: ExerciseDefinition, entry: LogEntry) -> BaseModel:
    """Recover the form input of ``definition``'s mode from a saved entry.

    When the value does not have the expected shape, whatever text is there
    goes into the mode's most generic field instead.
    """
    fmt = VALUE_FORMATS[definition.mode]
    fields: dict[str, object] = {}
    pattern = fmt.compile(definition.reps_unit)
    if pattern is not None:
        match = pattern.search(entry.value)
        if match:
            fields.update(zip(fmt.fields, match.groups()))
        elif fmt.fallback_field:
            raw = entry.value
            for token in fmt.fallback_strip:
                raw = raw.replace(token.replace("{unit}", definition.reps_unit), "")
            fields[fmt.fallback_field] = raw.strip()
    if fmt.duration:
        fields["time"] = str(entry.sets) if entry.sets > 0 else ""
    elif "sets" in fmt.input_type.model_fields:
        fields["sets"] = max(entry.sets, 1)
    return fmt.input_type(**fields)


def default_input(definition: ExerciseDefinition) -> BaseModel:
    """Seed values shown when an exercise is picked for a new entry."""
    quantity = definition.default_quantity
    seed = f"{quantity:g}" if quantity is not None else None
    if definition.mode == Mode.STRENGTH:
        return StrengthInput(reps=seed or "10")
    if definition.mode == Mode.REPS_ONLY:
        return RepsOnlyInput(reps=seed or "10")
    if definition.mode == Mode.TIME_ONLY:
        return TimeOnlyInput(time=seed or "30")
    if definition.mode == Mode.CYCLING:
        return CyclingInput(time=seed or "15")
    if definition.mode == Mode.TREADMILL:
        return TreadmillInput(time=seed or "15")
    return RelaxInput()
