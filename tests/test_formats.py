import os
import sys
import unittest
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from formats import (
    CyclingInput,
    RelaxInput,
    RepsOnlyInput,
    StrengthInput,
    TimeOnlyInput,
    TreadmillInput,
    VALUE_FORMATS,
    default_input,
    format_value,
    parse_value,
)
from models import ExerciseDefinition, LogEntry, Mode


def _definition(mode: Mode, **extra) -> ExerciseDefinition:
    return ExerciseDefinition(id=mode.value, name=f"ex-{mode.value}", mode=mode, **extra)


def _saved(definition: ExerciseDefinition, data) -> LogEntry:
    formatted = format_value(definition, data)
    return LogEntry(
        date="2026-02-04",
        exercise_name=definition.name,
        sets=formatted.sets,
        value=formatted.value,
        unit=formatted.unit,
    )


class FormatValueTest(unittest.TestCase):
    def test_every_mode_has_a_row(self) -> None:
        self.assertEqual(set(VALUE_FORMATS), set(Mode))

    def test_strength(self) -> None:
        result = format_value(
            _definition(Mode.STRENGTH), StrengthInput(weight="0", reps="10", sets=3)
        )
        self.assertEqual(tuple(result), ("0kg 10下", 3, "組"))

    def test_strength_without_weight(self) -> None:
        result = format_value(_definition(Mode.STRENGTH), StrengthInput(reps="12"))
        self.assertEqual(result.value, "12下")

    def test_reps_uses_default_unit(self) -> None:
        definition = _definition(Mode.REPS_ONLY, defaultUnit="趟")
        result = format_value(definition, RepsOnlyInput(reps="4", sets=2))
        self.assertEqual(tuple(result), ("4趟", 2, "組"))

    def test_time_only(self) -> None:
        result = format_value(_definition(Mode.TIME_ONLY), TimeOnlyInput(time="30", sets=2))
        self.assertEqual(tuple(result), ("30秒", 2, "組"))

    def test_cycling_minutes_in_sets(self) -> None:
        result = format_value(_definition(Mode.CYCLING), CyclingInput(resistance="5", time="20"))
        self.assertEqual(tuple(result), ("阻力5", 20, "分鐘"))

    def test_treadmill(self) -> None:
        result = format_value(
            _definition(Mode.TREADMILL), TreadmillInput(slope="2", speed="5.5", time="15")
        )
        self.assertEqual(tuple(result), ("坡度2 速度5.5", 15, "分鐘"))

    def test_blank_minutes_drop_count(self) -> None:
        result = format_value(_definition(Mode.CYCLING), CyclingInput(resistance="3", time=""))
        self.assertEqual(result.sets, 0)

    def test_unrepresentable_minutes_drop_count(self) -> None:
        for time in ("inf", "1e400", "nan", "-5", "半小時"):
            with self.subTest(time=time):
                result = format_value(
                    _definition(Mode.CYCLING), CyclingInput(resistance="3", time=time)
                )
                self.assertEqual(result.sets, 0)

    def test_relax(self) -> None:
        result = format_value(_definition(Mode.RELAX), RelaxInput())
        self.assertEqual(tuple(result), ("已完成", 0, ""))

    def test_mode_mismatch_rejected(self) -> None:
        with self.assertRaises(ValueError):
            format_value(_definition(Mode.CYCLING), RepsOnlyInput(reps="3"))


class ParseValueTest(unittest.TestCase):
    def test_inputs_survive_save_and_edit(self) -> None:
        cases = [
            (_definition(Mode.STRENGTH), StrengthInput(weight="20.5", reps="8", sets=4)),
            (_definition(Mode.STRENGTH), StrengthInput(weight="", reps="10", sets=2)),
            (_definition(Mode.REPS_ONLY, defaultUnit="場"), RepsOnlyInput(reps="1", sets=1)),
            (_definition(Mode.TIME_ONLY), TimeOnlyInput(time="45", sets=3)),
            (_definition(Mode.CYCLING), CyclingInput(resistance="6", time="25")),
            (_definition(Mode.TREADMILL), TreadmillInput(slope="1.5", speed="6", time="30")),
            (_definition(Mode.RELAX), RelaxInput()),
        ]
        for definition, data in cases:
            with self.subTest(mode=definition.mode):
                self.assertEqual(parse_value(definition, _saved(definition, data)), data)

    def test_strength_fallback_to_reps(self) -> None:
        entry = LogEntry(date="2026-02-04", exercise_name="x", value="彈力帶 12下", sets=2, unit="組")
        parsed = parse_value(_definition(Mode.STRENGTH), entry)
        self.assertEqual(parsed.reps, "彈力帶 12")
        self.assertEqual(parsed.weight, "")
        self.assertEqual(parsed.sets, 2)

    def test_treadmill_fallback_to_slope(self) -> None:
        entry = LogEntry(date="2026-02-04", exercise_name="x", value="坡度高", sets=10, unit="分鐘")
        parsed = parse_value(_definition(Mode.TREADMILL), entry)
        self.assertEqual(parsed.slope, "高")
        self.assertEqual(parsed.speed, "")
        self.assertEqual(parsed.time, "10")


class DefaultInputTest(unittest.TestCase):
    def test_seeds(self) -> None:
        self.assertEqual(default_input(_definition(Mode.STRENGTH)), StrengthInput(reps="10", sets=3))
        self.assertEqual(default_input(_definition(Mode.TIME_ONLY)).time, "30")
        self.assertEqual(default_input(_definition(Mode.CYCLING)).time, "15")
        self.assertEqual(default_input(_definition(Mode.TREADMILL)).time, "15")
        self.assertIsInstance(default_input(_definition(Mode.RELAX)), RelaxInput)

    def test_default_quantity(self) -> None:
        definition = _definition(Mode.REPS_ONLY, defaultQuantity="4")
        self.assertEqual(default_input(definition).reps, "4")


if __name__ == "__main__":
    unittest.main()
