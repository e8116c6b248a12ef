import unittest

from anthro.segments import InvalidInputError
from lever.options import (
    BenchOptions,
    DeadliftOptions,
    Movement,
    OverheadPressOptions,
    PullupOptions,
    SquatOptions,
    ThrusterOptions,
    coerce_movement,
    parse_options,
)


class ParseOptionsTests(unittest.TestCase):
    def test_defaults_per_family(self) -> None:
        self.assertEqual(parse_options(Movement.SQUAT), SquatOptions())
        self.assertEqual(parse_options("deadlift"), DeadliftOptions())
        self.assertEqual(parse_options("ohp"), OverheadPressOptions())
        self.assertEqual(parse_options("thruster"), ThrusterOptions())

    def test_variant_strings(self) -> None:
        self.assertEqual(parse_options("squat", "lowBar").variant, "lowBar")
        self.assertEqual(parse_options("pullup", "supinated"), PullupOptions(grip="supinated"))
        self.assertEqual(parse_options("pushup", "wide").width, "wide")

    def test_bench_grip_and_arch(self) -> None:
        self.assertEqual(parse_options("bench", "wide-competitive"), BenchOptions(grip="wide", arch="competitive"))
        self.assertEqual(parse_options("bench", "narrow"), BenchOptions(grip="narrow"))
        self.assertEqual(BenchOptions(grip="wide", arch="flat").label, "wide-flat")

    def test_stances(self) -> None:
        self.assertEqual(parse_options("squat", "lowBar-wide"), SquatOptions(variant="lowBar", stance="wide"))
        self.assertEqual(SquatOptions(stance="ultraWide").label, "highBar-ultraWide")
        self.assertEqual(SquatOptions(variant="front").label, "front")
        self.assertEqual(parse_options("deadlift", "sumo-hybrid"), DeadliftOptions(variant="sumo", stance="hybrid"))
        self.assertEqual(parse_options("squat", "front", stance="narrow").stance, "narrow")
        with self.assertRaises(InvalidInputError):
            SquatOptions(stance="hybrid")
        with self.assertRaises(InvalidInputError):
            DeadliftOptions(stance="wide")
        with self.assertRaises(InvalidInputError):
            parse_options("deadlift", "sumo-narrow")

    def test_extra_fields(self) -> None:
        options = parse_options("deadlift", "sumo", bar_offset=-0.05)
        self.assertEqual(options, DeadliftOptions(variant="sumo", bar_offset=-0.05))
        self.assertEqual(parse_options("pushup", added_weight=10.0).added_weight, 10.0)

    def test_records_pass_through(self) -> None:
        options = SquatOptions(variant="front", depth="deep")
        self.assertIs(parse_options("squat", options), options)

    def test_fixed_variant_families_accept_their_label(self) -> None:
        self.assertEqual(parse_options("ohp", "strict"), OverheadPressOptions())
        self.assertEqual(parse_options("thruster", "front"), ThrusterOptions())

    def test_unknown_values_raise(self) -> None:
        with self.assertRaises(InvalidInputError):
            parse_options("squat", "zercher")
        with self.assertRaises(InvalidInputError):
            parse_options("bench", "medium-huge")
        with self.assertRaises(InvalidInputError):
            parse_options("ohp", "push")
        with self.assertRaises(InvalidInputError):
            parse_options("squat", DeadliftOptions())
        with self.assertRaises(InvalidInputError):
            DeadliftOptions(bar_offset=float("nan"))
        with self.assertRaises(InvalidInputError):
            BenchOptions(chest_depth=-0.1)

    def test_coerce_movement(self) -> None:
        self.assertIs(coerce_movement("Squat"), Movement.SQUAT)
        self.assertIs(coerce_movement(Movement.PUSHUP), Movement.PUSHUP)
        with self.assertRaises(InvalidInputError):
            coerce_movement("snatch")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
