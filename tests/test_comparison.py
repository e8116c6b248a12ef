import unittest

from anthro.segments import SDModifiers, build_profile
from lever import config as cfg
from lever.comparison import (
    ADVANTAGE_A,
    ADVANTAGE_B,
    NEUTRAL,
    UNDEFINED,
    Lifter,
    Performance,
    advantage_direction,
    advantage_percentage,
    compare_cross_lift,
    compare_lifts,
    safe_ratio,
)
from lever.options import Movement


def lifter(name: str, **modifiers) -> Lifter:
    return Lifter(name, build_profile(1.75, 77.0, "male", modifiers=SDModifiers(**modifiers)))


class RatioHelperTests(unittest.TestCase):
    def test_safe_ratio_rejects_degenerate_sides(self) -> None:
        self.assertAlmostEqual(safe_ratio(1.2, 1.0), 1.2)
        self.assertIsNone(safe_ratio(1.0, 0.0))
        self.assertIsNone(safe_ratio(0.0, 1.0))
        self.assertIsNone(safe_ratio(-1.0, 1.0))
        self.assertIsNone(safe_ratio(float("nan"), 1.0))
        self.assertIsNone(safe_ratio(1.0, float("inf")))

    def test_neutral_band_is_symmetric(self) -> None:
        self.assertEqual(advantage_direction(1.0), NEUTRAL)
        self.assertEqual(advantage_direction(1.009), NEUTRAL)
        self.assertEqual(advantage_direction(1.0 / 1.009), NEUTRAL)
        self.assertEqual(advantage_direction(1.02), ADVANTAGE_A)
        self.assertEqual(advantage_direction(1.0 / 1.02), ADVANTAGE_B)
        self.assertEqual(advantage_direction(None), UNDEFINED)

    def test_advantage_percentage(self) -> None:
        self.assertAlmostEqual(advantage_percentage(1.2), 20.0)
        self.assertAlmostEqual(advantage_percentage(0.9), -10.0)
        self.assertIsNone(advantage_percentage(None))


class CompareLiftsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.average = lifter("Average")
        self.long_femur = lifter("Long femur", femur=1.0)
        self.perf = Performance(load=143.0, reps=5)

    def test_identical_lifters_are_neutral(self) -> None:
        result = compare_lifts(self.average, lifter("Twin"), Movement.SQUAT, "highBar", "highBar", self.perf)
        self.assertAlmostEqual(result.comparison.demand_ratio, 1.0)
        self.assertEqual(result.comparison.advantage_direction, NEUTRAL)
        self.assertAlmostEqual(result.lifter_b.equivalent_load, 143.0)
        self.assertAlmostEqual(result.lifter_b.equivalent_reps, 5.0)
        self.assertIsNone(result.capacity_adjusted)
        self.assertTrue(result.valid)

    def test_longer_femur_increases_demand(self) -> None:
        result = compare_lifts(self.average, self.long_femur, "squat", "highBar", "highBar", self.perf)
        block = result.comparison
        self.assertGreater(block.demand_ratio, 1.0)
        self.assertGreater(block.displacement_ratio, 1.0)
        self.assertEqual(block.advantage_direction, ADVANTAGE_A)
        self.assertAlmostEqual(block.advantage_percentage, (block.demand_ratio - 1.0) * 100.0)
        self.assertAlmostEqual(result.lifter_b.equivalent_load, 143.0 / block.demand_ratio)
        self.assertAlmostEqual(result.lifter_b.equivalent_reps, 5.0 * block.demand_ratio)
        self.assertTrue(any("Long femur" in line and "hip moment arm" in line for line in result.explanations))

    def test_swapping_lifters_inverts_the_result(self) -> None:
        ab = compare_lifts(self.average, self.long_femur, Movement.SQUAT, "highBar", "highBar", self.perf)
        ba = compare_lifts(self.long_femur, self.average, Movement.SQUAT, "highBar", "highBar", self.perf)
        self.assertAlmostEqual(ab.comparison.demand_ratio * ba.comparison.demand_ratio, 1.0)
        self.assertEqual(ab.comparison.advantage_direction, ADVANTAGE_A)
        self.assertEqual(ba.comparison.advantage_direction, ADVANTAGE_B)
        self.assertAlmostEqual(ab.lifter_b.equivalent_load, ba.lifter_a.equivalent_load)

    def test_separate_performances(self) -> None:
        perf_b = Performance(load=120.0, reps=3)
        result = compare_lifts(self.average, self.long_femur, Movement.SQUAT, "highBar", "highBar", self.perf, perf_b)
        ratio = result.comparison.demand_ratio
        self.assertAlmostEqual(result.lifter_a.equivalent_load, 120.0 * ratio)
        self.assertAlmostEqual(result.lifter_a.equivalent_reps, 3.0 / ratio)
        self.assertEqual(result.lifter_b.performance, perf_b)

    def test_capacity_adjustment_only_for_different_variants(self) -> None:
        result = compare_lifts(self.average, self.average, Movement.SQUAT, "highBar", "lowBar", self.perf)
        adjusted = result.capacity_adjusted
        self.assertIsNotNone(adjusted)
        self.assertEqual(adjusted.factor_a, cfg.CAPACITY_FACTORS["squat"]["highBar"])
        self.assertEqual(adjusted.factor_b, cfg.CAPACITY_FACTORS["squat"]["lowBar"])
        expected = result.comparison.demand_ratio * adjusted.factor_b / adjusted.factor_a
        self.assertAlmostEqual(adjusted.demand_ratio, expected)
        self.assertAlmostEqual(adjusted.equivalent_load_b, 143.0 / expected)
        self.assertIn("capacity", adjusted.explanation)

        no_table = compare_lifts(self.average, self.average, Movement.SQUAT, "highBar", "lowBar", self.perf,
                                 capacity_factors={})
        self.assertIsNone(no_table.capacity_adjusted)

    def test_capacity_adjustment_favours_the_lower_capacity_variant(self) -> None:
        # A squats low bar (higher capacity), B high bar: the adjustment moves towards B
        result = compare_lifts(self.average, self.average, Movement.SQUAT, "lowBar", "highBar", self.perf)
        ratio = result.comparison.demand_ratio
        adjusted = result.capacity_adjusted
        factors = cfg.CAPACITY_FACTORS["squat"]
        self.assertAlmostEqual(adjusted.demand_ratio, ratio * factors["highBar"] / factors["lowBar"])
        self.assertLess(adjusted.demand_ratio, ratio)
        self.assertEqual(adjusted.advantage_direction, ADVANTAGE_B)

    def test_capacity_follows_bar_position_not_stance(self) -> None:
        wide_high = compare_lifts(self.average, self.average, Movement.SQUAT, "highBar-wide", "lowBar", self.perf)
        self.assertEqual(wide_high.lifter_a.variant, "highBar-wide")
        self.assertEqual(wide_high.capacity_adjusted.factor_a, cfg.CAPACITY_FACTORS["squat"]["highBar"])
        same_bar = compare_lifts(self.average, self.average, Movement.SQUAT, "lowBar-wide", "lowBar", self.perf)
        self.assertIsNone(same_bar.capacity_adjusted)
        self.assertEqual(same_bar.comparison.advantage_direction, ADVANTAGE_A)

    def test_unsolved_squat_gives_undefined_comparison(self) -> None:
        stuck = lifter("Stuck", femur=4.0, tibia=-4.0, torso=-4.0)
        result = compare_lifts(self.average, stuck, Movement.SQUAT, "highBar", "highBar", self.perf)
        self.assertFalse(result.valid)
        self.assertFalse(result.lifter_b.valid)
        self.assertIsNone(result.comparison.demand_ratio)
        self.assertEqual(result.comparison.advantage_direction, UNDEFINED)
        self.assertIsNone(result.lifter_b.equivalent_load)
        self.assertGreater(result.lifter_b.metrics.total_work, 0.0)
        self.assertIn("no valid trunk angle", result.explanations[0])

    def test_deadlift_explains_arm_length(self) -> None:
        long_arms = lifter("Long arms", upper_arm=1.0, forearm=1.0)
        result = compare_lifts(self.average, long_arms, Movement.DEADLIFT, None, None, Performance(180.0, 3))
        self.assertTrue(any("arms are" in line for line in result.explanations))
        self.assertLess(result.comparison.displacement_ratio, 1.0)

    def test_every_movement_compares(self) -> None:
        for movement in Movement:
            result = compare_lifts(self.average, self.long_femur, movement, None, None, Performance(50.0, 5))
            self.assertTrue(result.comparison.defined, movement)
            self.assertTrue(result.explanations, movement)


class CrossLiftTests(unittest.TestCase):
    def test_high_to_low_bar_conversion(self) -> None:
        anthro = build_profile(1.75, 77.0, "male")
        result = compare_cross_lift(anthro, Movement.SQUAT, "highBar", "lowBar", 100.0)
        self.assertTrue(result.valid)
        self.assertAlmostEqual(result.conversion_factor, result.demand_a / result.demand_b)
        self.assertAlmostEqual(result.equivalent_load, 100.0 * result.conversion_factor)
        self.assertEqual((result.variant_a, result.variant_b), ("highBar", "lowBar"))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
