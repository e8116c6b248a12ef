import unittest

from anthro.segments import build_profile, profile_from_proportions
from lever.comparison import Lifter, Performance, compare_lifts
from lever.model import (
    comparison_table,
    pose_trace,
    profile_table,
    ratio_table,
    rom_table,
    variant_names,
)
from lever.options import Movement


class TableTests(unittest.TestCase):
    def setUp(self) -> None:
        self.anthro = build_profile(1.75, 77.0, "male")

    def test_profile_table_has_one_row_per_lifter(self) -> None:
        profiles = {
            "A": self.anthro,
            "B": profile_from_proportions(1.63, 60.0, "female", proportion="longTorso"),
        }
        df = profile_table(profiles)
        self.assertEqual(list(df["label"]), ["A", "B"])
        self.assertIn("femur", df.columns)
        self.assertAlmostEqual(df.loc[0, "arm_reach_m"], self.anthro.arm_reach)

    def test_rom_table_covers_every_variant(self) -> None:
        df = rom_table(self.anthro)
        expected = sum(len(variant_names(m)) for m in Movement)
        self.assertEqual(len(df), expected)
        self.assertTrue(df["valid"].all())
        self.assertTrue((df["displacement_m"] > 0).all())

    def test_rom_table_subset(self) -> None:
        df = rom_table(self.anthro, ["squat"])
        self.assertEqual(list(df["variant"]), variant_names(Movement.SQUAT))

    def test_pose_trace_keeps_segments_rigid(self) -> None:
        for movement in Movement:
            df = pose_trace(self.anthro, movement, frames=9)
            self.assertEqual(len(df), 9)
            self.assertLess(df["max_segment_error_mm"].max(), 1.0, movement)
        wide = pose_trace(self.anthro, Movement.SQUAT, "highBar-ultraWide", frames=5)
        self.assertTrue(wide["valid"].all())
        self.assertLess(wide["max_segment_error_mm"].max(), 1.0)

    def test_pose_trace_bar_rises(self) -> None:
        df = pose_trace(self.anthro, Movement.SQUAT, "highBar", frames=11)
        self.assertTrue(df["bar_y"].is_monotonic_increasing)
        self.assertTrue(pose_trace(self.anthro, Movement.PUSHUP, frames=3)["bar_y"].isna().all())

    def test_comparison_tables(self) -> None:
        other = build_profile(1.905, 95.0, "male")
        result = compare_lifts(Lifter("A", self.anthro), Lifter("B", other), Movement.SQUAT, "highBar", "lowBar",
                               Performance(143.0, 5))
        per_lifter = comparison_table(result)
        self.assertEqual(list(per_lifter["lifter"]), ["A", "B"])
        self.assertEqual(list(per_lifter["variant"]), ["highBar", "lowBar"])
        ratios = ratio_table(result)
        self.assertEqual(len(ratios), 1)
        self.assertIn("capacity_ratio", ratios.columns)
        self.assertAlmostEqual(ratios.loc[0, "demand_ratio"], result.comparison.demand_ratio)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
