import unittest

from anthro.segments import InvalidInputError
from lever.animator import (
    RepCycleConfig,
    calculate_rep_cycle,
    ease_in_out_cubic,
    ease_in_out_quad,
    get_animation_phase,
    get_rep_progress,
)
from lever.options import Movement


class EasingTests(unittest.TestCase):
    def test_endpoints_and_midpoint(self) -> None:
        for ease in (ease_in_out_quad, ease_in_out_cubic):
            self.assertEqual(ease(0.0), 0.0)
            self.assertEqual(ease(1.0), 1.0)
            self.assertAlmostEqual(ease(0.5), 0.5)


class RepCycleTests(unittest.TestCase):
    def test_durations_follow_rom_and_velocity(self) -> None:
        cycle = calculate_rep_cycle(0.6, 0.5, pause_bottom=0.3, pause_top=0.2)
        self.assertAlmostEqual(cycle.eccentric_duration, 1.2)
        self.assertAlmostEqual(cycle.concentric_duration, 1.2)
        self.assertAlmostEqual(cycle.total_duration, 2.9)

    def test_invalid_timing_raises(self) -> None:
        with self.assertRaises(InvalidInputError):
            calculate_rep_cycle(0.5, 0.0)
        with self.assertRaises(InvalidInputError):
            calculate_rep_cycle(0.5, 0.5, pause_bottom=-1.0)
        with self.assertRaises(InvalidInputError):
            calculate_rep_cycle(float("nan"), 0.5)


class AnimationPhaseTests(unittest.TestCase):
    def setUp(self) -> None:
        self.cycle = calculate_rep_cycle(0.5, 0.5)

    def test_squat_starts_at_top_and_bottoms_out_halfway(self) -> None:
        start = get_animation_phase(Movement.SQUAT, 0.0, self.cycle)
        self.assertEqual(start.name, "eccentric")
        self.assertEqual(start.phase, 1.0)
        halfway = get_animation_phase(Movement.SQUAT, 0.5, self.cycle)
        self.assertEqual(halfway.name, "concentric")
        self.assertAlmostEqual(halfway.phase, 0.0)
        quarter = get_animation_phase("squat", 0.25, self.cycle)
        self.assertAlmostEqual(quarter.phase, 0.5)

    def test_progress_wraps(self) -> None:
        a = get_animation_phase(Movement.BENCH, 0.3, self.cycle)
        b = get_animation_phase(Movement.BENCH, 2.3, self.cycle)
        self.assertAlmostEqual(a.phase, b.phase)
        self.assertEqual(get_animation_phase(Movement.BENCH, 1.0, self.cycle).phase, 1.0)

    def test_pullup_goes_up_first(self) -> None:
        start = get_animation_phase(Movement.PULLUP, 0.0, self.cycle)
        self.assertEqual(start.name, "concentric")
        self.assertEqual(start.phase, 0.0)
        self.assertAlmostEqual(get_animation_phase(Movement.PULLUP, 0.5, self.cycle).phase, 1.0)

    def test_pauses_hold_position(self) -> None:
        cycle = RepCycleConfig(eccentric_duration=1.0, bottom_pause=1.0, concentric_duration=1.0, top_pause=1.0)
        frame = get_animation_phase(Movement.SQUAT, 0.375, cycle)
        self.assertEqual(frame.name, "bottom")
        self.assertEqual(frame.phase, 0.0)
        frame = get_animation_phase(Movement.SQUAT, 0.875, cycle)
        self.assertEqual(frame.name, "top")
        self.assertEqual(frame.phase, 1.0)

    def test_zero_length_cycle_holds_top(self) -> None:
        cycle = calculate_rep_cycle(0.0, 0.5)
        frame = get_animation_phase(Movement.SQUAT, 0.4, cycle)
        self.assertEqual(frame.phase, 1.0)

    def test_thruster_is_continuous_over_the_cycle(self) -> None:
        phases = [
            get_animation_phase(Movement.THRUSTER, i / 1000.0, self.cycle, squat_rom=0.5, press_rom=0.5).phase
            for i in range(1001)
        ]
        steps = [abs(b - a) for a, b in zip(phases, phases[1:])]
        self.assertLess(max(steps), 0.01)
        self.assertAlmostEqual(phases[0], 0.5)
        self.assertAlmostEqual(min(phases), 0.0, places=3)
        self.assertAlmostEqual(max(phases), 1.0, places=3)

    def test_thruster_sub_phases_in_order(self) -> None:
        names = []
        for i in range(200):
            name = get_animation_phase(Movement.THRUSTER, i / 200.0, self.cycle, squat_rom=0.6, press_rom=0.4).name
            if not names or names[-1] != name:
                names.append(name)
        self.assertEqual(names, ["squat_down", "squat_up", "press_up", "press_down"])

    def test_thruster_needs_both_roms(self) -> None:
        with self.assertRaises(InvalidInputError):
            get_animation_phase(Movement.THRUSTER, 0.1, self.cycle, squat_rom=0.5)


class RepProgressTests(unittest.TestCase):
    def test_rep_counting(self) -> None:
        progress = get_rep_progress(2.5, 2.0, 3)
        self.assertEqual(progress.current_rep, 2)
        self.assertAlmostEqual(progress.rep_progress, 0.25)
        self.assertFalse(progress.complete)

    def test_set_complete(self) -> None:
        progress = get_rep_progress(6.0, 2.0, 3)
        self.assertTrue(progress.complete)
        self.assertEqual(progress.current_rep, 3)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
