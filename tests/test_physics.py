import math
import unittest

from anthro.segments import InvalidInputError, build_profile
from lever import config as cfg
from lever.kinematics import KinematicSolution
from lever.options import Movement, PushupOptions
from lever.physics import (
    calculate_metrics,
    demand_factor,
    effective_mass,
    mechanical_efficiency,
    metabolic_calories,
    p4p_score,
    work_per_rep,
)


def solution(hip: float, displacement: float) -> KinematicSolution:
    return KinematicSolution(positions={}, angles={}, moment_arms={"hip": hip, "knee": 0.0}, displacement=displacement)


class WorkTests(unittest.TestCase):
    def test_work_per_rep(self) -> None:
        self.assertAlmostEqual(work_per_rep(145.0, 0.58), 825.0, delta=0.5)
        self.assertAlmostEqual(work_per_rep(145.0, 0.68), 967.3, delta=0.5)
        # Taller lifter, same nominal load: roughly 17% more work
        self.assertAlmostEqual(work_per_rep(145.0, 0.68) / work_per_rep(145.0, 0.58), 1.17, delta=0.01)

    def test_p4p_uses_two_thirds_power(self) -> None:
        self.assertAlmostEqual(p4p_score(1000.0, 64.0), 1000.0 / 16.0)

    def test_efficiency_decreases_with_speed(self) -> None:
        self.assertEqual(mechanical_efficiency(0.0), cfg.PEAK_EFFICIENCY)
        self.assertLess(mechanical_efficiency(1.0), mechanical_efficiency(0.5))
        self.assertAlmostEqual(mechanical_efficiency(1.0), 0.25 * math.exp(-0.5))

    def test_calories(self) -> None:
        # v = 0.5 / 2.5 = 0.2 m/s
        expected = 4184.0 / (0.25 * math.exp(-0.5 * 0.04)) / 4184.0
        self.assertAlmostEqual(metabolic_calories(4184.0, 0.5, 2.5), expected)


class DemandFactorTests(unittest.TestCase):
    def test_hip_moment_arm_ratio(self) -> None:
        a = demand_factor(Movement.SQUAT, solution(0.20, 0.55))
        b = demand_factor(Movement.SQUAT, solution(0.24, 0.55))
        self.assertAlmostEqual(b / a, 1.2)

    def test_displacement_is_square_rooted(self) -> None:
        a = demand_factor(Movement.DEADLIFT, solution(0.2, 0.25))
        b = demand_factor(Movement.DEADLIFT, solution(0.2, 1.0))
        self.assertAlmostEqual(b / a, 2.0)

    def test_pullup_grip_factor(self) -> None:
        sol = solution(0.0, 0.5)
        self.assertAlmostEqual(demand_factor(Movement.PULLUP, sol, "pronated"), 0.5 * cfg.GRIP_FACTORS["pronated"])
        self.assertAlmostEqual(demand_factor(Movement.PULLUP, sol, "supinated"), 0.5)

    def test_other_lifts_use_displacement(self) -> None:
        self.assertAlmostEqual(demand_factor(Movement.BENCH, solution(0.0, 0.3)), 0.3)


class EffectiveMassTests(unittest.TestCase):
    def setUp(self) -> None:
        self.man = build_profile(1.75, 80.0, "male")
        self.woman = build_profile(1.63, 60.0, "female")

    def test_squat_adds_body_share(self) -> None:
        male, female = cfg.EFFECTIVE_MASS_FACTORS["squat"]
        self.assertAlmostEqual(effective_mass(Movement.SQUAT, 100.0, self.man), 100.0 + male * 80.0)
        self.assertAlmostEqual(effective_mass(Movement.SQUAT, 60.0, self.woman), 60.0 + female * 60.0)

    def test_bench_is_external_load_only(self) -> None:
        self.assertAlmostEqual(effective_mass(Movement.BENCH, 100.0, self.man), 100.0)

    def test_pullup_moves_whole_body_plus_belt(self) -> None:
        self.assertAlmostEqual(effective_mass(Movement.PULLUP, 10.0, self.man), 90.0)

    def test_pushup_ignores_load_and_scales_added_weight(self) -> None:
        male, _ = cfg.EFFECTIVE_MASS_FACTORS["pushup"]
        options = PushupOptions(added_weight=20.0)
        mass = effective_mass(Movement.PUSHUP, 500.0, self.man, options)
        self.assertAlmostEqual(mass, male * 80.0 + cfg.PUSHUP_ADDED_WEIGHT_FACTOR * 20.0)


class CalculateMetricsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.anthro = build_profile(1.75, 77.0, "male")

    def test_metrics_are_consistent(self) -> None:
        m = calculate_metrics(self.anthro, Movement.SQUAT, "highBar", load=143.0, reps=5, time_per_rep=2.5)
        self.assertGreater(m.displacement, 0.0)
        self.assertAlmostEqual(m.work_per_rep, m.effective_mass * cfg.GRAVITY * m.displacement)
        self.assertAlmostEqual(m.total_work, 5 * m.work_per_rep)
        self.assertAlmostEqual(m.avg_power, m.total_work / 12.5)
        self.assertAlmostEqual(m.burn_rate, m.calories / (12.5 / 3600.0))
        self.assertAlmostEqual(m.score_p4p, m.total_work / 77.0 ** (2.0 / 3.0))
        self.assertGreater(m.peak_power, m.avg_power)
        self.assertIsNone(m.vpi)

    def test_reused_solution_gives_same_metrics(self) -> None:
        sol = solution(0.2, 0.5)
        m = calculate_metrics(self.anthro, "squat", load=100.0, solution=sol)
        self.assertEqual(m.displacement, 0.5)
        self.assertAlmostEqual(m.demand_factor, 0.2 * math.sqrt(0.5))

    def test_pullup_reports_vpi(self) -> None:
        m = calculate_metrics(self.anthro, Movement.PULLUP, "neutral", load=10.0, reps=8)
        expected = 87.0 * cfg.GRIP_FACTORS["neutral"] / 77.0 ** (2.0 / 3.0)
        self.assertAlmostEqual(m.vpi, expected)

    def test_invalid_solution_still_yields_metrics(self) -> None:
        invalid = KinematicSolution(positions={}, angles={}, moment_arms={"hip": 0.0, "knee": 0.0},
                                    displacement=0.6475, valid=False, errors=("unsolved",))
        m = calculate_metrics(self.anthro, Movement.SQUAT, load=100.0, solution=invalid)
        self.assertGreater(m.total_work, 0.0)
        self.assertEqual(m.demand_factor, 0.0)

    def test_bad_timing_raises(self) -> None:
        with self.assertRaises(InvalidInputError):
            calculate_metrics(self.anthro, Movement.BENCH, load=60.0, time_per_rep=0.0)
        with self.assertRaises(InvalidInputError):
            calculate_metrics(self.anthro, Movement.BENCH, load=60.0, reps=0)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
