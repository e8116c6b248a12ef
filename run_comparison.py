"""
Structured runner for the LEVER lift comparison model.
- Anthropometry: anthro/config.py, anthro/segments.py
- Configuration: lever/config.py
- Pose solvers: lever/kinematics.py, lever/solvers.py
- Rep cycle timing: lever/animator.py
- Metrics and comparison: lever/physics.py, lever/comparison.py
- Tables and plotting: lever/model.py, lever/plots.py

Prints the example lifters, their reference-pose ROM for every lift and the
reference comparisons between the first two lifters, then draws the poses.
"""
import logging

import pandas as pd

from anthro.segments import profile_from_proportions
from lever import config as cfg
from lever.animator import calculate_rep_cycle, get_animation_phase
from lever.comparison import Lifter, Performance, compare_cross_lift, compare_lifts
from lever.model import comparison_table, profile_table, ratio_table, rom_table
from lever.options import Movement
from lever.plots import plot_pose_sequence, plot_reference_poses
from lever.solvers import get_rom


def describe_bar_offsets() -> str:
    return "  Bar offsets (forward, along trunk) m: " + ", ".join(
        f"{name} {forward:+.2f}/{along:+.2f}" for name, (forward, along) in cfg.BAR_POSITIONS.items())


def _banner(title: str):
    print("\n" + "="*80)
    print(title)
    print("="*80)


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    _banner("LEVER: lift difficulty from body proportions")

    _banner("USER INPUT VARIABLES")
    print("\nSquat solver:")
    print(f"  Trunk angle search: {cfg.TRUNK_MIN_DEG}-{cfg.TRUNK_MAX_DEG} deg above horizontal")
    print(f"  Ankle dorsiflexion search floor: {cfg.SQUAT_MIN_ANKLE_DEG} deg (bisected when the trunk is capped)")
    print(f"  Bisection: {cfg.SOLVER_MAX_ITERATIONS} iterations, tolerance {cfg.SOLVER_TOLERANCE:g} m")
    print(f"  Fallback displacement: {cfg.FALLBACK_DISPLACEMENT_FACTOR:.2f} x height")
    print(describe_bar_offsets())
    print(f"  Stance femur factors: {cfg.SQUAT_STANCE_FEMUR_FACTORS}")

    print("\nOther lifts:")
    print(f"  Deadlift plate radius: {cfg.STANDARD_PLATE_RADIUS} m, sumo ROM factors {cfg.SUMO_STANCE_ROM_FACTORS}")
    print(f"  Bench height: {cfg.BENCH_HEIGHT} m, chest depth {cfg.AVERAGE_CHEST_DEPTH} m")
    print(f"  Pull-up bar: {cfg.PULLUP_BAR_HEIGHT} m, grip factors {cfg.GRIP_FACTORS}")

    print("\nMetrics:")
    print(f"  Gravity: {cfg.GRAVITY} m/s^2")
    print(f"  Allometric exponent: {cfg.ALLOMETRIC_EXPONENT:.3f}")
    print(f"  Efficiency: {cfg.PEAK_EFFICIENCY} x exp(-{cfg.EFFICIENCY_DECAY} v^2)")
    print(f"  Time per rep: {cfg.DEFAULT_SECONDS_PER_REP} s")
    print(f"  Neutral band: +/-{cfg.NEUTRAL_BAND_PERCENT}%")

    profiles = {}
    for label, height_m, weight_kg, sex, proportion, arms in cfg.EXAMPLE_LIFTERS:
        profiles[label] = profile_from_proportions(height_m, weight_kg, sex, proportion=proportion, arms=arms)

    print("\nLifter Examples:")
    for label, height_m, weight_kg, sex, proportion, arms in cfg.EXAMPLE_LIFTERS:
        print(f"  {label}: {height_m:.3f} m, {weight_kg:.0f} kg, {sex}, proportions {proportion}, arms {arms}")

    _banner("CALCULATED RESULTS")

    df_profiles = profile_table(profiles)
    print("\nSegment lengths (m):")
    print(df_profiles[["label", "height_m", "torso", "upper_arm", "forearm", "femur", "tibia",
                       "foot_height", "head_neck"]].round(3).to_string(index=False))
    print("\nProportions:")
    print(df_profiles[["label", "arm_reach_m", "crural_index", "femur_torso_ratio",
                       "ape_index"]].round(3).to_string(index=False))

    for label, anthro in profiles.items():
        print(f"\nReference poses: {label}")
        print(rom_table(anthro).round(3).to_string(index=False))

    labels = list(profiles)
    lifter_a = Lifter(labels[0], profiles[labels[0]])
    lifter_b = Lifter(labels[1], profiles[labels[1]])
    results = []
    for movement, variant_a, variant_b, load, reps in cfg.REFERENCE_COMPARISONS:
        result = compare_lifts(lifter_a, lifter_b, movement, variant_a, variant_b, Performance(load, reps))
        results.append(result)
        _banner(f"{result.movement.value.upper()}: {lifter_a.name} ({result.lifter_a.variant}) "
                f"vs {lifter_b.name} ({result.lifter_b.variant}), {load:.0f} kg x {reps}")
        print(comparison_table(result).round(3).to_string(index=False))
        print("\n" + ratio_table(result).round(4).to_string(index=False))
        if not result.valid:
            print("\n[warn] at least one pose did not solve; metrics use an estimated ROM")
        print("")
        for line in result.explanations:
            print(f"  - {line}")
        if result.capacity_adjusted is not None:
            print(f"  * {result.capacity_adjusted.explanation}")

    print("\nCross-lift conversion (same lifter, 100 kg on variant A):")
    cross_rows = []
    for label, anthro in profiles.items():
        for variant_a, variant_b in (("highBar", "lowBar"), ("highBar", "front")):
            cross = compare_cross_lift(anthro, Movement.SQUAT, variant_a, variant_b, 100.0)
            cross_rows.append({
                "label": label,
                "from": cross.variant_a,
                "to": cross.variant_b,
                "factor": cross.conversion_factor,
                "equivalent_kg": cross.equivalent_load,
                "valid": cross.valid,
            })
    print(pd.DataFrame(cross_rows).round(3).to_string(index=False))

    anthro = profiles[labels[0]]
    if cfg.EXPORT_CSV:
        df_profiles.to_csv("lifter_profiles.csv", index=False)
        rom_table(anthro).to_csv("reference_poses.csv", index=False)
        print("\n[saved] lifter_profiles.csv, reference_poses.csv")

    print("\nRep cycle (squat, high bar, 0.5 m/s, 0.5 s pause at the bottom):")
    cycle = calculate_rep_cycle(get_rom(anthro, Movement.SQUAT, "highBar"), cfg.DEFAULT_BAR_VELOCITY,
                                pause_bottom=0.5)
    cycle_rows = []
    for i in range(11):
        frame = get_animation_phase(Movement.SQUAT, i / 10.0, cycle)
        cycle_rows.append({"t": frame.t, "segment": frame.name, "progress": frame.progress, "phase": frame.phase})
    print(f"  total {cycle.total_duration:.2f} s")
    print(pd.DataFrame(cycle_rows).round(3).to_string(index=False))

    # Plots
    for result in results:
        plot_reference_poses(result)
    for movement in Movement:
        plot_pose_sequence(anthro, movement, label=labels[0])

    # Keep all figures open at the end of the run only if configured
    if getattr(cfg, "BLOCK_AT_END", False) or getattr(cfg, "SHOW_BLOCKING", False):
        import matplotlib.pyplot as plt
        plt.show()


if __name__ == "__main__":
    main()
