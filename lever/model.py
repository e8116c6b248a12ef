"""Tabular views of profiles, solutions and comparisons.

Keeps pandas out of the solver and comparison code; the runner, the sweep
script and the plots all build their tables here.

Functions
---------
variant_names(movement) -> list
    Variant names tabulated for a movement family.
profile_table(profiles) -> pandas.DataFrame
    Segment lengths (m) and derived proportions, one row per lifter.
rom_table(anthro, movements=None) -> pandas.DataFrame
    Reference-pose ROM, moment arms and trunk angle for every variant.
pose_trace(anthro, movement, options=None, frames=21) -> pandas.DataFrame
    Joint coordinates over the phase range plus the worst segment-length error.
comparison_table(result) -> pandas.DataFrame
    Per-lifter metrics and equivalent performance.
ratio_table(result) -> pandas.DataFrame
    Cross-lifter ratios, advantage and the capacity-adjusted figures.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd

from anthro.segments import Anthropometry

from . import config as cfg
from .comparison import ComparisonResult
from .kinematics import RIGID_LINKS, distance
from .options import Movement, coerce_movement, parse_options
from .solvers import get_solver, reference_solution, solve

JOINTS = ("ankle", "knee", "hip", "shoulder", "elbow", "wrist", "head")


def variant_names(movement) -> List[Optional[str]]:
    movement = coerce_movement(movement)
    if movement is Movement.SQUAT:
        return list(cfg.BAR_POSITIONS)
    if movement is Movement.DEADLIFT:
        return list(cfg.DEADLIFT_SHIN_ANGLES)
    if movement is Movement.BENCH:
        return [f"{grip}-moderate" for grip in cfg.BENCH_GRIP_ANGLES]
    if movement is Movement.PULLUP:
        return list(cfg.GRIP_FACTORS)
    if movement is Movement.PUSHUP:
        return list(cfg.PUSHUP_WIDTH_ANGLES)
    return [None]


def profile_table(profiles: Mapping[str, Anthropometry]) -> pd.DataFrame:
    rows = []
    for label, a in profiles.items():
        row = {"label": label, "height_m": a.height, "weight_kg": a.weight, "sex": a.sex.value}
        row.update(a.segments.as_dict())
        row.update({
            "stacked_height_m": a.segments.total_height,
            "arm_reach_m": a.arm_reach,
            "crural_index": a.crural_index,
            "femur_torso_ratio": a.femur_torso_ratio,
            "ape_index": a.ape_index,
        })
        rows.append(row)
    return pd.DataFrame(rows)


def rom_table(anthro: Anthropometry, movements: Optional[Iterable] = None) -> pd.DataFrame:
    rows = []
    for movement in movements or list(Movement):
        movement = coerce_movement(movement)
        for variant in variant_names(movement):
            sol = reference_solution(anthro, movement, variant)
            rows.append({
                "movement": movement.value,
                "variant": variant or "-",
                "displacement_m": sol.displacement,
                "hip_moment_arm_m": sol.hip_moment_arm,
                "knee_moment_arm_m": sol.moment_arms.get("knee", 0.0),
                "trunk_deg": sol.trunk_angle if sol.trunk_angle is not None else float("nan"),
                "valid": sol.valid,
                "mobility_limited": sol.mobility_limited,
            })
    return pd.DataFrame(rows)


def pose_trace(anthro: Anthropometry, movement, options=None, frames: int = 21) -> pd.DataFrame:
    options = parse_options(movement, options)
    seg = get_solver(movement).sagittal_segments(anthro, options)
    rows = []
    for phase in np.linspace(0.0, 1.0, frames):
        result = solve(anthro, movement, options, float(phase))
        joints = result.pose.joints
        row: Dict[str, object] = {"phase": float(phase), "valid": result.valid}
        for name in JOINTS:
            row[f"{name}_x"] = joints[name].x
            row[f"{name}_y"] = joints[name].y
        bar = result.pose.bar
        row["bar_x"] = bar.x if bar is not None else float("nan")
        row["bar_y"] = bar.y if bar is not None else float("nan")
        row["max_segment_error_mm"] = 1000.0 * max(
            abs(distance(joints[a], joints[b]) - getattr(seg, name)) for a, b, name in RIGID_LINKS
        )
        rows.append(row)
    return pd.DataFrame(rows)


def comparison_table(result: ComparisonResult) -> pd.DataFrame:
    rows = []
    for r in (result.lifter_a, result.lifter_b):
        m = r.metrics
        rows.append({
            "lifter": r.name,
            "variant": r.variant,
            "valid": r.valid,
            "load_kg": r.performance.load,
            "reps": r.performance.reps,
            "displacement_m": m.displacement,
            "hip_moment_arm_m": r.solution.hip_moment_arm,
            "effective_mass_kg": m.effective_mass,
            "work_per_rep_J": m.work_per_rep,
            "total_work_J": m.total_work,
            "demand_factor": m.demand_factor,
            "score_p4p": m.score_p4p,
            "calories_kcal": m.calories,
            "peak_power_W": m.peak_power,
            "avg_power_W": m.avg_power,
            "burn_rate_kcal_h": m.burn_rate,
            "equivalent_load_kg": r.equivalent_load,
            "equivalent_reps": r.equivalent_reps,
        })
    return pd.DataFrame(rows)


def ratio_table(result: ComparisonResult) -> pd.DataFrame:
    block = result.comparison
    row = {
        "movement": result.movement.value,
        "variant_A": result.lifter_a.variant,
        "variant_B": result.lifter_b.variant,
        "demand_ratio": block.demand_ratio,
        "displacement_ratio": block.displacement_ratio,
        "work_ratio": block.work_ratio,
        "advantage": block.advantage_direction,
        "advantage_pct": block.advantage_percentage,
        "valid": result.valid,
    }
    adj = result.capacity_adjusted
    if adj is not None:
        row.update({
            "capacity_ratio": adj.demand_ratio,
            "capacity_advantage": adj.advantage_direction,
            "capacity_pct": adj.advantage_percentage,
        })
    return pd.DataFrame([row])
