"""Work, demand and energy metrics for one lifter performing one lift.

Functions
---------
effective_mass(movement, load, anthro, options) -> float
    External load plus the share of body weight that moves with the bar.
work_per_rep(effective_mass, displacement) -> float
    m * g * d in joules.
demand_factor(movement, solution, options) -> float
    Leverage-weighted difficulty: hip moment arm * sqrt(displacement) for the
    hip-dominant lifts, displacement (times grip factor for pull-ups) otherwise.
mechanical_efficiency(velocity) -> float
    eta(v) = 0.25 * exp(-0.5 v^2).
calculate_metrics(anthro, movement, options, load, reps, ...) -> Metrics
    Everything above plus P4P score, calories, power and burn rate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from anthro.segments import Anthropometry, InvalidInputError, Sex

from . import config as cfg
from .kinematics import KinematicSolution
from .options import Movement, MovementOptions, coerce_movement, parse_options
from .solvers import reference_solution

# Lifts whose demand is driven by the solved hip moment arm
HIP_DOMINANT = frozenset({Movement.SQUAT, Movement.DEADLIFT})


@dataclass(frozen=True)
class Metrics:
    displacement: float
    effective_mass: float
    work_per_rep: float
    total_work: float
    score_p4p: float
    demand_factor: float
    calories: float
    peak_power: float
    avg_power: float
    burn_rate: float                       # kcal per hour of set time
    vpi: Optional[float] = None            # pull-ups only


def body_mass_factor(movement, sex) -> float:
    male, female = cfg.EFFECTIVE_MASS_FACTORS[coerce_movement(movement).value]
    return female if Sex(sex) is Sex.FEMALE else male


def effective_mass(movement, load: float, anthro: Anthropometry, options: Optional[MovementOptions] = None) -> float:
    """Total mass (kg) raised by the lifter per repetition."""
    movement = coerce_movement(movement)
    options = parse_options(movement, options)
    body = body_mass_factor(movement, anthro.sex) * anthro.weight
    if movement is Movement.PULLUP:
        return body + load
    if movement is Movement.PUSHUP:
        # `load` is unused for push-ups; added weight rides on the upper back
        return body + cfg.PUSHUP_ADDED_WEIGHT_FACTOR * options.added_weight
    return load + body


def work_per_rep(mass: float, displacement: float) -> float:
    return mass * cfg.GRAVITY * displacement


def demand_factor(movement, solution: KinematicSolution, options: Optional[MovementOptions] = None) -> float:
    movement = coerce_movement(movement)
    displacement = max(solution.displacement, 0.0)
    if movement in HIP_DOMINANT:
        return solution.hip_moment_arm * math.sqrt(displacement)
    if movement is Movement.PULLUP:
        return displacement * cfg.GRIP_FACTORS[parse_options(movement, options).grip]
    return displacement


def p4p_score(total_work: float, body_weight: float) -> float:
    return total_work / body_weight ** cfg.ALLOMETRIC_EXPONENT


def mechanical_efficiency(velocity: float) -> float:
    return cfg.PEAK_EFFICIENCY * math.exp(-cfg.EFFICIENCY_DECAY * velocity ** 2)


def metabolic_calories(total_work: float, displacement: float, time_per_rep: float) -> float:
    """kcal spent producing `total_work` at the set's average bar speed."""
    eta = mechanical_efficiency(displacement / time_per_rep)
    return total_work / eta / cfg.JOULES_PER_KCAL


def vertical_pull_index(anthro: Anthropometry, grip: str, added_load: float = 0.0) -> float:
    system = anthro.weight + added_load
    return system * cfg.GRIP_FACTORS[grip] / anthro.weight ** cfg.ALLOMETRIC_EXPONENT


def calculate_metrics(
    anthro: Anthropometry,
    movement,
    options=None,
    load: float = 0.0,
    reps: int = 1,
    time_per_rep: float = cfg.DEFAULT_SECONDS_PER_REP,
    solution: Optional[KinematicSolution] = None,
) -> Metrics:
    """Metrics for `reps` repetitions of `movement` with `load` kg.

    `solution` may be passed to reuse an already solved reference pose. An invalid
    solution still yields metrics from its fallback displacement.
    """
    movement = coerce_movement(movement)
    options = parse_options(movement, options)
    if not math.isfinite(time_per_rep) or time_per_rep <= 0.0:
        raise InvalidInputError(f"time_per_rep must be positive, got {time_per_rep}")
    if reps < 1:
        raise InvalidInputError(f"reps must be at least 1, got {reps}")
    if solution is None:
        solution = reference_solution(anthro, movement, options)

    displacement = max(solution.displacement, 0.0)
    mass = effective_mass(movement, load, anthro, options)
    per_rep = work_per_rep(mass, displacement)
    total = per_rep * reps
    set_time = reps * time_per_rep
    calories = metabolic_calories(total, displacement, time_per_rep)
    # Ease-in-out concentric over half the rep peaks at twice its mean speed
    peak_velocity = 2.0 * displacement / (time_per_rep / 2.0)

    return Metrics(
        displacement=displacement,
        effective_mass=mass,
        work_per_rep=per_rep,
        total_work=total,
        score_p4p=p4p_score(total, anthro.weight),
        demand_factor=demand_factor(movement, solution, options),
        calories=calories,
        peak_power=mass * cfg.GRAVITY * peak_velocity,
        avg_power=total / set_time,
        burn_rate=calories / (set_time / 3600.0),
        vpi=vertical_pull_index(anthro, options.grip, load) if movement is Movement.PULLUP else None,
    )
