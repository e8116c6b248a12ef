"""Two-lifter comparison: metrics per lifter, demand ratios and equivalent performance.

`compare_lifts` runs both lifters through the pose solver for the same movement
(variants may differ), computes `Metrics` for each and relates them:

    demand_ratio       = demand_B / demand_A
    displacement_ratio = displacement_B / displacement_A
    advantage          = advantage_A when B's demand is above the neutral band,
                         advantage_B when below it, neutral inside it

The neutral band is symmetric in ratio space (1 / (1 + band), 1 + band) so
swapping the lifters flips the direction exactly. Ratios with a zero or
non-finite side are reported as None with an "undefined" direction.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

from anthro.segments import Anthropometry

from . import config as cfg
from .kinematics import KinematicSolution
from .options import Movement, MovementOptions, coerce_movement, parse_options
from .physics import Metrics, calculate_metrics, demand_factor
from .solvers import reference_solution

logger = logging.getLogger(__name__)

ADVANTAGE_A = "advantage_A"
ADVANTAGE_B = "advantage_B"
NEUTRAL = "neutral"
UNDEFINED = "undefined"


@dataclass(frozen=True)
class Lifter:
    name: str
    anthropometry: Anthropometry


@dataclass(frozen=True)
class Performance:
    load: float
    reps: int = 1


@dataclass(frozen=True)
class LifterResult:
    name: str
    anthropometry: Anthropometry
    variant: str
    solution: Optional[KinematicSolution]
    metrics: Metrics
    performance: Performance
    equivalent_load: Optional[float] = None
    equivalent_reps: Optional[float] = None

    @property
    def valid(self) -> bool:
        return self.solution is None or self.solution.valid


@dataclass(frozen=True)
class ComparisonBlock:
    demand_ratio: Optional[float]
    displacement_ratio: Optional[float]
    work_ratio: Optional[float]
    advantage_direction: str
    advantage_percentage: Optional[float]

    @property
    def defined(self) -> bool:
        return self.demand_ratio is not None


@dataclass(frozen=True)
class CapacityAdjustedResult:
    """Secondary comparison with each demand weighted by its variant's load capacity factor.

    A higher factor marks a variant that lets more load be moved, so the adjustment
    credits the lifter on the lower-capacity variant: ratio = demand_ratio * factor_b / factor_a.
    """

    factor_a: float
    factor_b: float
    demand_ratio: Optional[float]
    advantage_direction: str
    advantage_percentage: Optional[float]
    equivalent_load_b: Optional[float]
    explanation: str


@dataclass(frozen=True)
class ComparisonResult:
    movement: Movement
    lifter_a: LifterResult
    lifter_b: LifterResult
    comparison: ComparisonBlock
    capacity_adjusted: Optional[CapacityAdjustedResult]
    explanations: Tuple[str, ...]

    @property
    def valid(self) -> bool:
        return self.lifter_a.valid and self.lifter_b.valid


@dataclass(frozen=True)
class CrossLiftResult:
    variant_a: str
    variant_b: str
    demand_a: float
    demand_b: float
    conversion_factor: Optional[float]
    equivalent_load: Optional[float]
    valid: bool


def safe_ratio(numerator: float, denominator: float) -> Optional[float]:
    """numerator / denominator for two positive finite values, else None."""
    if not (math.isfinite(numerator) and math.isfinite(denominator)):
        return None
    if numerator <= cfg.RATIO_EPSILON or denominator <= cfg.RATIO_EPSILON:
        return None
    return numerator / denominator


def advantage_direction(ratio: Optional[float], band_percent: float = cfg.NEUTRAL_BAND_PERCENT) -> str:
    if ratio is None:
        return UNDEFINED
    band = 1.0 + band_percent / 100.0
    if ratio > band:
        return ADVANTAGE_A
    if ratio < 1.0 / band:
        return ADVANTAGE_B
    return NEUTRAL


def advantage_percentage(ratio: Optional[float]) -> Optional[float]:
    return None if ratio is None else (ratio - 1.0) * 100.0


def _evaluate(lifter: Lifter, movement: Movement, variant, perf: Performance,
              time_per_rep: float) -> Tuple[MovementOptions, KinematicSolution, Metrics]:
    options = parse_options(movement, variant)
    solution = reference_solution(lifter.anthropometry, movement, options)
    if not solution.valid:
        logger.warning("%s: %s %s unsolved (%s); using fallback displacement %.3f m",
                       lifter.name, movement.value, options.label, "; ".join(solution.errors),
                       solution.displacement)
    metrics = calculate_metrics(lifter.anthropometry, movement, options, load=perf.load, reps=perf.reps,
                                time_per_rep=time_per_rep, solution=solution)
    return options, solution, metrics


def _capacity_key(options: MovementOptions) -> str:
    # Capacity depends on bar position, not stance
    return getattr(options, "variant", options.label)


def _capacity_adjustment(movement: Movement, label_a: str, label_b: str, ratio: Optional[float],
                         perf_a: Performance,
                         capacity_factors: Mapping[str, Mapping[str, float]]) -> Optional[CapacityAdjustedResult]:
    table = capacity_factors.get(movement.value)
    if not table or label_a == label_b or label_a not in table or label_b not in table:
        return None
    factor_a, factor_b = table[label_a], table[label_b]
    adjusted = None if ratio is None else safe_ratio(ratio * factor_b, factor_a)
    direction = advantage_direction(adjusted)
    if adjusted is None:
        text = "Capacity-adjusted comparison is undefined because the demand ratio is undefined."
    else:
        text = (
            f"Adjusted for load capacity ({label_a} x{factor_a:.3f}, {label_b} x{factor_b:.3f}): "
            f"demand ratio {adjusted:.3f} ({(adjusted - 1.0) * 100.0:+.1f}%), {direction}."
        )
    return CapacityAdjustedResult(
        factor_a=factor_a,
        factor_b=factor_b,
        demand_ratio=adjusted,
        advantage_direction=direction,
        advantage_percentage=advantage_percentage(adjusted),
        equivalent_load_b=None if adjusted is None else perf_a.load / adjusted,
        explanation=text,
    )


def _pct_diff(a: float, b: float) -> Optional[float]:
    ratio = safe_ratio(b, a)
    return None if ratio is None else (ratio - 1.0) * 100.0


def generate_explanations(movement: Movement, a: LifterResult, b: LifterResult,
                          block: ComparisonBlock) -> List[str]:
    """Plain-language reasons behind the comparison, most specific first."""
    lines: List[str] = []
    for r in (a, b):
        if not r.valid:
            lines.append(
                f"{r.name}: {'; '.join(r.solution.errors)}. Metrics use an estimated range of motion."
            )

    disp = _pct_diff(a.metrics.displacement, b.metrics.displacement)
    if disp is not None and abs(disp) > cfg.EXPLAIN_DISPLACEMENT_PCT:
        longer, shorter = (b, a) if disp > 0 else (a, b)
        lines.append(
            f"{longer.name} moves the bar {abs(disp):.1f}% farther "
            f"({longer.metrics.displacement:.3f} m vs {shorter.metrics.displacement:.3f} m), "
            "so every rep takes more work."
        )

    both_valid = a.valid and b.valid
    if movement is Movement.SQUAT and both_valid:
        arm = _pct_diff(a.solution.hip_moment_arm, b.solution.hip_moment_arm)
        if arm is not None and abs(arm) > cfg.EXPLAIN_MOMENT_ARM_PCT:
            longer, shorter = (b, a) if arm > 0 else (a, b)
            lines.append(
                f"{longer.name}'s hip moment arm is {abs(arm):.1f}% longer "
                f"({longer.solution.hip_moment_arm:.3f} m vs {shorter.solution.hip_moment_arm:.3f} m), "
                "raising the torque the hips must produce."
            )
        diff = a.solution.trunk_angle - b.solution.trunk_angle
        if abs(diff) > cfg.EXPLAIN_TRUNK_DEG:
            leaner, upright = (b, a) if diff > 0 else (a, b)
            lines.append(
                f"{leaner.name} leans further forward (trunk {leaner.solution.trunk_angle:.0f} deg vs "
                f"{upright.solution.trunk_angle:.0f} deg above horizontal) to keep the bar over mid-foot."
            )

    if movement is Movement.DEADLIFT:
        reach = b.anthropometry.total_arm - a.anthropometry.total_arm
        if abs(reach) > cfg.EXPLAIN_ARM_LENGTH_M:
            longer = b if reach > 0 else a
            lines.append(
                f"{longer.name}'s arms are {abs(reach) * 100:.1f} cm longer, so the bar starts "
                "closer to lockout with the hips higher."
            )

    lines.append(_summary(a, b, block))
    return lines


def _summary(a: LifterResult, b: LifterResult, block: ComparisonBlock) -> str:
    direction = block.advantage_direction
    if direction == UNDEFINED:
        return "The demand of the two lifts could not be compared (a demand factor is zero or undefined)."
    if direction == NEUTRAL:
        return "Both lifters face essentially the same mechanical demand."
    pct = abs(block.advantage_percentage)
    if pct > cfg.SUMMARY_SUBSTANTIAL_PCT:
        size = "substantial"
    elif pct > cfg.SUMMARY_MODERATE_PCT:
        size = "moderate"
    else:
        size = "slight"
    winner, other = (a, b) if direction == ADVANTAGE_A else (b, a)
    return f"{winner.name} has a {size} leverage advantage: the demand on {other.name} differs by {pct:.1f}%."


def compare_lifts(
    lifter_a: Lifter,
    lifter_b: Lifter,
    movement,
    variant_a,
    variant_b,
    perf_a: Performance,
    perf_b: Optional[Performance] = None,
    time_per_rep: float = cfg.DEFAULT_SECONDS_PER_REP,
    capacity_factors: Optional[Mapping[str, Mapping[str, float]]] = None,
) -> ComparisonResult:
    """Compare two lifters on `movement`.

    Variants are names ("lowBar", "sumo", "wide-competitive") or options records; None
    uses the family default. `perf_b` defaults to `perf_a` (same nominal load and reps).
    Equivalent load/reps for each lifter scale the other lifter's performance inversely
    to the demand ratio.
    """
    movement = coerce_movement(movement)
    perf_b = perf_b or perf_a
    capacity_factors = cfg.CAPACITY_FACTORS if capacity_factors is None else capacity_factors

    opts_a, sol_a, met_a = _evaluate(lifter_a, movement, variant_a, perf_a, time_per_rep)
    opts_b, sol_b, met_b = _evaluate(lifter_b, movement, variant_b, perf_b, time_per_rep)

    ratio = safe_ratio(met_b.demand_factor, met_a.demand_factor)
    block = ComparisonBlock(
        demand_ratio=ratio,
        displacement_ratio=safe_ratio(met_b.displacement, met_a.displacement),
        work_ratio=safe_ratio(met_b.work_per_rep, met_a.work_per_rep),
        advantage_direction=advantage_direction(ratio),
        advantage_percentage=advantage_percentage(ratio),
    )

    result_a = LifterResult(
        name=lifter_a.name,
        anthropometry=lifter_a.anthropometry,
        variant=opts_a.label,
        solution=sol_a,
        metrics=met_a,
        performance=perf_a,
        equivalent_load=None if ratio is None else perf_b.load * ratio,
        equivalent_reps=None if ratio is None else perf_b.reps / ratio,
    )
    result_b = LifterResult(
        name=lifter_b.name,
        anthropometry=lifter_b.anthropometry,
        variant=opts_b.label,
        solution=sol_b,
        metrics=met_b,
        performance=perf_b,
        equivalent_load=None if ratio is None else perf_a.load / ratio,
        equivalent_reps=None if ratio is None else perf_a.reps * ratio,
    )

    return ComparisonResult(
        movement=movement,
        lifter_a=result_a,
        lifter_b=result_b,
        comparison=block,
        capacity_adjusted=_capacity_adjustment(movement, _capacity_key(opts_a), _capacity_key(opts_b), ratio,
                                               perf_a, capacity_factors),
        explanations=tuple(generate_explanations(movement, result_a, result_b, block)),
    )


def compare_cross_lift(anthro: Anthropometry, movement, variant_a, variant_b, load: float) -> CrossLiftResult:
    """Load on variant B that matches the demand of `load` on variant A for one lifter."""
    movement = coerce_movement(movement)
    opts_a = parse_options(movement, variant_a)
    opts_b = parse_options(movement, variant_b)
    sol_a = reference_solution(anthro, movement, opts_a)
    sol_b = reference_solution(anthro, movement, opts_b)
    demand_a = demand_factor(movement, sol_a, opts_a)
    demand_b = demand_factor(movement, sol_b, opts_b)
    factor = safe_ratio(demand_a, demand_b)
    return CrossLiftResult(
        variant_a=opts_a.label,
        variant_b=opts_b.label,
        demand_a=demand_a,
        demand_b=demand_b,
        conversion_factor=factor,
        equivalent_load=None if factor is None else load * factor,
        valid=sol_a.valid and sol_b.valid,
    )

