"""Planar kinematics shared by the lift solvers, and the iterative squat solve.

Coordinates are sagittal-plane metres: +x points forward (the lifter's facing
direction), +y points up. Angles are degrees measured counter-clockwise from
+x unless stated otherwise, so a vertical segment pointing up has direction 90.

Squat reference solve
---------------------
At the reference depth the femur sits at a fixed angle (horizontal for a
parallel squat) and the bar must be directly over the ankle. With the ankle at
the origin:

    knee     = ankle + tibia * (sin a, cos a)          a: ankle dorsiflexion
    hip      = knee + femur * direction(180 + depth)
    shoulder = hip + torso * (cos t, sin t)            t: trunk angle from horizontal
    bar      = shoulder + along * (cos t, sin t) + forward * (sin t, -cos t)

At the lifter's maximum dorsiflexion `a` the trunk angle t in
[TRUNK_MIN_DEG, TRUNK_MAX_DEG] solving bar.x == 0 is found by bisection. When
the bar is still ahead of the ankle at TRUNK_MAX_DEG, t is held there and `a`
is bisected down towards SQUAT_MIN_ANKLE_DEG, so the pose (and the hip moment
arm) moves continuously with segment lengths. Wider stances shorten the
projected femur and raise TRUNK_MAX_DEG. When no root exists the solution is
marked invalid instead of extrapolated.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from anthro.segments import Anthropometry, SegmentLengths

from . import config as cfg
from .options import SquatOptions

logger = logging.getLogger(__name__)

RIGIDITY_TOLERANCE: float = 0.001          # 1 mm

# (joint, joint, segment) pairs whose distance must stay equal to the segment length
RIGID_LINKS: Tuple[Tuple[str, str, str], ...] = (
    ("ankle", "knee", "tibia"),
    ("knee", "hip", "femur"),
    ("hip", "shoulder", "torso"),
    ("shoulder", "elbow", "upper_arm"),
    ("elbow", "wrist", "forearm"),
    ("shoulder", "head", "head_neck"),
)


class Point2D(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class KinematicSolution:
    """Reference pose of a lift and the quantities derived from it.

    Attributes:
        positions: Joint and bar coordinates (m) keyed by name.
        angles: Joint angles in degrees. `trunk` is the hip->shoulder angle above horizontal.
        moment_arms: Horizontal joint-to-bar distances (m); always has `hip` and `knee`.
        displacement: Vertical bar travel for one repetition (m).
        valid: False when the constraints could not be satisfied.
        errors: Human-readable reasons when `valid` is False.
        mobility_limited: The squat balanced at less ankle dorsiflexion than the lifter's maximum.
    """

    positions: Dict[str, Point2D]
    angles: Dict[str, float]
    moment_arms: Dict[str, float]
    displacement: float
    valid: bool = True
    errors: Tuple[str, ...] = ()
    mobility_limited: bool = False

    @property
    def hip_moment_arm(self) -> float:
        return self.moment_arms.get("hip", 0.0)

    @property
    def trunk_angle(self) -> Optional[float]:
        return self.angles.get("trunk")


@dataclass(frozen=True)
class Pose2D:
    """Drawable pose at one phase.

    `bar_angle` is the tilt of the bar from horizontal in degrees. Every modelled lift
    holds the bar level, so the solvers leave it at 0.
    """

    joints: Dict[str, Point2D]
    bar: Optional[Point2D] = None
    bar_angle: float = 0.0
    contacts: Dict[str, Point2D] = field(default_factory=dict)


class SolveResult(NamedTuple):
    pose: Pose2D
    valid: bool
    errors: Tuple[str, ...]


def endpoint(start: Point2D, length: float, angle_deg: float) -> Point2D:
    a = math.radians(angle_deg)
    return Point2D(start.x + length * math.cos(a), start.y + length * math.sin(a))


def distance(a: Point2D, b: Point2D) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def direction(a: Point2D, b: Point2D) -> float:
    """Direction of the segment a->b in degrees."""
    return math.degrees(math.atan2(b.y - a.y, b.x - a.x))


def joint_angle(a: Point2D, b: Point2D, c: Point2D) -> float:
    """Interior angle at b between b->a and b->c, degrees in [0, 180]."""
    v1 = (a.x - b.x, a.y - b.y)
    v2 = (c.x - b.x, c.y - b.y)
    cross = v1[0] * v2[1] - v1[1] * v2[0]
    dot = v1[0] * v2[0] + v1[1] * v2[1]
    return abs(math.degrees(math.atan2(cross, dot)))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def two_link(base: Point2D, l1: float, target: Point2D, l2: float, side: float) -> Optional[Point2D]:
    """Middle joint of a base-(l1)-joint-(l2)-target chain, or None when out of reach.

    `side` > 0 picks the solution to the left of base->target, < 0 the right.
    A target exactly at full extension (within tolerance) yields the straight chain.
    """
    d = distance(base, target)
    if d <= 0.0 or d > l1 + l2 + cfg.SOLVER_TOLERANCE or d < abs(l1 - l2) - cfg.SOLVER_TOLERANCE:
        return None
    ux, uy = (target.x - base.x) / d, (target.y - base.y) / d
    a = (l1 * l1 - l2 * l2 + d * d) / (2.0 * d)
    h = math.sqrt(max(0.0, l1 * l1 - a * a))
    sign = 1.0 if side > 0 else -1.0
    return Point2D(base.x + a * ux - sign * h * uy, base.y + a * uy + sign * h * ux)


def bisect_root(
    func: Callable[[float], float],
    lo: float,
    hi: float,
    tolerance: float = cfg.SOLVER_TOLERANCE,
    max_iterations: int = cfg.SOLVER_MAX_ITERATIONS,
) -> Optional[float]:
    """Root of `func` in [lo, hi] by bisection; None if not bracketed or not converged."""
    f_lo = func(lo)
    f_hi = func(hi)
    if f_lo == 0.0:
        return lo
    if f_hi == 0.0:
        return hi
    if (f_lo < 0.0) == (f_hi < 0.0):
        return None
    for _ in range(max_iterations):
        mid = 0.5 * (lo + hi)
        f_mid = func(mid)
        if abs(f_mid) <= tolerance or 0.5 * (hi - lo) <= tolerance:
            return mid
        if (f_mid < 0.0) == (f_lo < 0.0):
            lo, f_lo = mid, f_mid
        else:
            hi = mid
    return None


def bar_on_trunk(shoulder: Point2D, trunk_deg: float, offset: Tuple[float, float]) -> Point2D:
    """Bar position for a (forward, along-trunk) offset that rotates with the trunk."""
    forward, along = offset
    t = math.radians(trunk_deg)
    return Point2D(
        shoulder.x + along * math.cos(t) + forward * math.sin(t),
        shoulder.y + along * math.sin(t) - forward * math.cos(t),
    )


def stance_segments(seg: SegmentLengths, stance: str) -> SegmentLengths:
    """Segment lengths as projected on the sagittal plane for a squat stance width."""
    return replace(seg, femur=seg.femur * cfg.SQUAT_STANCE_FEMUR_FACTORS[stance])


def standing_chain(seg: SegmentLengths, ankle: Point2D = Point2D(0.0, 0.0)) -> Dict[str, Point2D]:
    """Ankle, knee, hip and shoulder stacked vertically."""
    knee = Point2D(ankle.x, ankle.y + seg.tibia)
    hip = Point2D(ankle.x, knee.y + seg.femur)
    shoulder = Point2D(ankle.x, hip.y + seg.torso)
    return {"ankle": ankle, "knee": knee, "hip": hip, "shoulder": shoulder}


def squat_chain(seg: SegmentLengths, ankle_deg: float, femur_dir: float, trunk_deg: float) -> Dict[str, Point2D]:
    ankle = Point2D(0.0, 0.0)
    knee = endpoint(ankle, seg.tibia, 90.0 - ankle_deg)
    hip = endpoint(knee, seg.femur, femur_dir)
    shoulder = endpoint(hip, seg.torso, trunk_deg)
    return {"ankle": ankle, "knee": knee, "hip": hip, "shoulder": shoulder}


def leg_angles(chain: Dict[str, Point2D]) -> Dict[str, float]:
    return {
        "knee": joint_angle(chain["ankle"], chain["knee"], chain["hip"]),
        "hip": joint_angle(chain["knee"], chain["hip"], chain["shoulder"]),
        "trunk": direction(chain["hip"], chain["shoulder"]),
    }


def moment_arms_to(bar: Point2D, chain: Dict[str, Point2D]) -> Dict[str, float]:
    return {name: abs(bar.x - chain[name].x) for name in ("hip", "knee", "ankle")}


def invalid_solution(errors: List[str], displacement: float) -> KinematicSolution:
    return KinematicSolution(
        positions={},
        angles={},
        moment_arms={"hip": 0.0, "knee": 0.0},
        displacement=displacement,
        valid=False,
        errors=tuple(errors),
    )


def solve_squat_reference(anthro: Anthropometry, options: SquatOptions) -> KinematicSolution:
    seg = stance_segments(anthro.segments, options.stance)
    offset = cfg.BAR_POSITIONS[options.variant]
    femur_dir = 180.0 + cfg.SQUAT_DEPTHS[options.depth]
    trunk_max = cfg.TRUNK_MAX_DEG + cfg.SQUAT_STANCE_TRUNK_ADJUST_DEG[options.stance]
    max_ankle = anthro.mobility.max_ankle_dorsiflexion

    def bar_x(ankle_deg: float, trunk_deg: float) -> float:
        shoulder = squat_chain(seg, ankle_deg, femur_dir, trunk_deg)["shoulder"]
        return bar_on_trunk(shoulder, trunk_deg, offset).x

    ankle_deg = max_ankle
    trunk_deg = bisect_root(lambda t: bar_x(max_ankle, t), cfg.TRUNK_MIN_DEG, trunk_max)
    if trunk_deg is None and bar_x(max_ankle, trunk_max) > 0.0 and max_ankle > cfg.SQUAT_MIN_ANKLE_DEG:
        # Bar still ahead of the ankle with the trunk at its limit: less knee travel moves the hip back
        logger.debug("squat %s: trunk capped at %.1f deg, searching ankle angle", options.variant, trunk_max)
        root = bisect_root(lambda a: bar_x(a, trunk_max), cfg.SQUAT_MIN_ANKLE_DEG, max_ankle)
        if root is not None:
            ankle_deg, trunk_deg = root, trunk_max

    if trunk_deg is None:
        message = f"no valid trunk angle found in range [{cfg.TRUNK_MIN_DEG:g}, {trunk_max:g}] deg"
        logger.warning("squat %s unsolved for height %.3f m: %s", options.variant, anthro.height, message)
        return invalid_solution([message], cfg.FALLBACK_DISPLACEMENT_FACTOR * anthro.height)

    chain = squat_chain(seg, ankle_deg, femur_dir, trunk_deg)
    bar = bar_on_trunk(chain["shoulder"], trunk_deg, offset)
    standing_bar = bar_on_trunk(standing_chain(seg)["shoulder"], 90.0, offset)
    angles = leg_angles(chain)
    angles["ankle"] = ankle_deg
    angles["trunk"] = trunk_deg
    positions = dict(chain)
    positions["bar"] = bar
    return KinematicSolution(
        positions=positions,
        angles=angles,
        moment_arms=moment_arms_to(bar, chain),
        displacement=standing_bar.y - bar.y,
        mobility_limited=ankle_deg < max_ankle - 1e-9,
    )


def check_rigidity(joints: Dict[str, Point2D], seg: SegmentLengths,
                   tolerance: float = RIGIDITY_TOLERANCE) -> List[str]:
    """Errors for every adjacent joint pair whose distance drifts from its segment length."""
    errors = []
    for a, b, name in RIGID_LINKS:
        if a not in joints or b not in joints:
            continue
        expected = getattr(seg, name)
        actual = distance(joints[a], joints[b])
        if abs(actual - expected) > tolerance:
            errors.append(f"{name} length {actual:.4f} m differs from {expected:.4f} m")
    return errors
