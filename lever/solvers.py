"""Pose solvers, one per movement family, behind a single dispatch table.

Every solver exposes the same three operations:

    reference(anthro, options) -> KinematicSolution
        The defining pose of the lift (squat bottom, deadlift floor start, bench
        chest touch, press rack, pull-up dead hang, push-up bottom) with its
        moment arms and the repetition's bar displacement.
    get_rom(anthro, options) -> float
        Displacement of the reference solution.
    solve(anthro, options, phase) -> SolveResult
        Pose at a normalized phase: 0.0 is the reference/bottom position, 1.0
        the top/lockout. Segment directions are interpolated and positions are
        rebuilt along the chain, so segment lengths never change.

Module-level `get_rom`, `solve` and `reference_solution` look the solver up in
`SOLVERS` by movement and parse the options for it.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Tuple

from anthro.segments import Anthropometry, InvalidInputError, SegmentLengths

from . import config as cfg
from .kinematics import (
    KinematicSolution,
    Point2D,
    Pose2D,
    SolveResult,
    bar_on_trunk,
    check_rigidity,
    direction,
    endpoint,
    invalid_solution,
    joint_angle,
    leg_angles,
    lerp,
    moment_arms_to,
    solve_squat_reference,
    squat_chain,
    stance_segments,
    standing_chain,
    two_link,
)
from .options import (
    BenchOptions,
    DeadliftOptions,
    Movement,
    MovementOptions,
    OverheadPressOptions,
    PushupOptions,
    SquatOptions,
    coerce_movement,
    parse_options,
)

logger = logging.getLogger(__name__)

PoseParts = Tuple[Pose2D, List[str]]


def _phase_value(phase) -> float:
    # Accepts a bare float or an animator phase record carrying `.phase`
    value = float(getattr(phase, "phase", phase))
    if not math.isfinite(value):
        raise InvalidInputError(f"phase must be finite, got {value}")
    return min(1.0, max(0.0, value))


def _feet(ankle: Point2D, seg: SegmentLengths) -> Dict[str, Point2D]:
    ground = Point2D(ankle.x, ankle.y - seg.foot_height)
    return {"left_foot": ground, "right_foot": ground}


def _hands(wrist: Point2D) -> Dict[str, Point2D]:
    return {"left_hand": wrist, "right_hand": wrist}


def _assemble(chain: Dict[str, Point2D], seg: SegmentLengths, elbow: Point2D, wrist: Point2D,
              bar: Optional[Point2D], contacts: Dict[str, Point2D]) -> Pose2D:
    joints = dict(chain)
    joints["elbow"] = elbow
    joints["wrist"] = wrist
    joints["head"] = endpoint(chain["shoulder"], seg.head_neck, direction(chain["hip"], chain["shoulder"]))
    return Pose2D(joints=joints, bar=bar, bar_angle=0.0, contacts=contacts)


def _straight_arm(shoulder: Point2D, seg: SegmentLengths, angle_deg: float) -> Tuple[Point2D, Point2D]:
    elbow = endpoint(shoulder, seg.upper_arm, angle_deg)
    return elbow, endpoint(elbow, seg.forearm, angle_deg)


class PoseSolver:
    movement: Movement

    def reference(self, anthro: Anthropometry, options: MovementOptions) -> KinematicSolution:
        raise NotImplementedError

    def pose(self, anthro: Anthropometry, options: MovementOptions,
             ref: KinematicSolution, phase: float) -> PoseParts:
        raise NotImplementedError

    def get_rom(self, anthro: Anthropometry, options: MovementOptions) -> float:
        return self.reference(anthro, options).displacement

    def sagittal_segments(self, anthro: Anthropometry, options: MovementOptions) -> SegmentLengths:
        """Segment lengths the poses are built from (and checked against)."""
        return anthro.segments

    def solve(self, anthro: Anthropometry, options: MovementOptions, phase=0.0) -> SolveResult:
        value = _phase_value(phase)
        ref = self.reference(anthro, options)
        pose, errors = self.pose(anthro, options, ref, value)
        errors = list(ref.errors) + errors
        errors += check_rigidity(pose.joints, self.sagittal_segments(anthro, options))
        return SolveResult(pose=pose, valid=ref.valid and not errors, errors=tuple(errors))


class SquatSolver(PoseSolver):
    movement = Movement.SQUAT

    def reference(self, anthro, options):
        return solve_squat_reference(anthro, options)

    def sagittal_segments(self, anthro, options):
        return stance_segments(anthro.segments, options.stance)

    def pose(self, anthro, options, ref, phase):
        seg = self.sagittal_segments(anthro, options)
        if ref.valid:
            ankle_deg = lerp(ref.angles["ankle"], 0.0, phase)
            femur_dir = lerp(180.0 + cfg.SQUAT_DEPTHS[options.depth], 90.0, phase)
            trunk = lerp(ref.angles["trunk"], 90.0, phase)
        else:
            ankle_deg, femur_dir, trunk = 0.0, 90.0, 90.0
        chain = squat_chain(seg, ankle_deg, femur_dir, trunk)
        bar = bar_on_trunk(chain["shoulder"], trunk, cfg.BAR_POSITIONS[options.variant])
        contacts = _feet(chain["ankle"], seg)

        elbow = None
        if options.variant == "front":
            # Front rack: elbow below and in front of the shoulder->bar line
            elbow = two_link(chain["shoulder"], seg.upper_arm, bar, seg.forearm, side=-1)
        if elbow is not None:
            wrist = bar
            contacts.update(_hands(wrist))
        else:
            elbow = endpoint(chain["shoulder"], seg.upper_arm, trunk + cfg.BACK_SQUAT_UPPER_ARM_REL_DEG)
            wrist = endpoint(elbow, seg.forearm, trunk + cfg.BACK_SQUAT_FOREARM_REL_DEG)
        return _assemble(chain, seg, elbow, wrist, bar, contacts), []


class DeadliftSolver(PoseSolver):
    """Bar over the ankle, arms hanging vertically, hip found from knee and shoulder.

    The hands close around the bar, so the shoulder sits the whole arm (hand included)
    above it and lockout height is shoulder height minus `total_arm`.
    """

    movement = Movement.DEADLIFT

    @staticmethod
    def _start_height(seg: SegmentLengths, options: DeadliftOptions) -> float:
        return -seg.foot_height + cfg.STANDARD_PLATE_RADIUS + options.bar_offset

    @staticmethod
    def _chain(anthro: Anthropometry, bar_y: float, shin_deg: float) -> Optional[Dict[str, Point2D]]:
        seg = anthro.segments
        ankle = Point2D(0.0, 0.0)
        knee = endpoint(ankle, seg.tibia, 90.0 - shin_deg)
        shoulder = Point2D(0.0, bar_y + anthro.total_arm)
        hip = two_link(knee, seg.femur, shoulder, seg.torso, side=1)
        if hip is None:
            return None
        return {"ankle": ankle, "knee": knee, "hip": hip, "shoulder": shoulder}

    def _rom(self, anthro: Anthropometry, options: DeadliftOptions) -> float:
        seg = anthro.segments
        lockout = standing_chain(seg)["shoulder"].y - anthro.total_arm
        rom = lockout - self._start_height(seg, options)
        if options.variant == "sumo":
            rom *= cfg.SUMO_STANCE_ROM_FACTORS[options.stance]
        return rom

    def reference(self, anthro, options):
        seg = anthro.segments
        rom = self._rom(anthro, options)
        if rom <= 0.0:
            return invalid_solution(["bar starts at or above lockout height"], 0.0)
        bar = Point2D(0.0, self._start_height(seg, options))
        shin = cfg.DEADLIFT_SHIN_ANGLES[options.variant]
        chain = self._chain(anthro, bar.y, shin)
        if chain is None:
            logger.warning("deadlift start unreachable for height %.3f m, offset %.3f m",
                           anthro.height, options.bar_offset)
            return invalid_solution(["hip cannot reach the start position for this bar height"], rom)
        positions = dict(chain)
        positions["bar"] = bar
        angles = leg_angles(chain)
        angles["ankle"] = shin
        return KinematicSolution(
            positions=positions,
            angles=angles,
            moment_arms=moment_arms_to(bar, chain),
            displacement=rom,
        )

    def pose(self, anthro, options, ref, phase):
        seg = anthro.segments
        errors: List[str] = []
        bar = Point2D(0.0, self._start_height(seg, options) + phase * max(ref.displacement, 0.0))
        chain = self._chain(anthro, bar.y, lerp(cfg.DEADLIFT_SHIN_ANGLES[options.variant], 0.0, phase))
        if chain is None:
            errors.append(f"no deadlift pose at phase {phase:.3f}")
            chain = standing_chain(seg)
            bar = Point2D(0.0, chain["shoulder"].y - anthro.total_arm)
        elbow, wrist = _straight_arm(chain["shoulder"], seg, 270.0)
        contacts = _feet(chain["ankle"], seg)
        contacts.update(_hands(bar))
        return _assemble(chain, seg, elbow, wrist, bar, contacts), errors


class BenchSolver(PoseSolver):
    """Supine on the pad; origin on the floor below the shoulder, +x towards the head."""

    movement = Movement.BENCH

    @staticmethod
    def _body(seg: SegmentLengths) -> Tuple[Dict[str, Point2D], bool]:
        shoulder = Point2D(0.0, cfg.BENCH_HEIGHT)
        hip = Point2D(-seg.torso, cfg.BENCH_HEIGHT)
        knee = endpoint(hip, seg.femur, 180.0 + cfg.BENCH_FEMUR_DECLINE_DEG)
        drop = knee.y - seg.foot_height
        if 0.0 < drop <= seg.tibia:
            # Feet tucked back under the knees, flat on the floor
            ankle = Point2D(knee.x + math.sqrt(seg.tibia ** 2 - drop ** 2), seg.foot_height)
            on_floor = True
        else:
            ankle = endpoint(knee, seg.tibia, 270.0)
            on_floor = False
        return {"ankle": ankle, "knee": knee, "hip": hip, "shoulder": shoulder}, on_floor

    @staticmethod
    def _bar_path(anthro: Anthropometry, options: BenchOptions) -> Tuple[float, float]:
        """(chest touch height, lockout height) of the bar."""
        grip = math.radians(cfg.BENCH_GRIP_ANGLES[options.grip])
        chest = options.chest_depth if options.chest_depth is not None else cfg.AVERAGE_CHEST_DEPTH
        lockout = cfg.BENCH_HEIGHT + anthro.arm_reach * math.cos(grip)
        rom = anthro.arm_reach * math.cos(grip) - chest - cfg.BENCH_ARCH_HEIGHTS[options.arch]
        return lockout - max(rom, cfg.MIN_BENCH_DISPLACEMENT), lockout

    def reference(self, anthro, options):
        seg = anthro.segments
        chest, lockout = self._bar_path(anthro, options)
        chain, _ = self._body(seg)
        bar = Point2D(0.0, chest)
        elbow = two_link(chain["shoulder"], seg.upper_arm, bar, seg.forearm, side=1)
        if elbow is None:
            return invalid_solution(["arms cannot fold to touch the chest"], lockout - chest)
        positions = dict(chain)
        positions.update({"elbow": elbow, "wrist": bar, "bar": bar})
        return KinematicSolution(
            positions=positions,
            angles={
                "trunk": 0.0,
                "elbow": joint_angle(chain["shoulder"], elbow, bar),
                "knee": joint_angle(chain["hip"], chain["knee"], chain["ankle"]),
            },
            # Supine: the bar load does not act about the hip or knee
            moment_arms={"hip": 0.0, "knee": 0.0, "shoulder": abs(bar.x - chain["shoulder"].x),
                         "elbow": abs(bar.x - elbow.x)},
            displacement=lockout - chest,
        )

    def pose(self, anthro, options, ref, phase):
        seg = anthro.segments
        errors: List[str] = []
        chest, lockout = self._bar_path(anthro, options)
        chain, on_floor = self._body(seg)
        bar = Point2D(0.0, lerp(chest, lockout, phase))
        elbow = two_link(chain["shoulder"], seg.upper_arm, bar, seg.forearm, side=1)
        if elbow is None:
            errors.append(f"arms cannot reach the bar at phase {phase:.3f}")
            elbow, wrist = _straight_arm(chain["shoulder"], seg, 90.0)
        else:
            wrist = bar
        contacts = _hands(wrist)
        if on_floor:
            contacts.update(_feet(chain["ankle"], seg))
        return _assemble(chain, seg, elbow, wrist, bar, contacts), errors


class OverheadPressSolver(PoseSolver):
    """Standing press from the front rack to straight arms over the shoulder."""

    movement = Movement.OHP

    @staticmethod
    def _path(anthro: Anthropometry) -> Tuple[Point2D, Point2D]:
        shoulder = standing_chain(anthro.segments)["shoulder"]
        rack = bar_on_trunk(shoulder, 90.0, cfg.BAR_POSITIONS[cfg.OHP_RACK_POSITION])
        return rack, Point2D(shoulder.x, shoulder.y + anthro.arm_reach)

    def reference(self, anthro, options):
        seg = anthro.segments
        rack, lockout = self._path(anthro)
        chain = standing_chain(seg)
        rom = lockout.y - rack.y
        elbow = two_link(chain["shoulder"], seg.upper_arm, rack, seg.forearm, side=-1)
        if elbow is None:
            return invalid_solution(["arms cannot hold the front rack position"], rom)
        positions = dict(chain)
        positions.update({"elbow": elbow, "wrist": rack, "bar": rack})
        arms = moment_arms_to(rack, chain)
        arms["shoulder"] = abs(rack.x - chain["shoulder"].x)
        return KinematicSolution(
            positions=positions,
            angles={"trunk": 90.0, "elbow": joint_angle(chain["shoulder"], elbow, rack),
                    "knee": 180.0, "hip": 180.0},
            moment_arms=arms,
            displacement=rom,
        )

    def pose(self, anthro, options, ref, phase):
        seg = anthro.segments
        errors: List[str] = []
        rack, lockout = self._path(anthro)
        chain = standing_chain(seg)
        bar = Point2D(lerp(rack.x, lockout.x, phase), lerp(rack.y, lockout.y, phase))
        elbow = two_link(chain["shoulder"], seg.upper_arm, bar, seg.forearm, side=-1)
        if elbow is None:
            errors.append(f"arms cannot reach the bar at phase {phase:.3f}")
            elbow, wrist = _straight_arm(chain["shoulder"], seg, 90.0)
        else:
            wrist = bar
        contacts = _feet(chain["ankle"], seg)
        contacts.update(_hands(wrist))
        return _assemble(chain, seg, elbow, wrist, bar, contacts), errors


class PullupSolver(PoseSolver):
    """Hanging body under a fixed bar; origin on the floor below the bar."""

    movement = Movement.PULLUP

    @staticmethod
    def _bar(anthro: Anthropometry) -> Point2D:
        seg = anthro.segments
        hanging = anthro.arm_reach + seg.torso + seg.femur + seg.tibia + seg.foot_height
        return Point2D(0.0, max(cfg.PULLUP_BAR_HEIGHT, hanging + cfg.PULLUP_FOOT_CLEARANCE))

    @staticmethod
    def _shoulder_range(anthro: Anthropometry, bar: Point2D) -> Tuple[float, float]:
        hang = bar.y - anthro.arm_reach
        top = bar.y - cfg.PULLUP_TOP_CLEARANCE_FRACTION * anthro.segments.head_neck
        return hang, top

    @staticmethod
    def _hanging_chain(seg: SegmentLengths, shoulder: Point2D) -> Dict[str, Point2D]:
        hip = Point2D(shoulder.x, shoulder.y - seg.torso)
        knee = Point2D(shoulder.x, hip.y - seg.femur)
        ankle = Point2D(shoulder.x, knee.y - seg.tibia)
        return {"ankle": ankle, "knee": knee, "hip": hip, "shoulder": shoulder}

    def reference(self, anthro, options):
        seg = anthro.segments
        bar = self._bar(anthro)
        hang, top = self._shoulder_range(anthro, bar)
        chain = self._hanging_chain(seg, Point2D(0.0, hang))
        elbow = endpoint(chain["shoulder"], seg.upper_arm, 90.0)
        positions = dict(chain)
        positions.update({"elbow": elbow, "wrist": bar, "bar": bar})
        return KinematicSolution(
            positions=positions,
            angles={"trunk": 90.0, "elbow": 180.0, "knee": 180.0, "hip": 180.0},
            moment_arms={"hip": 0.0, "knee": 0.0, "elbow": 0.0},
            displacement=top - hang,
        )

    def pose(self, anthro, options, ref, phase):
        seg = anthro.segments
        errors: List[str] = []
        bar = self._bar(anthro)
        hang, top = self._shoulder_range(anthro, bar)
        chain = self._hanging_chain(seg, Point2D(0.0, lerp(hang, top, phase)))
        # Elbows travel in front of the bar line
        elbow = two_link(chain["shoulder"], seg.upper_arm, bar, seg.forearm, side=-1)
        if elbow is None:
            errors.append(f"arms cannot reach the bar at phase {phase:.3f}")
            elbow, wrist = _straight_arm(chain["shoulder"], seg, 90.0)
        else:
            wrist = bar
        return _assemble(chain, seg, elbow, wrist, bar, _hands(wrist)), errors


class PushupSolver(PoseSolver):
    """Rigid plank pivoting about the ankles; hands at the origin."""

    movement = Movement.PUSHUP

    @staticmethod
    def _heights(anthro: Anthropometry, options: PushupOptions) -> Tuple[float, float]:
        top = anthro.arm_reach * math.cos(math.radians(cfg.PUSHUP_WIDTH_ANGLES[options.width]))
        return cfg.PUSHUP_BOTTOM_FRACTION * top, top

    @staticmethod
    def _plank(anthro: Anthropometry, options: PushupOptions, shoulder_y: float) -> Optional[Dict[str, Point2D]]:
        seg = anthro.segments
        plank = seg.tibia + seg.femur + seg.torso
        _, top = PushupSolver._heights(anthro, options)
        rise_top = top - seg.foot_height
        rise = shoulder_y - seg.foot_height
        if plank <= rise_top or abs(rise) > plank:
            return None
        # Shoulders stacked over the hands at the top fixes the ankle position
        ankle = Point2D(-math.sqrt(plank ** 2 - rise_top ** 2), seg.foot_height)
        shoulder = Point2D(ankle.x + math.sqrt(plank ** 2 - rise ** 2), shoulder_y)

        def along(length: float) -> Point2D:
            f = length / plank
            return Point2D(ankle.x + (shoulder.x - ankle.x) * f, ankle.y + (shoulder.y - ankle.y) * f)

        return {"ankle": ankle, "knee": along(seg.tibia), "hip": along(seg.tibia + seg.femur), "shoulder": shoulder}

    def reference(self, anthro, options):
        seg = anthro.segments
        bottom, top = self._heights(anthro, options)
        hands = Point2D(0.0, 0.0)
        chain = self._plank(anthro, options, bottom)
        elbow = None
        if chain is not None:
            elbow = two_link(chain["shoulder"], seg.upper_arm, hands, seg.forearm, side=-1)
        if chain is None or elbow is None:
            return invalid_solution(["plank cannot reach the bottom position"], top - bottom)
        positions = dict(chain)
        positions.update({"elbow": elbow, "wrist": hands})
        return KinematicSolution(
            positions=positions,
            angles={"trunk": direction(chain["hip"], chain["shoulder"]),
                    "elbow": joint_angle(chain["shoulder"], elbow, hands)},
            # Horizontal distance from each joint to the hand support
            moment_arms=moment_arms_to(hands, chain),
            displacement=top - bottom,
        )

    def pose(self, anthro, options, ref, phase):
        seg = anthro.segments
        errors: List[str] = []
        bottom, top = self._heights(anthro, options)
        hands = Point2D(0.0, 0.0)
        chain = self._plank(anthro, options, lerp(bottom, top, phase))
        if chain is None:
            errors.append(f"no push-up plank at phase {phase:.3f}")
            chain = self._hanging_fallback(seg)
        elbow = two_link(chain["shoulder"], seg.upper_arm, hands, seg.forearm, side=-1)
        if elbow is None:
            errors.append(f"arms cannot reach the floor at phase {phase:.3f}")
            elbow, wrist = _straight_arm(chain["shoulder"], seg, 270.0)
        else:
            wrist = hands
        contacts = _feet(chain["ankle"], seg)
        contacts.update(_hands(wrist))
        return _assemble(chain, seg, elbow, wrist, None, contacts), errors

    @staticmethod
    def _hanging_fallback(seg: SegmentLengths) -> Dict[str, Point2D]:
        # Flat plank on the floor, used only to keep a drawable pose
        y = seg.foot_height
        ankle = Point2D(-(seg.tibia + seg.femur + seg.torso), y)
        knee = Point2D(ankle.x + seg.tibia, y)
        hip = Point2D(knee.x + seg.femur, y)
        return {"ankle": ankle, "knee": knee, "hip": hip, "shoulder": Point2D(hip.x + seg.torso, y)}


class ThrusterSolver(PoseSolver):
    """Front squat into an overhead press; the phase runs along the combined bar path."""

    movement = Movement.THRUSTER

    def __init__(self) -> None:
        self.squat = SquatSolver()
        self.press = OverheadPressSolver()

    def parts(self, anthro: Anthropometry) -> Tuple[KinematicSolution, KinematicSolution]:
        return (self.squat.reference(anthro, SquatOptions(variant="front")),
                self.press.reference(anthro, OverheadPressOptions()))

    def reference(self, anthro, options):
        squat, press = self.parts(anthro)
        return KinematicSolution(
            positions=squat.positions,
            angles=squat.angles,
            moment_arms=squat.moment_arms,
            displacement=squat.displacement + press.displacement,
            valid=squat.valid and press.valid,
            errors=squat.errors + press.errors,
            mobility_limited=squat.mobility_limited,
        )

    def squat_share(self, anthro: Anthropometry) -> float:
        squat, press = self.parts(anthro)
        total = squat.displacement + press.displacement
        return squat.displacement / total if total > 0.0 else 0.0

    def pose(self, anthro, options, ref, phase):
        squat, press = self.parts(anthro)
        share = self.squat_share(anthro)
        if share > 0.0 and phase <= share:
            return self.squat.pose(anthro, SquatOptions(variant="front"), squat, phase / share)
        press_phase = (phase - share) / (1.0 - share) if share < 1.0 else 1.0
        return self.press.pose(anthro, OverheadPressOptions(), press, press_phase)


SOLVERS: Dict[Movement, PoseSolver] = {
    Movement.SQUAT: SquatSolver(),
    Movement.DEADLIFT: DeadliftSolver(),
    Movement.BENCH: BenchSolver(),
    Movement.OHP: OverheadPressSolver(),
    Movement.PULLUP: PullupSolver(),
    Movement.PUSHUP: PushupSolver(),
    Movement.THRUSTER: ThrusterSolver(),
}


def get_solver(movement) -> PoseSolver:
    return SOLVERS[coerce_movement(movement)]


def reference_solution(anthro: Anthropometry, movement, options=None) -> KinematicSolution:
    movement = coerce_movement(movement)
    return SOLVERS[movement].reference(anthro, parse_options(movement, options))


def get_rom(anthro: Anthropometry, movement, options=None) -> float:
    """Bar displacement (m) for one repetition of `movement`."""
    movement = coerce_movement(movement)
    return SOLVERS[movement].get_rom(anthro, parse_options(movement, options))


def solve(anthro: Anthropometry, movement, options=None, phase=0.0) -> SolveResult:
    """Pose at `phase` (0 = reference/bottom, 1 = top) with validity and errors."""
    movement = coerce_movement(movement)
    return SOLVERS[movement].solve(anthro, parse_options(movement, options), phase)
