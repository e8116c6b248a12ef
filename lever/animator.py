"""Rep timing: rep progress -> solver phase.

A repetition is split into eccentric, bottom pause, concentric and top pause
segments. `get_animation_phase` maps progress through that cycle to the solver
phase (0 = bottom/reference, 1 = top) with ease-in-out motion, so it can be
called once per rendered frame from any clock.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple

from anthro.segments import InvalidInputError

from .options import Movement, coerce_movement

# Movements that start from the bottom and go up first
CONCENTRIC_FIRST = frozenset({Movement.PULLUP})

THRUSTER_PHASES: Tuple[str, ...] = ("squat_down", "squat_up", "press_up", "press_down")


@dataclass(frozen=True)
class RepCycleConfig:
    eccentric_duration: float
    bottom_pause: float
    concentric_duration: float
    top_pause: float

    @property
    def total_duration(self) -> float:
        return self.eccentric_duration + self.bottom_pause + self.concentric_duration + self.top_pause


@dataclass(frozen=True)
class AnimationPhase:
    """Attributes:
        t: Position in the cycle, [0, 1).
        name: Sub-phase name ("eccentric", "bottom", "concentric", "top" or a thruster sub-phase).
        progress: Eased progress within the sub-phase, [0, 1].
        phase: Solver phase, 0 at the bottom position and 1 at the top.
    """

    t: float
    name: str
    progress: float
    phase: float


class RepProgress(NamedTuple):
    current_rep: int
    rep_progress: float
    complete: bool


def ease_in_out_quad(t: float) -> float:
    if t < 0.5:
        return 2.0 * t * t
    return 1.0 - (-2.0 * t + 2.0) ** 2 / 2.0


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - (-2.0 * t + 2.0) ** 3 / 2.0


def calculate_rep_cycle(rom: float, velocity: float, pause_bottom: float = 0.0,
                        pause_top: float = 0.0) -> RepCycleConfig:
    """Cycle timings for a bar moving `rom` metres at an average `velocity` (m/s) each way."""
    for name, value in (("rom", rom), ("pause_bottom", pause_bottom), ("pause_top", pause_top)):
        if not math.isfinite(value) or value < 0.0:
            raise InvalidInputError(f"{name} must be non-negative, got {value}")
    if not math.isfinite(velocity) or velocity <= 0.0:
        raise InvalidInputError(f"velocity must be positive, got {velocity}")
    travel = rom / velocity
    return RepCycleConfig(
        eccentric_duration=travel,
        bottom_pause=pause_bottom,
        concentric_duration=travel,
        top_pause=pause_top,
    )


def _segments(movement: Movement, cycle: RepCycleConfig) -> List[Tuple[str, float, float, float]]:
    # (name, duration, phase at start, phase at end)
    down = ("eccentric", cycle.eccentric_duration, 1.0, 0.0)
    bottom = ("bottom", cycle.bottom_pause, 0.0, 0.0)
    up = ("concentric", cycle.concentric_duration, 0.0, 1.0)
    top = ("top", cycle.top_pause, 1.0, 1.0)
    if movement in CONCENTRIC_FIRST:
        return [bottom, up, top, down]
    return [down, bottom, up, top]


def _thruster_segments(cycle: RepCycleConfig, squat_rom: float, press_rom: float) -> List[Tuple[str, float, float, float]]:
    total_rom = squat_rom + press_rom
    share = squat_rom / total_rom if total_rom > 0.0 else 0.0
    travel = cycle.eccentric_duration + cycle.concentric_duration
    squat_time = travel * share / 2.0
    press_time = travel * (1.0 - share) / 2.0
    return [
        ("squat_down", squat_time, share, 0.0),
        ("bottom", cycle.bottom_pause, 0.0, 0.0),
        ("squat_up", squat_time, 0.0, share),
        ("press_up", press_time, share, 1.0),
        ("top", cycle.top_pause, 1.0, 1.0),
        ("press_down", press_time, 1.0, share),
    ]


def get_animation_phase(movement, progress: float, cycle: RepCycleConfig,
                        squat_rom: Optional[float] = None,
                        press_rom: Optional[float] = None) -> AnimationPhase:
    """Map rep progress (wrapped into [0, 1)) to the solver phase for `movement`.

    The thruster needs `squat_rom` and `press_rom` to weight its four sub-phases by
    their share of the bar path; its solver phase runs along the combined path.
    """
    movement = coerce_movement(movement)
    if not math.isfinite(progress):
        raise InvalidInputError(f"progress must be finite, got {progress}")
    t = progress % 1.0

    if movement is Movement.THRUSTER:
        if squat_rom is None or press_rom is None:
            raise InvalidInputError("thruster animation needs squat_rom and press_rom")
        segments = _thruster_segments(cycle, squat_rom, press_rom)
    else:
        segments = _segments(movement, cycle)

    total = sum(duration for _, duration, _, _ in segments)
    if total <= 0.0:
        return AnimationPhase(t=t, name="top", progress=1.0, phase=1.0)

    elapsed = t * total
    for name, duration, start, end in segments:
        if duration > 0.0 and elapsed < duration:
            eased = ease_in_out_quad(elapsed / duration)
            return AnimationPhase(t=t, name=name, progress=eased, phase=start + (end - start) * eased)
        elapsed -= duration
    # Float round-off at the very end of the cycle
    name, _, _, end = next(s for s in reversed(segments) if s[1] > 0.0)
    return AnimationPhase(t=t, name=name, progress=1.0, phase=end)


def get_rep_progress(elapsed: float, cycle_duration: float, total_reps: int) -> RepProgress:
    """Which rep (1-based) a set is on after `elapsed` seconds and how far into it."""
    if cycle_duration <= 0.0 or total_reps < 1:
        return RepProgress(current_rep=total_reps, rep_progress=1.0, complete=True)
    if elapsed >= cycle_duration * total_reps:
        return RepProgress(current_rep=total_reps, rep_progress=1.0, complete=True)
    elapsed = max(0.0, elapsed)
    index = int(elapsed // cycle_duration)
    return RepProgress(current_rep=index + 1, rep_progress=(elapsed - index * cycle_duration) / cycle_duration,
                       complete=False)
