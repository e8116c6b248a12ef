"""Movement families and their per-family option records.

Each family has its own frozen options dataclass so only the fields that
matter for that lift exist on the record. `parse_options` turns the short
variant strings used by the runner/config ("lowBar", "wide-competitive", ...)
into the right record.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Mapping, Optional, Union

from anthro.segments import InvalidInputError

from . import config as cfg


class Movement(str, Enum):
    SQUAT = "squat"
    DEADLIFT = "deadlift"
    BENCH = "bench"
    OHP = "ohp"
    PULLUP = "pullup"
    PUSHUP = "pushup"
    THRUSTER = "thruster"


def coerce_movement(movement) -> Movement:
    if isinstance(movement, Movement):
        return movement
    try:
        return Movement(str(movement).lower())
    except ValueError:
        raise InvalidInputError(
            f"unknown movement '{movement}', expected one of {[m.value for m in Movement]}"
        ) from None


def _check_choice(what: str, value: str, table: Mapping) -> None:
    if value not in table:
        raise InvalidInputError(f"unknown {what} '{value}', expected one of {sorted(table)}")


def _check_finite(what: str, value: float) -> None:
    if not math.isfinite(value):
        raise InvalidInputError(f"{what} must be finite, got {value}")


DEFAULT_STANCE = "normal"


def _with_stance(variant: str, stance: str) -> str:
    return variant if stance == DEFAULT_STANCE else f"{variant}-{stance}"


@dataclass(frozen=True)
class SquatOptions:
    movement: ClassVar[Movement] = Movement.SQUAT
    variant: str = "highBar"
    depth: str = "parallel"
    stance: str = DEFAULT_STANCE

    def __post_init__(self) -> None:
        _check_choice("squat variant", self.variant, cfg.BAR_POSITIONS)
        _check_choice("squat depth", self.depth, cfg.SQUAT_DEPTHS)
        _check_choice("squat stance", self.stance, cfg.SQUAT_STANCE_FEMUR_FACTORS)

    @property
    def label(self) -> str:
        return _with_stance(self.variant, self.stance)


@dataclass(frozen=True)
class DeadliftOptions:
    """Attributes:
        variant: "conventional" or "sumo".
        stance: Sumo stance width ("hybrid", "normal", "wide", "ultraWide").
            Conventional pulls only take "normal".
        bar_offset: Start height change in metres. Negative is a deficit
            (lifter on a platform), positive a block pull.
    """

    movement: ClassVar[Movement] = Movement.DEADLIFT
    variant: str = "conventional"
    stance: str = DEFAULT_STANCE
    bar_offset: float = 0.0

    def __post_init__(self) -> None:
        _check_choice("deadlift variant", self.variant, cfg.DEADLIFT_SHIN_ANGLES)
        _check_choice("sumo stance", self.stance, cfg.SUMO_STANCE_ROM_FACTORS)
        if self.variant != "sumo" and self.stance != DEFAULT_STANCE:
            raise InvalidInputError(f"stance '{self.stance}' only applies to sumo deadlifts")
        _check_finite("bar_offset", self.bar_offset)

    @property
    def label(self) -> str:
        return _with_stance(self.variant, self.stance)


@dataclass(frozen=True)
class BenchOptions:
    movement: ClassVar[Movement] = Movement.BENCH
    grip: str = "medium"
    arch: str = "moderate"
    chest_depth: Optional[float] = None  # defaults to cfg.AVERAGE_CHEST_DEPTH

    def __post_init__(self) -> None:
        _check_choice("bench grip", self.grip, cfg.BENCH_GRIP_ANGLES)
        _check_choice("bench arch", self.arch, cfg.BENCH_ARCH_HEIGHTS)
        if self.chest_depth is not None and not (math.isfinite(self.chest_depth) and self.chest_depth > 0):
            raise InvalidInputError(f"chest_depth must be positive, got {self.chest_depth}")

    @property
    def label(self) -> str:
        return f"{self.grip}-{self.arch}"


@dataclass(frozen=True)
class OverheadPressOptions:
    movement: ClassVar[Movement] = Movement.OHP

    @property
    def label(self) -> str:
        return "strict"


@dataclass(frozen=True)
class PullupOptions:
    movement: ClassVar[Movement] = Movement.PULLUP
    grip: str = "pronated"

    def __post_init__(self) -> None:
        _check_choice("pull-up grip", self.grip, cfg.GRIP_FACTORS)

    @property
    def label(self) -> str:
        return self.grip


@dataclass(frozen=True)
class PushupOptions:
    movement: ClassVar[Movement] = Movement.PUSHUP
    width: str = "normal"
    added_weight: float = 0.0

    def __post_init__(self) -> None:
        _check_choice("push-up width", self.width, cfg.PUSHUP_WIDTH_ANGLES)
        _check_finite("added_weight", self.added_weight)

    @property
    def label(self) -> str:
        return self.width


@dataclass(frozen=True)
class ThrusterOptions:
    movement: ClassVar[Movement] = Movement.THRUSTER

    @property
    def label(self) -> str:
        return "front"


MovementOptions = Union[
    SquatOptions,
    DeadliftOptions,
    BenchOptions,
    OverheadPressOptions,
    PullupOptions,
    PushupOptions,
    ThrusterOptions,
]

OPTION_TYPES = {
    Movement.SQUAT: SquatOptions,
    Movement.DEADLIFT: DeadliftOptions,
    Movement.BENCH: BenchOptions,
    Movement.OHP: OverheadPressOptions,
    Movement.PULLUP: PullupOptions,
    Movement.PUSHUP: PushupOptions,
    Movement.THRUSTER: ThrusterOptions,
}

# Fields filled by "first-second" variant strings
_PAIRED_FIELDS = {
    Movement.SQUAT: ("variant", "stance"),
    Movement.DEADLIFT: ("variant", "stance"),
    Movement.BENCH: ("grip", "arch"),
}

# Field that a bare variant string fills, per family
_VARIANT_FIELD = {
    Movement.PULLUP: "grip",
    Movement.PUSHUP: "width",
}


def parse_options(movement, variant=None, **extra) -> MovementOptions:
    """Build the options record for `movement` from a variant string (or pass one through).

    Bench variants are written "grip" or "grip-arch", e.g. "wide-competitive"; squat
    and deadlift variants take an optional stance the same way ("lowBar-wide", "sumo-hybrid").
    Extra keyword arguments set the remaining fields (bar_offset, added_weight, ...).
    """
    movement = coerce_movement(movement)
    option_type = OPTION_TYPES[movement]
    if isinstance(variant, option_type):
        return variant
    if variant is not None and not isinstance(variant, str):
        raise InvalidInputError(
            f"options for {movement.value} must be a variant name or {option_type.__name__}"
        )

    kwargs = dict(extra)
    if variant:
        if movement in _PAIRED_FIELDS:
            first, second = _PAIRED_FIELDS[movement]
            head, _, tail = variant.partition("-")
            kwargs[first] = head
            if tail:
                kwargs[second] = tail
        elif movement in _VARIANT_FIELD:
            kwargs[_VARIANT_FIELD[movement]] = variant
        elif variant != option_type().label:
            raise InvalidInputError(f"{movement.value} has no variant '{variant}'")
    return option_type(**kwargs)
