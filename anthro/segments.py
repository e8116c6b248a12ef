"""Segment-length anthropometry from height, weight, sex and proportion modifiers.

This module turns a handful of lifter inputs into an immutable skeletal profile
for the sagittal-plane lift models in `lever`.

Main entry points:
    build_profile(...): per-segment SD (and optional arms/legs/torso group SD) synthesis
    profile_from_proportions(...): symbolic presets ("longLegs", "short" arms, ...)
    profile_from_measurements(...): literal measured lengths, SDs back-solved for reporting
    measurement_from_sd / sd_from_measurement: the two directions of the SD <-> length mapping

Lengths are population ratios of height scaled by a fixed percentage per SD. The stacked
segments approximate, but are not forced to equal, standing height unless normalization
is requested.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Dict, Mapping, Optional

from . import config as cfg


class InvalidInputError(ValueError):
    """Raised for non-physical lifter inputs (non-positive height, out-of-range SD, ...)."""


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"


def coerce_sex(sex) -> Sex:
    if isinstance(sex, Sex):
        return sex
    try:
        return Sex(str(sex).lower())
    except ValueError:
        raise InvalidInputError("sex must be 'male' or 'female'") from None


@dataclass(frozen=True)
class SegmentLengths:
    """Segment lengths in metres.

    Attributes:
        torso: Hip joint to shoulder joint.
        upper_arm: Shoulder to elbow.
        forearm: Elbow to wrist.
        hand: Wrist to fingertip.
        femur: Hip to knee.
        tibia: Knee to ankle.
        foot: Heel to toe.
        foot_height: Floor to ankle joint.
        head_neck: Shoulder line to vertex.
    """

    torso: float
    upper_arm: float
    forearm: float
    hand: float
    femur: float
    tibia: float
    foot: float
    foot_height: float
    head_neck: float

    @property
    def total_height(self) -> float:
        return self.head_neck + self.torso + self.femur + self.tibia + self.foot_height

    def as_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class SDModifiers:
    """Per-segment offsets in standard deviations (0 = population average)."""

    torso: float = 0.0
    upper_arm: float = 0.0
    forearm: float = 0.0
    hand: float = 0.0
    femur: float = 0.0
    tibia: float = 0.0
    foot: float = 0.0
    foot_height: float = 0.0
    head_neck: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class GroupModifiers:
    """Coarse arms/legs/torso SD triple (see `cfg.GROUP_SEGMENTS`)."""

    arms: float = 0.0
    legs: float = 0.0
    torso: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {"arms": self.arms, "legs": self.legs, "torso": self.torso}


@dataclass(frozen=True)
class Mobility:
    max_ankle_dorsiflexion: float = cfg.MAX_ANKLE_DORSIFLEXION_DEG
    max_hip_flexion: float = cfg.MAX_HIP_FLEXION_DEG
    max_shoulder_flexion: float = cfg.MAX_SHOULDER_FLEXION_DEG


@dataclass(frozen=True)
class Anthropometry:
    height: float
    weight: float
    sex: Sex
    segments: SegmentLengths
    modifiers: SDModifiers = field(default_factory=SDModifiers)
    groups: GroupModifiers = field(default_factory=GroupModifiers)
    mobility: Mobility = field(default_factory=Mobility)

    @property
    def arm_reach(self) -> float:
        """Shoulder to wrist with the elbow straight (bar held at the wrist)."""
        return self.segments.upper_arm + self.segments.forearm

    @property
    def total_arm(self) -> float:
        return self.segments.upper_arm + self.segments.forearm + self.segments.hand

    @property
    def total_leg(self) -> float:
        return self.segments.femur + self.segments.tibia + self.segments.foot_height

    @property
    def hip_height(self) -> float:
        return self.total_leg

    @property
    def acromion_height(self) -> float:
        return self.hip_height + self.segments.torso

    @property
    def crural_index(self) -> float:
        return self.segments.tibia / self.segments.femur

    @property
    def femur_torso_ratio(self) -> float:
        return self.segments.femur / self.segments.torso

    @property
    def ape_index(self) -> float:
        # Arm span approximated as both arms plus biacromial breadth (~0.36 torso)
        return (2.0 * self.total_arm + 0.36 * self.segments.torso) / self.height


def _check_positive(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{name} must be positive and finite, got {value}")
    return value


def _check_sd(name: str, sd: float) -> float:
    sd = float(sd)
    if not math.isfinite(sd) or sd < cfg.SD_MIN or sd > cfg.SD_MAX:
        raise InvalidInputError(
            f"{name} SD must be within [{cfg.SD_MIN:g}, {cfg.SD_MAX:g}], got {sd}"
        )
    return sd


def _base_ratio(sex: Sex, segment: str) -> float:
    ratios = cfg.SEGMENT_RATIOS[sex.value]
    if segment not in ratios:
        raise InvalidInputError(f"unknown segment '{segment}'")
    return ratios[segment]


def measurement_from_sd(height: float, sex, segment: str, sd: float) -> float:
    """Segment length (m) for a lifter of `height` sitting `sd` standard deviations from average."""
    height = _check_positive("height", height)
    sd = _check_sd(segment, sd)
    return height * _base_ratio(coerce_sex(sex), segment) * (1.0 + sd * cfg.SD_VARIATION)


def sd_from_measurement(height: float, sex, segment: str, measured: float) -> float:
    """Back-solve the SD of a measured segment length, clamped to the supported range."""
    height = _check_positive("height", height)
    measured = _check_positive(segment, measured)
    ratio = _base_ratio(coerce_sex(sex), segment)
    sd = (measured / (height * ratio) - 1.0) / cfg.SD_VARIATION
    return min(cfg.SD_MAX, max(cfg.SD_MIN, sd))


def _normalize_to_height(lengths: Dict[str, float], height: float) -> Dict[str, float]:
    stacked = lengths["head_neck"] + sum(lengths[s] for s in cfg.NORMALIZED_SEGMENTS)
    if abs(stacked - height) / height <= cfg.HEIGHT_NORMALIZATION_TOLERANCE:
        return lengths
    scale = (height - lengths["head_neck"]) / (stacked - lengths["head_neck"])
    out = dict(lengths)
    for s in cfg.NORMALIZED_SEGMENTS:
        out[s] = lengths[s] * scale
    return out


def build_profile(
    height: float,
    weight: float,
    sex,
    modifiers: Optional[SDModifiers] = None,
    groups: Optional[GroupModifiers] = None,
    mobility: Optional[Mobility] = None,
    normalize: bool = False,
) -> Anthropometry:
    """Build an immutable profile from height (m), weight (kg), sex and SD modifiers.

    Per-segment and group multipliers compose:
        length = height * ratio * (1 + sd * SD_VARIATION) * (1 + group_sd * GROUP_SD_VARIATION)

    With `normalize=True` the vertical chain is rescaled to the input height when the
    stacked total drifts more than HEIGHT_NORMALIZATION_TOLERANCE (head/neck unchanged).
    """
    height = _check_positive("height", height)
    weight = _check_positive("weight", weight)
    sex = coerce_sex(sex)
    modifiers = modifiers or SDModifiers()
    groups = groups or GroupModifiers()

    sds = {name: _check_sd(name, sd) for name, sd in modifiers.as_dict().items()}
    group_sds = {name: _check_sd(name, sd) for name, sd in groups.as_dict().items()}

    lengths: Dict[str, float] = {}
    for name, sd in sds.items():
        lengths[name] = height * _base_ratio(sex, name) * (1.0 + sd * cfg.SD_VARIATION)
    for group, members in cfg.GROUP_SEGMENTS.items():
        factor = 1.0 + group_sds[group] * cfg.GROUP_SD_VARIATION
        for name in members:
            lengths[name] *= factor

    if normalize:
        lengths = _normalize_to_height(lengths, height)

    return Anthropometry(
        height=height,
        weight=weight,
        sex=sex,
        segments=SegmentLengths(**lengths),
        modifiers=modifiers,
        groups=groups,
        mobility=mobility or Mobility(),
    )


def profile_from_proportions(
    height: float,
    weight: float,
    sex,
    proportion: str = "average",
    arms: str = "average",
    mobility: Optional[Mobility] = None,
) -> Anthropometry:
    """Profile from symbolic categories, e.g. proportion="longLegs", arms="short"."""
    if proportion not in cfg.PROPORTION_PRESETS:
        raise InvalidInputError(
            f"unknown proportion '{proportion}', expected one of {sorted(cfg.PROPORTION_PRESETS)}"
        )
    if arms not in cfg.ARM_PRESETS:
        raise InvalidInputError(f"unknown arm length '{arms}', expected one of {sorted(cfg.ARM_PRESETS)}")
    preset = cfg.PROPORTION_PRESETS[proportion]
    groups = GroupModifiers(arms=cfg.ARM_PRESETS[arms], legs=preset["legs"], torso=preset["torso"])
    return build_profile(height, weight, sex, groups=groups, mobility=mobility, normalize=True)


def profile_from_measurements(
    height: float,
    weight: float,
    sex,
    measurements: Mapping[str, float],
    mobility: Optional[Mobility] = None,
) -> Anthropometry:
    """Profile using measured segment lengths (m) literally; unmeasured segments stay average.

    The equivalent SD of every measured segment is back-solved (and clamped) so the
    profile can be reported or re-entered in SD mode.
    """
    base = build_profile(height, weight, sex, mobility=mobility)
    lengths = base.segments.as_dict()
    sds = SDModifiers().as_dict()
    for name, measured in measurements.items():
        if name not in lengths:
            raise InvalidInputError(f"unknown segment '{name}'")
        lengths[name] = _check_positive(name, measured)
        sds[name] = sd_from_measurement(base.height, base.sex, name, lengths[name])
    return replace(base, segments=SegmentLengths(**lengths), modifiers=SDModifiers(**sds))
