"""
Anthropometry configuration (standalone).
Segment ratios and SD scaling used by `anthro.segments`.
"""
from __future__ import annotations

from typing import Dict

# Population-average segment lengths as a fraction of standing height.
# "foot" is heel-to-toe length, "foot_height" is floor-to-ankle-joint height.
SEGMENT_RATIOS: Dict[str, Dict[str, float]] = {
    "male": {
        "head_neck": 0.130,
        "torso": 0.288,
        "upper_arm": 0.186,
        "forearm": 0.146,
        "hand": 0.108,
        "femur": 0.245,
        "tibia": 0.246,
        "foot": 0.152,
        "foot_height": 0.039,
    },
    "female": {
        "head_neck": 0.130,
        "torso": 0.285,
        "upper_arm": 0.183,
        "forearm": 0.143,
        "hand": 0.106,
        "femur": 0.245,
        "tibia": 0.246,
        "foot": 0.144,
        "foot_height": 0.039,
    },
}

# Per-segment SD effect: length = height * ratio * (1 + sd * SD_VARIATION)
SD_VARIATION: float = 0.07
SD_MIN: float = -4.0
SD_MAX: float = 4.0

# Coarse arms/legs/torso triple uses its own per-unit coefficient
GROUP_SD_VARIATION: float = 0.045
GROUP_SEGMENTS: Dict[str, tuple] = {
    "arms": ("upper_arm", "forearm", "hand"),
    "legs": ("femur", "tibia", "foot_height"),
    "torso": ("torso",),
}

# Height normalization: stacked height may drift this far (fraction) before rescaling.
# head_neck stays fixed, the vertical chain below it absorbs the difference.
HEIGHT_NORMALIZATION_TOLERANCE: float = 0.02
NORMALIZED_SEGMENTS: tuple = ("torso", "femur", "tibia", "foot_height")

# Symbolic proportion presets -> group SDs
PROPORTION_PRESETS: Dict[str, Dict[str, float]] = {
    "veryLongLegs": {"torso": -2.0, "legs": 2.0},
    "longLegs": {"torso": -1.0, "legs": 1.0},
    "average": {"torso": 0.0, "legs": 0.0},
    "longTorso": {"torso": 1.0, "legs": -1.0},
    "veryLongTorso": {"torso": 2.0, "legs": -2.0},
}
ARM_PRESETS: Dict[str, float] = {
    "extraShort": -2.0,
    "short": -1.0,
    "average": 0.0,
    "long": 1.0,
    "extraLong": 2.0,
}

# Joint range limits (degrees)
MAX_ANKLE_DORSIFLEXION_DEG: float = 30.0
MAX_HIP_FLEXION_DEG: float = 130.0
MAX_SHOULDER_FLEXION_DEG: float = 165.0
