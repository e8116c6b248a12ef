"""
Centralized configuration for the LEVER lift comparison model.
Edit values here to change inputs without touching the computation code.
"""
from typing import Dict, List, Tuple
import os

GRAVITY: float = 9.81                      # Gravitational acceleration (m/s^2)
JOULES_PER_KCAL: float = 4184.0

###############################################
# Squat solver
#
# Reference pose (parallel depth by default): femur at the depth angle, bar over the ankle.
# At the lifter's maximum ankle dorsiflexion the trunk angle (from horizontal) is searched
# in [TRUNK_MIN_DEG, TRUNK_MAX_DEG] by bisection on the horizontal bar-to-ankle offset.
# If even the most upright trunk leaves the bar in front of the ankle, the trunk is held at
# the limit and the ankle angle is bisected down towards SQUAT_MIN_ANKLE_DEG instead.
###############################################
SQUAT_MIN_ANKLE_DEG: float = 10.0
TRUNK_MIN_DEG: float = 20.0                # From horizontal (very bent over)
TRUNK_MAX_DEG: float = 80.0                # From horizontal (near upright)
SOLVER_MAX_ITERATIONS: int = 100
SOLVER_TOLERANCE: float = 1e-9             # Residual (m) and bracket width (deg)
FALLBACK_DISPLACEMENT_FACTOR: float = 0.37  # ROM = factor * height when unsolved

# Bar offset from the shoulder joint (m): (forward, along trunk), rotates with the trunk
BAR_POSITIONS: Dict[str, Tuple[float, float]] = {
    "highBar": (-0.05, 0.05),
    "lowBar": (-0.12, -0.05),
    "front": (0.08, 0.08),
}

# Femur angle below horizontal at the reference pose (deg); negative = above parallel
SQUAT_DEPTHS: Dict[str, float] = {
    "parallel": 0.0,
    "deep": 15.0,
    "half": -25.0,
}

# Back squat arms (bar held behind the neck): segment directions relative to the trunk (deg)
BACK_SQUAT_UPPER_ARM_REL_DEG: float = 160.0
BACK_SQUAT_FOREARM_REL_DEG: float = -10.0

# Stance width: sagittal femur length multiplier (abducted thighs project shorter) and
# change to TRUNK_MAX_DEG (wide stances allow a more upright torso)
SQUAT_STANCE_FEMUR_FACTORS: Dict[str, float] = {
    "narrow": 1.0,
    "normal": 1.0,
    "wide": 0.95,
    "ultraWide": 0.88,
}
SQUAT_STANCE_TRUNK_ADJUST_DEG: Dict[str, float] = {
    "narrow": -2.0,
    "normal": 0.0,
    "wide": 3.0,
    "ultraWide": 5.0,
}

###############################################
# Deadlift
###############################################
STANDARD_PLATE_RADIUS: float = 0.225       # 450 mm competition plate
DEADLIFT_SHIN_ANGLES: Dict[str, float] = {  # Shin lean from vertical at the floor (deg)
    "conventional": 10.0,
    "sumo": 3.0,
}
SUMO_STANCE_ROM_FACTORS: Dict[str, float] = {  # Sumo ROM as a fraction of conventional
    "hybrid": 0.90,
    "normal": 0.85,
    "wide": 0.80,
    "ultraWide": 0.75,
}

###############################################
# Bench press
###############################################
BENCH_HEIGHT: float = 0.45                 # Pad surface above the floor (m)
BENCH_FEMUR_DECLINE_DEG: float = 15.0      # Thigh slope from the hip down towards the knee
BENCH_GRIP_ANGLES: Dict[str, float] = {    # Upper-arm abduction from vertical (deg)
    "narrow": 5.0,
    "medium": 15.0,
    "wide": 25.0,
}
BENCH_ARCH_HEIGHTS: Dict[str, float] = {   # Chest rise from arching (m)
    "flat": 0.02,
    "moderate": 0.05,
    "competitive": 0.08,
    "extreme": 0.12,
}
AVERAGE_CHEST_DEPTH: float = 0.23          # Shoulder joint to sternum surface (m)
MIN_BENCH_DISPLACEMENT: float = 0.05

###############################################
# Overhead press / pull-up / push-up
###############################################
OHP_RACK_POSITION: str = "front"           # Rack offset taken from BAR_POSITIONS

PULLUP_BAR_HEIGHT: float = 2.5
PULLUP_FOOT_CLEARANCE: float = 0.10        # Bar is raised if hanging feet come closer than this
PULLUP_TOP_CLEARANCE_FRACTION: float = 0.5  # Shoulder below bar at the top, fraction of head/neck
GRIP_FACTORS: Dict[str, float] = {
    "supinated": 1.0,
    "neutral": 1.08,
    "pronated": 1.15,
}

PUSHUP_WIDTH_ANGLES: Dict[str, float] = {  # Upper-arm abduction from vertical (deg)
    "narrow": 5.0,
    "normal": 15.0,
    "wide": 25.0,
}
PUSHUP_BOTTOM_FRACTION: float = 0.4        # Bottom shoulder height as a fraction of the top
PUSHUP_ADDED_WEIGHT_FACTOR: float = 0.85   # Plate on the upper back travels ~85% of shoulder travel

###############################################
# Metrics
###############################################
# Fraction of body weight moved with the bar, by movement and sex (male, female)
EFFECTIVE_MASS_FACTORS: Dict[str, Tuple[float, float]] = {
    "squat": (0.80, 0.812),
    "deadlift": (0.60, 0.608),
    "bench": (0.0, 0.0),
    "ohp": (0.0, 0.0),
    "pullup": (1.0, 1.0),
    "pushup": (0.72, 0.71),
    "thruster": (0.5, 0.5),
}
ALLOMETRIC_EXPONENT: float = 2.0 / 3.0
PEAK_EFFICIENCY: float = 0.25              # eta(v) = PEAK_EFFICIENCY * exp(-EFFICIENCY_DECAY * v^2)
EFFICIENCY_DECAY: float = 0.5
DEFAULT_SECONDS_PER_REP: float = 2.5
DEFAULT_BAR_VELOCITY: float = 0.5          # m/s, animation timing

###############################################
# Comparison
###############################################
NEUTRAL_BAND_PERCENT: float = 1.0
RATIO_EPSILON: float = 1e-12

# Load capacity relative to the family baseline; adjusted only when variants differ
CAPACITY_FACTORS: Dict[str, Dict[str, float]] = {
    "squat": {"highBar": 1.0, "lowBar": 1.075, "front": 0.85},
}

# Explanation thresholds
EXPLAIN_DISPLACEMENT_PCT: float = 2.0
EXPLAIN_MOMENT_ARM_PCT: float = 2.0
EXPLAIN_TRUNK_DEG: float = 3.0
EXPLAIN_ARM_LENGTH_M: float = 0.02
SUMMARY_SUBSTANTIAL_PCT: float = 15.0
SUMMARY_MODERATE_PCT: float = 8.0

# Plot/export options
EXPORT_CSV: bool = False                   # Save ROM/pose tables to CSV files

# Figure saving
# When True, figures will be written to disk (PNG by default) in PLOTS_DIR.
SAVE_PLOTS: bool = True
PLOTS_DIR: str = os.path.join("plots")    # Relative to current working directory
SAVE_FORMAT: str = "png"                 # e.g., "png", "pdf", "svg"
SAVE_DPI: int = 200
SHOW_BLOCKING: bool = False
BLOCK_AT_END: bool = False
POSE_FRAMES: int = 5                       # Stick figures drawn per sequence plot

###############################
# Example lifters
# Tuple: (label, height_m, weight_kg, sex, proportion preset, arm preset)
###############################
EXAMPLE_LIFTERS: List[Tuple[str, float, float, str, str, str]] = [
    ("Man 175cm 77kg", 1.75, 77.0, "male", "average", "average"),
    ("Man 190cm 95kg", 1.905, 95.0, "male", "average", "average"),
    ("Man 175cm long legs", 1.75, 77.0, "male", "longLegs", "short"),
    ("Woman 163cm 60kg", 1.63, 60.0, "female", "average", "average"),
]

# (movement, variant A, variant B, load kg, reps): lifters 0 and 1 of EXAMPLE_LIFTERS
REFERENCE_COMPARISONS: List[Tuple[str, str, str, float, int]] = [
    ("squat", "highBar", "highBar", 143.0, 5),
    ("squat", "highBar", "lowBar", 143.0, 5),
    ("deadlift", "conventional", "sumo", 180.0, 3),
    ("bench", "medium-moderate", "medium-moderate", 100.0, 5),
    ("pullup", "pronated", "pronated", 0.0, 8),
]
