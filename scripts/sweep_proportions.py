"""sweep_proportions.py
=================================

Purpose
-------
Show how femur length alone moves the squat. A single reference lifter
(the first entry of `cfg.EXAMPLE_LIFTERS`) is rebuilt with the femur SD swept
across the supported range while every other segment stays average, and each
bar position is solved at its reference (bottom) pose.

For every (femur SD, bar position) the table lists:
    displacement_m     bar travel of one rep
    hip_moment_arm_m   horizontal bar-to-hip distance at the bottom
    trunk_deg          trunk angle above horizontal
    demand             hip_moment_arm * sqrt(displacement)
    demand_vs_avg      demand relative to the same bar position at SD 0

Rows where no trunk angle keeps the bar over mid-foot are reported with
valid=False and the fallback displacement.

Usage
-----
Run directly:
    python scripts/sweep_proportions.py
Optional plot: set `cfg.SAVE_PLOTS` / `cfg.SHOW_BLOCKING` in `lever/config.py`.
"""

import os
import pathlib
import sys

import numpy as np
import pandas as pd

# Ensure project root on path for "anthro"/"lever" imports when run directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from anthro import config as anthro_cfg
from anthro.segments import SDModifiers, build_profile
from lever import config as cfg
from lever.options import Movement
from lever.physics import demand_factor
from lever.solvers import reference_solution

label, height_m, weight_kg, sex, _, _ = cfg.EXAMPLE_LIFTERS[0]
sd_values = np.linspace(anthro_cfg.SD_MIN, anthro_cfg.SD_MAX, 17)

records = []
for sd in sd_values:
    anthro = build_profile(height_m, weight_kg, sex, modifiers=SDModifiers(femur=float(sd)))
    for variant in cfg.BAR_POSITIONS:
        sol = reference_solution(anthro, Movement.SQUAT, variant)
        records.append({
            "femur_sd": float(sd),
            "femur_m": anthro.segments.femur,
            "variant": variant,
            "displacement_m": sol.displacement,
            "hip_moment_arm_m": sol.hip_moment_arm,
            "trunk_deg": sol.trunk_angle if sol.trunk_angle is not None else float("nan"),
            "ankle_deg": sol.angles.get("ankle", float("nan")),
            "demand": demand_factor(Movement.SQUAT, sol),
            "valid": sol.valid,
        })

df = pd.DataFrame(records)
baseline = df[df["femur_sd"] == 0.0].set_index("variant")["demand"]
df["demand_vs_avg"] = df["demand"] / df["variant"].map(baseline)

print(f"Femur sweep for {label} ({height_m:.2f} m, {weight_kg:.0f} kg, {sex}), squat bottom position\n")
for variant, group in df.groupby("variant", sort=False):
    print(f"{variant}:")
    print(group.drop(columns="variant").round(3).to_string(index=False))
    print("")

invalid = df[~df["valid"]]
if not invalid.empty:
    print("No bar-over-mid-foot solution for:")
    for _, row in invalid.iterrows():
        print(f"  femur SD {row['femur_sd']:+.1f} ({row['variant']})")

# Optional visualization: demand relative to an average femur, per bar position
if cfg.SAVE_PLOTS or cfg.SHOW_BLOCKING:
    try:
        import matplotlib.pyplot as plt
    except ImportError as exc:
        print(f"[plots] matplotlib is not available ({exc})")
    else:
        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(10, 4.5))
        for variant, group in df.groupby("variant", sort=False):
            ok = group[group["valid"]]
            ax1.plot(ok["femur_sd"], ok["demand_vs_avg"], "o-", label=variant)
            ax2.plot(ok["femur_sd"], ok["trunk_deg"], "o-", label=variant)
        ax1.axhline(1.0, color="gray", linestyle=":")
        ax1.set_xlabel("femur SD")
        ax1.set_ylabel("demand / demand at SD 0")
        ax1.set_title("Squat demand vs femur length")
        ax1.legend()
        ax1.grid(True, alpha=0.3)
        ax2.set_xlabel("femur SD")
        ax2.set_ylabel("trunk angle above horizontal (deg)")
        ax2.set_title("Trunk angle at the bottom")
        ax2.grid(True, alpha=0.3)
        fig.tight_layout()
        if cfg.SAVE_PLOTS:
            os.makedirs(cfg.PLOTS_DIR, exist_ok=True)
            out_path = os.path.join(cfg.PLOTS_DIR, f"sweep_femur_squat.{cfg.SAVE_FORMAT}")
            fig.savefig(out_path, dpi=cfg.SAVE_DPI, format=cfg.SAVE_FORMAT, bbox_inches="tight")
            print(f"[saved] {out_path}")
        if cfg.SHOW_BLOCKING:
            plt.show()
        else:
            plt.close(fig)
