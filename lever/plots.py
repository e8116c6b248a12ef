"""
Plotting utilities for stick-figure poses. These functions depend on the model but keep
matplotlib-specific code out of the solver and comparison code.
"""
import os

import numpy as np

from . import config as cfg
from .comparison import ComparisonResult
from .model import pose_trace
from .options import coerce_movement, parse_options
from .solvers import solve

# Drawn as line segments, in chain order
BONES = (
    ("ankle", "knee"),
    ("knee", "hip"),
    ("hip", "shoulder"),
    ("shoulder", "head"),
    ("shoulder", "elbow"),
    ("elbow", "wrist"),
)


def _import_pyplot():
    try:
        import matplotlib.pyplot as plt
    except ImportError as exc:
        print("\n[plots] matplotlib is not available. Install it to see the pose plots:")
        print("  python -m pip install matplotlib")
        print(f"  (reason: {exc})")
        return None
    return plt


def _finish(plt, fig, name: str):
    if getattr(cfg, "SAVE_PLOTS", False):
        try:
            os.makedirs(cfg.PLOTS_DIR, exist_ok=True)
            out_path = os.path.join(cfg.PLOTS_DIR, f"{name}.{cfg.SAVE_FORMAT}")
            fig.savefig(out_path, dpi=cfg.SAVE_DPI, format=cfg.SAVE_FORMAT, bbox_inches="tight")
            print(f"[saved] {out_path}")
        except OSError as exc:
            print(f"[warn] failed to save figure: {exc}")
    if cfg.SHOW_BLOCKING or cfg.BLOCK_AT_END:
        plt.show(block=cfg.SHOW_BLOCKING)
    else:
        plt.close(fig)


def draw_pose(ax, pose, color="C0", alpha=1.0, label=None):
    """Draw one Pose2D on `ax`: bones, bar and contact points."""
    joints = pose.joints
    for i, (a, b) in enumerate(BONES):
        ax.plot([joints[a].x, joints[b].x], [joints[a].y, joints[b].y], color=color, alpha=alpha,
                linewidth=2.5, solid_capstyle="round", label=label if i == 0 else None)
    xs = [p.x for p in joints.values()]
    ys = [p.y for p in joints.values()]
    ax.scatter(xs, ys, color=color, alpha=alpha, s=12, zorder=3)
    if pose.bar is not None:
        ax.scatter([pose.bar.x], [pose.bar.y], color="black", alpha=alpha, s=60, zorder=4)
    for point in pose.contacts.values():
        ax.scatter([point.x], [point.y], marker="x", color="gray", alpha=alpha, s=20, zorder=4)


def plot_reference_poses(result: ComparisonResult):
    """Both lifters of a comparison at the reference (bottom) pose, side by side."""
    plt = _import_pyplot()
    if plt is None:
        return
    fig, axes = plt.subplots(1, 2, figsize=(9, 5), sharey=True)
    for ax, lifter, color in zip(axes, (result.lifter_a, result.lifter_b), ("C0", "C3")):
        res = solve(lifter.anthropometry, result.movement, lifter.variant, 0.0)
        draw_pose(ax, res.pose, color=color)
        status = "valid" if res.valid else "INVALID"
        ax.set_title(f"{lifter.name}\n{result.movement.value} {lifter.variant} ({status})", fontsize=9)
        ax.axvline(0.0, color="gray", linestyle=":", linewidth=1)
        ax.set_aspect("equal")
        ax.grid(True, alpha=0.3)
        ax.set_xlabel("x (m)")
    axes[0].set_ylabel("y (m)")
    pct = result.comparison.advantage_percentage
    fig.suptitle(f"Demand ratio B/A: {'n/a' if pct is None else f'{pct:+.1f}%'}")
    fig.tight_layout()
    _finish(plt, fig, f"reference_{result.movement.value}_{result.lifter_a.variant}_{result.lifter_b.variant}")


def plot_pose_sequence(anthro, movement, options=None, label: str = ""):
    """Overlay of POSE_FRAMES poses from bottom to top plus the bar path."""
    plt = _import_pyplot()
    if plt is None:
        return
    movement = coerce_movement(movement)
    variant = parse_options(movement, options).label
    trace = pose_trace(anthro, movement, options, frames=41)
    fig, ax = plt.subplots(figsize=(6, 6))
    for i, phase in enumerate(np.linspace(0.0, 1.0, cfg.POSE_FRAMES)):
        res = solve(anthro, movement, options, float(phase))
        draw_pose(ax, res.pose, color="C0", alpha=0.25 + 0.75 * i / max(cfg.POSE_FRAMES - 1, 1))
    if trace["bar_y"].notna().any():
        ax.plot(trace["bar_x"], trace["bar_y"], color="black", linestyle="--", linewidth=1, label="bar path")
        ax.legend(loc="upper right", fontsize=8)
    ax.set_title(f"{label} {movement.value} {variant}".strip(), fontsize=10)
    ax.set_aspect("equal")
    ax.grid(True, alpha=0.3)
    ax.set_xlabel("x (m)")
    ax.set_ylabel("y (m)")
    fig.tight_layout()
    safe_label = label.replace(" ", "_") or "lifter"
    _finish(plt, fig, f"sequence_{safe_label}_{movement.value}_{variant}")
