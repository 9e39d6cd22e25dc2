#!/usr/bin/env python3
"""
run_warp.py – Quadrilateral Perspective Warp Pipeline

Loads configuration from configs/default.yaml (or a user-specified file),
warps every image listed under ``jobs`` onto its corner quadrilateral, and
writes the warped canvas plus an overview figure to the results directory.

Usage
-----
    python run_warp.py
    python run_warp.py --config configs/default.yaml
    python run_warp.py --jobs keystone tilt
    python run_warp.py --no-grid --containment polygon
"""

import argparse
import os
import sys
import time

import numpy as np
import yaml

# Ensure the project root is on the Python path when invoked directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from src.geometry.errors import DegenerateGeometryError, InvalidInputError
from src.geometry.points import as_quad
from src.geometry.quadrilateral import CONTAINMENT_MODES, check_containment_mode
from src.warping.canvas import clamp_corners, fit_canvas, rectangle_corners
from src.warping.grid import DEFAULT_GRID_SPACING, project_grid
from src.warping.resample import resample
from src.utils.image_io import ensure_output_dirs, load_raster, resize_raster, save_raster
from src.utils.visualization import save_warp_overview


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────

def load_config(path: str) -> dict:
    with open(path, "r") as fh:
        return yaml.safe_load(fh)


def banner(text: str) -> None:
    width = 60
    print("\n" + "─" * width)
    print(f"  {text}")
    print("─" * width)


# ──────────────────────────────────────────────────────────────────────────────
# Per-job pipeline
# ──────────────────────────────────────────────────────────────────────────────

def run_job(job_cfg: dict, cfg: dict, results_dir: str, show_grid: bool) -> dict:
    """Warp a single image and return summary metrics."""
    name = job_cfg["name"]
    banner(f"Job: {name}")

    # ── 1. Load image and size the canvas ────────────────────────────────────
    source = load_raster(job_cfg["image"])
    canvas_cfg = cfg.get("canvas", {})
    canvas_w, canvas_h = fit_canvas(
        source.width, source.height,
        max_width=canvas_cfg.get("max_width", 1200),
        max_height=canvas_cfg.get("max_height", 800),
    )
    print(f"  Loaded image   {source.width}×{source.height}  →  "
          f"canvas {canvas_w}×{canvas_h}")

    # ── 2. Corner handles ────────────────────────────────────────────────────
    src_pts = rectangle_corners(source.width, source.height)
    if job_cfg.get("corners"):
        dst_pts = clamp_corners(job_cfg["corners"], canvas_w, canvas_h)
    else:
        dst_pts = rectangle_corners(canvas_w, canvas_h)
    print("  Corners        " +
          "  ".join(f"({p.x:.0f}, {p.y:.0f})" for p in dst_pts))

    # ── 3. Perspective warp + grid ───────────────────────────────────────────
    containment = cfg.get("warp", {}).get("containment", "bbox")
    grid_cfg = cfg.get("grid", {})
    print(f"  Stage 1 – Perspective warp (containment={containment})")

    status = "warped"
    polylines = []
    try:
        warped = resample(source, src_pts, dst_pts, canvas_w, canvas_h,
                          containment=containment)
        if show_grid:
            print("  Stage 2 – Grid projection")
            polylines = project_grid(source.width, source.height, src_pts, dst_pts,
                                     spacing=grid_cfg.get("spacing", DEFAULT_GRID_SPACING))
            print(f"    {len(polylines)} grid lines")
    except DegenerateGeometryError as exc:
        print(f"  [WARN] No transform applied – {exc}")
        warped = resize_raster(source, canvas_w, canvas_h)
        status = "unmodified"

    covered = int(np.count_nonzero(warped.pixels[:, :, 3]))
    print(f"    {covered} / {canvas_w * canvas_h} canvas pixels covered")

    # ── 4. Save outputs ──────────────────────────────────────────────────────
    save_raster(warped, os.path.join(results_dir, name, "warped.png"))
    save_warp_overview(source, warped, dst_pts, polylines, name, results_dir,
                       grid_style=grid_cfg)
    print(f"  Saved warp → {results_dir}/{name}/warped.png")

    return {
        "job": name,
        "source": f"{source.width}×{source.height}",
        "canvas": f"{canvas_w}×{canvas_h}",
        "covered": covered,
        "coverage": covered / float(canvas_w * canvas_h),
        "grid_lines": len(polylines),
        "status": status,
    }


# ──────────────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Warp images onto quadrilaterals with a projective transform"
    )
    p.add_argument(
        "--config", default="configs/default.yaml",
        help="Path to YAML configuration file (default: configs/default.yaml)",
    )
    p.add_argument(
        "--jobs", nargs="*", default=None,
        help="Subset of job names to process (default: all jobs in config)",
    )
    p.add_argument(
        "--no-grid", action="store_true",
        help="Skip the projected reference grid overlay",
    )
    p.add_argument(
        "--containment", choices=CONTAINMENT_MODES, default=None,
        help="Override the quadrilateral test from the config",
    )
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # Load configuration
    if not os.path.exists(args.config):
        print(f"[ERROR] Config file not found: {args.config}")
        sys.exit(1)
    cfg = load_config(args.config)

    if args.containment:
        cfg.setdefault("warp", {})["containment"] = args.containment

    results_dir = cfg.get("results_dir", "results")
    jobs = cfg.get("jobs", [])

    # Optionally restrict to a subset of jobs
    if args.jobs:
        jobs = [j for j in jobs if j["name"] in args.jobs]
        if not jobs:
            print(f"[ERROR] No matching jobs found for: {args.jobs}")
            sys.exit(1)

    # Validate that image files exist and corners are usable
    for job in jobs:
        if not os.path.exists(job["image"]):
            print(f"[ERROR] Image not found: {job['image']}")
            sys.exit(1)
        if job.get("corners"):
            try:
                as_quad(job["corners"], f"{job['name']} corners")
            except InvalidInputError as exc:
                print(f"[ERROR] Invalid corners: {exc}")
                sys.exit(1)

    containment = cfg.get("warp", {}).get("containment", "bbox")
    try:
        check_containment_mode(containment)
    except InvalidInputError as exc:
        print(f"[ERROR] Invalid warp config: {exc}")
        sys.exit(1)

    spacing = cfg.get("grid", {}).get("spacing", DEFAULT_GRID_SPACING)
    if isinstance(spacing, bool) or not isinstance(spacing, (int, float)) or spacing <= 0:
        print(f"[ERROR] Invalid grid config: spacing must be positive, got {spacing!r}")
        sys.exit(1)

    ensure_output_dirs([j["name"] for j in jobs], base=results_dir)

    show_grid = cfg.get("grid", {}).get("enabled", True) and not args.no_grid

    banner("Quadrilateral Perspective Warp")
    print(f"  Config     : {args.config}")
    print(f"  Jobs       : {[j['name'] for j in jobs]}")
    print(f"  Grid       : {'enabled' if show_grid else 'disabled'}")
    print(f"  Containment: {cfg.get('warp', {}).get('containment', 'bbox')}")
    print(f"  Output     : {results_dir}/")

    t0 = time.time()
    all_metrics = []

    for job in jobs:
        metrics = run_job(job, cfg, results_dir, show_grid)
        all_metrics.append(metrics)

    # ── Summary table ──────────────────────────────────────────────────────
    banner("Results Summary")
    header = f"{'Job':<12} {'Source':>11} {'Canvas':>11} {'Coverage':>9} {'Grid':>6} {'Status':>11}"
    print(header)
    print("─" * len(header))
    for m in all_metrics:
        print(f"{m['job']:<12} {m['source']:>11} {m['canvas']:>11} "
              f"{100 * m['coverage']:>8.1f}% {m['grid_lines']:>6} {m['status']:>11}")

    elapsed = time.time() - t0
    print(f"\nPipeline complete in {elapsed:.1f}s")
    print(f"Results saved to: {os.path.abspath(results_dir)}/")


if __name__ == "__main__":
    main()
