#!/usr/bin/env python3
"""
Build Pattern Script.

Compile a calibration structure into a GWL geometry script and wrap it in
a job script.

Usage:
    python -m gwl_compiler.scripts.build_pattern --pattern square --out out/
    python -m gwl_compiler.scripts.build_pattern --pattern woodpile --layers 20 \\
        --rows 3 --cols 3 --pitch 60 --out out/
    python -m gwl_compiler.scripts.build_pattern --pattern square \\
        --laser-power 25 --scan-speed 20000 --interface-pos 0.5 --out out/

All lengths are micrometres, power milliwatts, speeds micrometres per
second.  Writes ``<out>/<name>_geometry.gwl`` and ``<out>/<name>_job.gwl``.

Available patterns:
    square, woodpile
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from gwl_compiler import patterns
from gwl_compiler.configs.loader import load_config
from gwl_compiler.geometry.units import Q_
from gwl_compiler.gwl.builders import compile_geometry, compile_job
from gwl_compiler.gwl.writer import GWLWriter
from gwl_compiler.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

PATTERN_NAMES = ("square", "woodpile")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compile a calibration structure to GWL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Available patterns: {', '.join(PATTERN_NAMES)}",
    )
    parser.add_argument(
        "--pattern",
        "-p",
        type=str,
        choices=PATTERN_NAMES,
        required=True,
        help="Structure to build",
    )
    parser.add_argument(
        "--out",
        "-o",
        type=str,
        required=True,
        help="Output directory",
    )
    parser.add_argument(
        "--name",
        type=str,
        help="Base name of the output scripts (default: pattern name)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Configuration file path",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Override the configured log level",
    )

    # Geometry (um)
    parser.add_argument("--size", type=float, default=20.0, help="Edge length (um)")
    parser.add_argument("--spacing", type=float, default=0.5, help="Hatch distance (um)")
    parser.add_argument("--height", type=float, default=10.0, help="Square height (um)")
    parser.add_argument(
        "--layer-spacing", type=float, default=0.5, help="Slice distance (um)",
    )
    parser.add_argument(
        "--layers", type=int, default=10, help="Woodpile layer count",
    )
    parser.add_argument("--rotation", type=float, default=0.0, help="Rotation (deg)")

    # Array
    parser.add_argument("--rows", type=int, default=1, help="Array rows")
    parser.add_argument("--cols", type=int, default=1, help="Array columns")
    parser.add_argument("--pitch", type=float, default=50.0, help="Array pitch (um)")

    # Writing parameters
    parser.add_argument(
        "--laser-power", type=float, default=20.0, help="Laser power (mW)",
    )
    parser.add_argument(
        "--scan-speed", type=float, default=10000.0, help="Scan speed (um/s)",
    )
    parser.add_argument(
        "--stage-speed", type=float, default=200.0, help="Stage velocity (um/s)",
    )
    parser.add_argument(
        "--interface-pos", type=float, default=0.0, help="Interface position (um)",
    )
    return parser


def make_geometry(args: argparse.Namespace):
    """Build the requested structure from parsed arguments."""
    um = "um"
    rotation = Q_(args.rotation, "deg")
    if args.pattern == "square":
        geom = patterns.square_block(
            Q_(args.size, um),
            Q_(args.spacing, um),
            Q_(args.height, um),
            Q_(args.layer_spacing, um),
            rotation=rotation,
        )
    else:
        geom = patterns.woodpile(
            Q_(args.size, um),
            Q_(args.spacing, um),
            args.layers,
            Q_(args.layer_spacing, um),
            rotation=rotation,
        )

    if args.rows > 1 or args.cols > 1:
        geom = patterns.block_array(geom, args.rows, args.cols, Q_(args.pitch, um))
    return geom


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(
        args.log_level or config.logging.level,
        **config.logging.setup_kwargs(),
        context={"app": "build_pattern"},
    )

    name = args.name or args.pattern
    out_dir = Path(args.out)
    writer = GWLWriter.from_config(config)

    try:
        geom = make_geometry(args)
        cg = compile_geometry(
            out_dir / f"{name}_geometry.gwl",
            geom,
            laser_power=Q_(args.laser_power, "mW"),
            scan_speed=Q_(args.scan_speed, "um/s"),
            writer=writer,
        )
        job = compile_job(
            out_dir / f"{name}_job.gwl",
            cg,
            stage_speed=Q_(args.stage_speed, "um/s"),
            interface_pos=Q_(args.interface_pos, "um"),
            writer=writer,
        )
    except Exception:
        logger.exception("Building pattern '%s' failed", args.pattern)
        sys.exit(1)

    logger.info("Job script: %s", job.filepath)


if __name__ == "__main__":
    main()
