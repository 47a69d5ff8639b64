#!/usr/bin/env python3
"""
Build Multi-Job Script.

Place existing job scripts at global stage positions and chain them in
one GWL script.

Usage:
    python -m gwl_compiler.scripts.build_multijob --layout layout.yaml --out all.gwl

Layout file (lengths in um, speed in um/s)::

    stage_speed_um_s: 200
    jobs:
      - location_um: [0, 0]
        job: out/square_job.gwl
      - location_um: [100, 50]
        job: out/woodpile_job.gwl

Job paths are written verbatim into ``include`` directives.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gwl_compiler.configs.loader import load_config
from gwl_compiler.geometry.units import Q_
from gwl_compiler.gwl.builders import multijob
from gwl_compiler.gwl.records import GWLJob
from gwl_compiler.gwl.writer import GWLWriter
from gwl_compiler.utils.fs import load_yaml
from gwl_compiler.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

Number = Union[int, float]


class JobPlacement(BaseModel):
    """One job at a global XY position."""

    model_config = ConfigDict(extra="forbid")

    location_um: Tuple[Number, Number] = Field(..., description="Global (x, y) in um")
    job: str = Field(..., min_length=1, description="Job script reference")


class MultiJobLayout(BaseModel):
    """Layout file schema."""

    model_config = ConfigDict(extra="forbid")

    stage_speed_um_s: Number = Field(..., gt=0, description="Stage velocity (um/s)")
    jobs: List[JobPlacement] = Field(..., min_length=1, description="Jobs in run order")


def load_layout(path: str) -> MultiJobLayout:
    """Load and validate a multi-job layout file.

    Raises
    ------
    ValueError
        If the file is empty or fails validation.
    """
    data = load_yaml(path)
    if data is None:
        raise ValueError(f"Empty layout file: {path}")
    try:
        return MultiJobLayout.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid layout in {path}: {exc}") from exc


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Chain job scripts at global positions",
    )
    parser.add_argument(
        "--layout",
        "-l",
        type=str,
        required=True,
        help="Layout YAML file",
    )
    parser.add_argument(
        "--out",
        "-o",
        type=str,
        required=True,
        help="Output script path",
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
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(
        args.log_level or config.logging.level,
        **config.logging.setup_kwargs(),
        context={"app": "build_multijob"},
    )

    try:
        layout = load_layout(args.layout)
        pairs = [
            (Q_(list(p.location_um), "um"), GWLJob(p.job)) for p in layout.jobs
        ]
        multijob(
            args.out,
            *pairs,
            stage_speed=Q_(layout.stage_speed_um_s, "um/s"),
            writer=GWLWriter.from_config(config),
        )
    except Exception:
        logger.exception("Building multi-job from %s failed", args.layout)
        sys.exit(1)


if __name__ == "__main__":
    main()
