"""Build GWL script files: compiled geometry, jobs and multi-jobs.

Usage::

    from gwl_compiler.geometry import Q_
    from gwl_compiler.gwl import compile_geometry, compile_job, multijob

    cg = compile_geometry(
        "out/lens.gwl", lens_block,
        laser_power=Q_(20, "mW"), scan_speed=Q_(10, "mm/s"),
    )
    job = compile_job(
        "out/lens_job.gwl", cg, cg.translate(Q_([100, 0, 0], "um")),
        stage_speed=Q_(200, "um/s"), interface_pos=Q_(0, "um"),
    )
    multijob(
        "out/all.gwl", (Q_([0, 0], "um"), job),
        stage_speed=Q_(200, "um/s"),
    )

Each builder opens exactly one file and closes it on every exit path.
A failure while writing propagates; the partial file is left on disk and
must be treated as invalid.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from gwl_compiler.geometry.units import zero_vector
from gwl_compiler.gwl.records import CompiledGeometry, GWLJob
from gwl_compiler.gwl.writer import GWLError, GWLWriter, PositionalGeometry
from gwl_compiler.utils.fs import ensure_dir

logger = logging.getLogger(__name__)


def _open_script(filepath: str | Path):
    path = Path(filepath)
    ensure_dir(path.parent)
    return open(path, "w", encoding="utf-8")


def compile_geometry(
    filepath: str | Path,
    *geom: PositionalGeometry,
    laser_power: Any,
    scan_speed: Any,
    writer: Optional[GWLWriter] = None,
) -> CompiledGeometry:
    """Write a script that draws *geom* starting at the current stage position.

    Parameters
    ----------
    filepath : str | Path
        Output script path.  Also used verbatim as the include reference.
    *geom : Block | SuperBlock | CompiledGeometry
        Nodes written in order, each at its own origin.
    laser_power : pint.Quantity
        Power quantity, written in mW.
    scan_speed : pint.Quantity
        Velocity quantity, written in um/s.
    writer : GWLWriter, optional
        Writer to use.  Defaults to ``GWLWriter()``.

    Returns
    -------
    CompiledGeometry
        Record with a zero origin and the net displacement of the script.
        Use :func:`~gwl_compiler.gwl.records.translate` to relocate it.
    """
    writer = writer or GWLWriter()
    with _open_script(filepath) as io:
        writer.write_write_params(io, laser_power, scan_speed)
        displacement = writer.write_sequence(io, geom)
    logger.info(
        "Compiled %d node(s) to %s (displacement %s)",
        len(geom), filepath, displacement,
    )
    return CompiledGeometry(zero_vector(), str(filepath), displacement)


def compile_job(
    filepath: str | Path,
    *cg: CompiledGeometry,
    stage_speed: Any,
    interface_pos: Any,
    writer: Optional[GWLWriter] = None,
) -> GWLJob:
    """Write a job script running the compiled scripts *cg* in order.

    The job sets the stage velocity, finds the interface at
    *interface_pos* and then includes each script at its origin.  The
    job always starts at the current stage position; use
    :func:`multijob` to place jobs globally.

    Raises
    ------
    GWLError
        If any item of *cg* is not a ``CompiledGeometry``.
    """
    for item in cg:
        if not isinstance(item, CompiledGeometry):
            raise GWLError(
                f"Jobs are built from CompiledGeometry, got {type(item).__name__}"
            )
    writer = writer or GWLWriter()
    with _open_script(filepath) as io:
        writer.write_stage_velocity(io, stage_speed)
        writer.write_find_interface(io, interface_pos)
        writer.write_sequence(io, cg)
    logger.info("Wrote job with %d script(s) to %s", len(cg), filepath)
    return GWLJob(str(filepath))


def multijob(
    filepath: str | Path,
    *gj: tuple[Any, GWLJob],
    stage_speed: Any,
    writer: Optional[GWLWriter] = None,
) -> None:
    """Write a script running several jobs back to back.

    Parameters
    ----------
    filepath : str | Path
        Output script path.
    *gj : tuple[location, GWLJob]
        ``(location, job)`` pairs.  ``location`` is a 2D length position
        in global stage coordinates.
    stage_speed : pint.Quantity
        Velocity quantity, written in um/s.

    Raises
    ------
    ValueError
        If a location does not have exactly two components.
    GWLError
        If a job is not a ``GWLJob``.

    Notes
    -----
    Jobs are placed with absolute ``GlobalGoto`` moves, so no position
    is tracked between them.  Every pair is checked before the file is
    opened.
    """
    writer = writer or GWLWriter()
    for location, job in gj:
        writer.global_location(location)
        if not isinstance(job, GWLJob):
            raise GWLError(f"Expected GWLJob, got {type(job).__name__}")
    with _open_script(filepath) as io:
        writer.write_stage_velocity(io, stage_speed)
        for location, job in gj:
            writer.write_global_goto(io, location)
            writer.write_include(io, job.filepath)
    logger.info("Wrote multi-job with %d job(s) to %s", len(gj), filepath)
