"""GWL writer -- geometry to line-oriented GWL directives.

All stage motion emitted here is **relative**.  A node is written given
the offset from the current stage position to the node's origin
(``rel_origin``) and reports back the net stage displacement its
directives cause.  Parents chain children using only those two values,
so nesting composes without any absolute coordinate.

Raw scales
    Lengths are written in micrometres, laser power in milliwatts and
    speeds in micrometres per second.  Conversion from ``pint``
    quantities happens at this boundary and nowhere else.

Point batching
    The instrument accepts at most ``max_points`` points per ``write``
    call.  Long paths are split across several calls; the last point
    before each intermediate ``write`` is repeated as the first point of
    the next batch so the scan stays continuous.

Negligible motion
    An axis move whose raw magnitude is at or below ``zero_tol`` is not
    written.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Protocol, TextIO

import pint

from gwl_compiler.geometry.primitives import Block, HatchedSlice, SuperBlock
from gwl_compiler.geometry.units import (
    LENGTH_UNIT,
    POWER_UNIT,
    SPEED_UNIT,
    to_raw,
    vector3,
    zero_vector,
)
from gwl_compiler.gwl.records import CompiledGeometry

if TYPE_CHECKING:
    from gwl_compiler.configs.loader import GWLConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_POINTS = 200
DEFAULT_ZERO_TOL = 1e-12


class GWLError(Exception):
    """Raised when geometry cannot be written as GWL."""

    pass


class PositionalGeometry(Protocol):
    """Anything the writer can place: it has a 3-vector ``origin``.

    Implemented by ``Block``, ``SuperBlock`` and ``CompiledGeometry``.
    """

    @property
    def origin(self) -> pint.Quantity: ...


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fmt(value: Any) -> str:
    """Render a raw number the way the instrument reads it."""
    return str(value)


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------


class GWLWriter:
    """Write geometry nodes as GWL directives to a text stream.

    Parameters
    ----------
    max_points : int
        Maximum number of points per ``write`` call.
    zero_tol : float
        Axis moves with ``abs(raw_um) <= zero_tol`` are suppressed.

    Notes
    -----
    The writer holds no position state.  The running stage position is a
    local variable of each traversal and is threaded through return
    values.
    """

    def __init__(
        self,
        max_points: int = DEFAULT_MAX_POINTS,
        zero_tol: float = DEFAULT_ZERO_TOL,
    ) -> None:
        if max_points < 1:
            raise ValueError(f"max_points must be >= 1, got {max_points}")
        if zero_tol < 0:
            raise ValueError(f"zero_tol must be >= 0, got {zero_tol}")
        self.max_points = int(max_points)
        self.zero_tol = float(zero_tol)

    @classmethod
    def from_config(cls, config: GWLConfig) -> GWLWriter:
        """Build a writer from the ``device`` section of a loaded config."""
        return cls(
            max_points=config.device.max_points_per_write,
            zero_tol=config.device.zero_tolerance_um,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def write(
        self, io: TextIO, node: PositionalGeometry, rel_origin: Any,
    ) -> pint.Quantity:
        """Write *node* starting *rel_origin* away from the current stage position.

        Parameters
        ----------
        io : TextIO
            Output stream.
        node : Block | SuperBlock | CompiledGeometry
            Geometry to write.
        rel_origin : pint.Quantity
            Offset from the current stage position to the node's origin.

        Returns
        -------
        pint.Quantity
            Net stage displacement caused by the written directives.

        Raises
        ------
        GWLError
            If *node* is not a supported geometry type.
        """
        rel_origin = vector3(rel_origin)
        if isinstance(node, Block):
            return self._write_block(io, node, rel_origin)
        if isinstance(node, SuperBlock):
            return self._write_superblock(io, node, rel_origin)
        if isinstance(node, CompiledGeometry):
            return self._write_compiled(io, node, rel_origin)
        raise GWLError(f"Cannot write {type(node).__name__} as GWL")

    def write_sequence(
        self, io: TextIO, nodes: Iterable[PositionalGeometry],
    ) -> pint.Quantity:
        """Write *nodes* one after another, starting at the current stage position.

        Each node is placed at its own origin, measured from where the
        stage was when the sequence started.

        Returns
        -------
        pint.Quantity
            Net stage displacement after the last node.
        """
        current = zero_vector()
        count = 0
        for node in nodes:
            origin = getattr(node, "origin", None)
            if origin is None:
                raise GWLError(f"Cannot write {type(node).__name__} as GWL")
            rel_origin = vector3(origin) - current
            current = current + self.write(io, node, rel_origin)
            count += 1
        logger.debug("Wrote %d node(s), displacement %s", count, current)
        return current

    # ------------------------------------------------------------------
    # Directives
    # ------------------------------------------------------------------

    def write_stage_move(self, io: TextIO, delta: Any) -> None:
        """Emit relative stage moves for *delta*, axis by axis (X, Y, Z).

        ``MoveStageX``/``MoveStageY`` and ``AddZDrivePosition`` all take a
        relative delta.  Axes within ``zero_tol`` are skipped.
        """
        xmove, ymove, zmove = to_raw(vector3(delta), LENGTH_UNIT)
        for name, move in (
            ("MoveStageX", xmove),
            ("MoveStageY", ymove),
            ("AddZDrivePosition", zmove),
        ):
            if abs(move) > self.zero_tol:
                io.write(f"{name} {_fmt(move)}\n")

    def write_point(self, io: TextIO, point: Iterable[Any]) -> None:
        io.write("\t".join(_fmt(v) for v in point) + "\n")

    def write_flush(self, io: TextIO) -> None:
        io.write("write\n")

    def write_include(self, io: TextIO, filepath: str) -> None:
        io.write(f"include {filepath}\n")

    def write_write_params(
        self, io: TextIO, laser_power: Any, scan_speed: Any,
    ) -> None:
        """``LaserPower`` (mW) and ``ScanSpeed`` (um/s) header."""
        io.write(f"LaserPower {_fmt(to_raw(laser_power, POWER_UNIT))}\n")
        io.write(f"ScanSpeed {_fmt(to_raw(scan_speed, SPEED_UNIT))}\n")

    def write_stage_velocity(self, io: TextIO, stage_speed: Any) -> None:
        io.write(f"StageVelocity {_fmt(to_raw(stage_speed, SPEED_UNIT))}\n")

    def write_find_interface(self, io: TextIO, interface_pos: Any) -> None:
        io.write(f"FindInterfaceAt {_fmt(to_raw(interface_pos, LENGTH_UNIT))}\n")

    def global_location(self, location: Any) -> tuple[Any, Any]:
        """Raw micrometre ``(x, y)`` of a global stage *location*.

        Raises
        ------
        ValueError
            If *location* does not have exactly two components.
        pint.DimensionalityError
            If a component is not a length.
        """
        if isinstance(location, pint.Quantity):
            raw = list(to_raw(location, LENGTH_UNIT))
        else:
            raw = [to_raw(v, LENGTH_UNIT) for v in location]
        if len(raw) != 2:
            raise ValueError(
                f"location must consist of 2 entries, got {len(raw)}"
            )
        return raw[0], raw[1]

    def write_global_goto(self, io: TextIO, location: Any) -> None:
        """Absolute ``GlobalGotoX``/``GlobalGotoY`` jump to a 2D *location*."""
        lx, ly = self.global_location(location)
        io.write(f"GlobalGotoX {_fmt(lx)}\n")
        io.write(f"GlobalGotoY {_fmt(ly)}\n")

    # ------------------------------------------------------------------
    # Slices
    # ------------------------------------------------------------------

    def write_slice(self, io: TextIO, hs: HatchedSlice, z: Any) -> int:
        """Write the hatch lines of *hs* at height *z*.

        Every path ends with a ``write``.  When a path reaches
        ``max_points`` points before its end, a ``write`` is inserted and
        the current point is repeated to start the next batch.

        Returns
        -------
        int
            Number of ``write`` directives emitted.
        """
        rawz = to_raw(z, LENGTH_UNIT)
        flushes = 0
        for path in hs.hatchlines:
            last = len(path) - 1
            batch = 0
            for i, (x, y) in enumerate(path):
                self.write_point(io, (x, y, rawz))
                batch += 1
                if batch >= self.max_points and i < last:
                    self.write_flush(io)
                    flushes += 1
                    self.write_point(io, (x, y, rawz))
                    batch = 1
            self.write_flush(io)
            flushes += 1
        return flushes

    # ------------------------------------------------------------------
    # Internal: per-node writers
    # ------------------------------------------------------------------

    def _write_block(
        self, io: TextIO, block: Block, rel_origin: pint.Quantity,
    ) -> pint.Quantity:
        self.write_stage_move(io, rel_origin)
        flushes = 0
        for z in block.z_values():
            for hs in block.slices_at(z):
                flushes += self.write_slice(io, hs.rotate(block.rotation), z)
        logger.debug(
            "Block: %d layer(s), %d write call(s)", len(block.slices), flushes,
        )
        # a block ends where it started
        return rel_origin

    def _write_superblock(
        self, io: TextIO, sb: SuperBlock, rel_origin: pint.Quantity,
    ) -> pint.Quantity:
        # position relative to the super-block origin
        current = -rel_origin
        for child in sb.blocks:
            rotated = child.rotate(sb.rotation)
            child_origin = rotated.origin - current
            current = current + self.write(io, rotated, child_origin)
        return current + rel_origin

    def _write_compiled(
        self, io: TextIO, cg: CompiledGeometry, rel_origin: pint.Quantity,
    ) -> pint.Quantity:
        self.write_stage_move(io, rel_origin)
        self.write_include(io, cg.filepath)
        return rel_origin + cg.displacement
