"""Geometry consumed by the GWL writer.

Every geometry object is an immutable, slotted dataclass.  The writer only
reads them and calls their pure ``rotate``/``translate`` helpers; nothing
in this module knows about directives or files.

Coordinate conventions
----------------------
- Hatch-line points are **raw micrometre** numbers in the slice's local
  frame; length quantities are reduced to them on construction.  A
  slice carries no z; the enclosing ``Block`` supplies it.
- Block z values and every origin are ``pint`` length quantities.
- Rotations are counter-clockwise about the z axis, in radians (a bare
  number) or any ``pint`` angle quantity, and are stored as float radians.

Nesting
-------
A ``Block`` is a stack of ``(z, HatchedSlice)`` layers placed at its own
origin.  A ``SuperBlock`` groups blocks (or other super-blocks) and
rotates each child's origin and contents by its own rotation before they
are written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

import numpy as np
import pint

from gwl_compiler.geometry.units import (
    LENGTH_UNIT,
    Q_,
    is_zero_angle,
    rotate_vector,
    rotation_matrix,
    to_raw,
    vector3,
    zero_vector,
)

Point = tuple[float, float]
"""One hatch-line vertex in raw micrometres."""

Path = tuple[Point, ...]
"""One continuous scan trajectory; order defines scan direction."""


def _radians(angle: Any) -> float:
    return float(to_raw(angle, "rad"))


def _coord(value: Any) -> Any:
    """Raw micrometres for a hatch coordinate; bare numbers pass through."""
    if not isinstance(value, pint.Quantity):
        return value
    raw = to_raw(value, LENGTH_UNIT)
    return raw.item() if isinstance(raw, np.generic) else raw


# ---------------------------------------------------------------------------
# Slices
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class HatchedSlice:
    """One z-layer of hatch lines.

    Parameters
    ----------
    hatchlines : tuple[Path, ...]
        Ordered scan paths.  Each point must have exactly two entries
        (x, y), either raw micrometre numbers or length quantities
        (converted to raw micrometres here).  Empty paths are allowed.

    Raises
    ------
    ValueError
        If a point does not have two entries.
    pint.DimensionalityError
        If a coordinate quantity is not a length.
    """

    hatchlines: tuple[Path, ...]

    def __post_init__(self) -> None:
        lines = []
        for i, path in enumerate(self.hatchlines):
            pts = []
            for point in path:
                if len(point) != 2:
                    raise ValueError(
                        f"hatch line {i} has a point with {len(point)} "
                        f"entries, expected 2"
                    )
                x, y = point
                pts.append((_coord(x), _coord(y)))
            lines.append(tuple(pts))
        object.__setattr__(self, "hatchlines", tuple(lines))

    @property
    def num_points(self) -> int:
        return sum(len(path) for path in self.hatchlines)

    def rotate(self, angle: Any) -> HatchedSlice:
        """Rotate every point about the slice's local origin."""
        if is_zero_angle(angle):
            return self
        m = rotation_matrix(angle)
        lines = []
        for path in self.hatchlines:
            if not path:
                lines.append(())
                continue
            pts = np.asarray(path, dtype=float) @ m.T
            lines.append(tuple((float(x), float(y)) for x, y in pts))
        return HatchedSlice(tuple(lines))


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Block:
    """A stack of hatched slices written at one origin.

    Parameters
    ----------
    slices : tuple[tuple[pint.Quantity, HatchedSlice], ...]
        ``(z, slice)`` layers in insertion order.  Several layers may
        share a z value.
    origin : pint.Quantity
        3-component length vector.  Defaults to ``[0, 0, 0] um``.
    rotation : float | pint.Quantity
        Rotation applied to every slice when the block is written.
    """

    slices: tuple[tuple[pint.Quantity, HatchedSlice], ...]
    origin: pint.Quantity = field(default_factory=zero_vector)
    rotation: float = 0.0

    def __post_init__(self) -> None:
        layers = []
        for entry in self.slices:
            z, hs = entry
            if not isinstance(hs, HatchedSlice):
                raise ValueError(
                    f"Block layers must be HatchedSlice, got {type(hs).__name__}"
                )
            layers.append((Q_(to_raw(z, LENGTH_UNIT), LENGTH_UNIT), hs))
        object.__setattr__(self, "slices", tuple(layers))
        object.__setattr__(self, "origin", vector3(self.origin))
        object.__setattr__(self, "rotation", _radians(self.rotation))

    def z_values(self) -> list[pint.Quantity]:
        """Distinct layer heights in ascending order."""
        raw = sorted({z.magnitude for z, _ in self.slices})
        return [Q_(z, LENGTH_UNIT) for z in raw]

    def slices_at(self, z: pint.Quantity) -> list[HatchedSlice]:
        """Slices at height *z*, in insertion order."""
        target = to_raw(z, LENGTH_UNIT)
        return [hs for thisz, hs in self.slices if thisz.magnitude == target]

    def rotate(self, angle: Any) -> Block:
        """Rotate the origin about z and add *angle* to the block rotation."""
        return Block(
            self.slices,
            rotate_vector(self.origin, angle),
            self.rotation + _radians(angle),
        )

    def translate(self, displacement: Any) -> Block:
        return Block(self.slices, self.origin + vector3(displacement), self.rotation)


@dataclass(frozen=True, slots=True)
class SuperBlock:
    """An ordered group of blocks sharing a frame.

    Child origins are relative to this super-block's origin.  The
    super-block ``rotation`` turns every child (origin and contents)
    before it is written.
    """

    blocks: tuple[Union[Block, SuperBlock], ...]
    origin: pint.Quantity = field(default_factory=zero_vector)
    rotation: float = 0.0

    def __post_init__(self) -> None:
        blocks = tuple(self.blocks)
        for b in blocks:
            if not isinstance(b, (Block, SuperBlock)):
                raise ValueError(
                    f"SuperBlock children must be Block or SuperBlock, "
                    f"got {type(b).__name__}"
                )
        object.__setattr__(self, "blocks", blocks)
        object.__setattr__(self, "origin", vector3(self.origin))
        object.__setattr__(self, "rotation", _radians(self.rotation))

    def rotate(self, angle: Any) -> SuperBlock:
        return SuperBlock(
            self.blocks,
            rotate_vector(self.origin, angle),
            self.rotation + _radians(angle),
        )

    def translate(self, displacement: Any) -> SuperBlock:
        return SuperBlock(
            self.blocks, self.origin + vector3(displacement), self.rotation,
        )
