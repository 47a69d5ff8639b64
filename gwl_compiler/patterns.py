"""Calibration structure generators.

Each function returns geometry (``HatchedSlice``, ``Block`` or
``SuperBlock``) ready to be passed to ``compile_geometry``.  Sizes are
``pint`` length quantities; hatch-line points come out in raw
micrometres, centred on the slice origin.

Common parameters:

    size : pint.Quantity
        Edge length of the hatched square.
    spacing : pint.Quantity
        Distance between neighbouring hatch lines.
    origin : pint.Quantity | None
        Block origin (3-vector).  ``None`` places the block at zero.
    rotation : float | pint.Quantity
        Block rotation about z.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from gwl_compiler.geometry.primitives import Block, HatchedSlice, SuperBlock
from gwl_compiler.geometry.units import LENGTH_UNIT, Q_, to_raw, zero_vector

# tolerance when counting how many pitches fit into a length
_FIT_EPS = 1e-9


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _positive_length(value: Any, name: str) -> float:
    raw = float(to_raw(value, LENGTH_UNIT))
    if raw <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return raw


def _positive_int(value: int, name: str) -> int:
    if int(value) != value or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value}")
    return int(value)


def _steps(length: float, pitch: float) -> int:
    """Number of pitches that fit into *length* (at least zero)."""
    return int(math.floor(length / pitch + _FIT_EPS))


# ---------------------------------------------------------------------------
# Slices
# ---------------------------------------------------------------------------


def hatch_square(
    size: Any,
    spacing: Any,
    serpentine: bool = True,
) -> HatchedSlice:
    """Fill a square with lines parallel to x.

    Lines start at the bottom edge and are ``spacing`` apart.  With
    *serpentine* every other line is scanned right-to-left so the
    beam never travels back across the square between lines.
    """
    s = _positive_length(size, "size")
    d = _positive_length(spacing, "spacing")
    half = s / 2.0
    lines = []
    for k in range(_steps(s, d) + 1):
        y = -half + k * d
        line = ((-half, y), (half, y))
        if serpentine and k % 2 == 1:
            line = line[::-1]
        lines.append(line)
    return HatchedSlice(tuple(lines))


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def square_block(
    size: Any,
    spacing: Any,
    height: Any,
    layer_spacing: Any,
    origin: Optional[Any] = None,
    rotation: Any = 0.0,
) -> Block:
    """Solid square prism -- verify dose and shrinkage.

    Layers are written from ``z = 0`` up to *height* inclusive.
    """
    h = float(to_raw(height, LENGTH_UNIT))
    if h < 0:
        raise ValueError(f"height must not be negative, got {height}")
    dz = _positive_length(layer_spacing, "layer_spacing")
    hs = hatch_square(size, spacing)
    layers = tuple(
        (Q_(k * dz, LENGTH_UNIT), hs) for k in range(_steps(h, dz) + 1)
    )
    return Block(
        layers,
        origin if origin is not None else zero_vector(),
        rotation,
    )


def woodpile(
    size: Any,
    spacing: Any,
    layers: int,
    layer_spacing: Any,
    origin: Optional[Any] = None,
    rotation: Any = 0.0,
) -> Block:
    """Log-pile lattice -- alternate layers hatched at 0 and 90 degrees."""
    n = _positive_int(layers, "layers")
    dz = _positive_length(layer_spacing, "layer_spacing")
    along_x = hatch_square(size, spacing)
    along_y = along_x.rotate(math.pi / 2)
    stack = tuple(
        (Q_(k * dz, LENGTH_UNIT), along_x if k % 2 == 0 else along_y)
        for k in range(n)
    )
    return Block(
        stack,
        origin if origin is not None else zero_vector(),
        rotation,
    )


def block_array(
    block: Block | SuperBlock,
    rows: int,
    cols: int,
    pitch: Any,
    origin: Optional[Any] = None,
    rotation: Any = 0.0,
) -> SuperBlock:
    """Grid of copies of *block* -- dose/focus matrices.

    Copies are written row by row; copy ``(r, c)`` is shifted by
    ``(c * pitch, r * pitch, 0)`` from *block*'s own origin.
    """
    r_n = _positive_int(rows, "rows")
    c_n = _positive_int(cols, "cols")
    p = _positive_length(pitch, "pitch")
    copies = tuple(
        block.translate(Q_([c * p, r * p, 0.0], LENGTH_UNIT))
        for r in range(r_n)
        for c in range(c_n)
    )
    return SuperBlock(
        copies,
        origin if origin is not None else zero_vector(),
        rotation,
    )
