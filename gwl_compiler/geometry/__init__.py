"""
Geometry module.

Unit-carrying geometry handed to the GWL writer: hatched slices, blocks
of slices and nested super-blocks.  All objects are immutable.
"""

from gwl_compiler.geometry.primitives import (
    Block,
    HatchedSlice,
    Path,
    Point,
    SuperBlock,
)
from gwl_compiler.geometry.units import Q_, to_raw, ureg, vector3, zero_vector

__all__ = [
    "Block",
    "HatchedSlice",
    "Path",
    "Point",
    "Q_",
    "SuperBlock",
    "to_raw",
    "ureg",
    "vector3",
    "zero_vector",
]
