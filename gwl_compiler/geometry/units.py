"""Physical units for geometry passed to the GWL writer.

A single ``pint`` registry is shared by the whole package.  Lengths,
powers and speeds travel as ``pint.Quantity`` objects and are reduced to
raw device numbers **only** at the emission boundary via :func:`to_raw`::

    to_raw(Q_(1.5, "mm"), "um")      # -> 1500.0
    to_raw(Q_(20, "mW"), "mW")       # -> 20 (type preserved, no scaling)
    to_raw(5.0, "um")                # DimensionalityError

Raw scales used by the device:
    - length: micrometres (``um``)
    - power: milliwatts (``mW``)
    - speed: micrometres per second (``um/s``)

Position vectors (origins, displacements, offsets) are always three
components long and are normalised to float micrometres by
:func:`vector3`.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pint

ureg = pint.UnitRegistry()
Q_ = ureg.Quantity

LENGTH_UNIT = "um"
POWER_UNIT = "mW"
SPEED_UNIT = "um/s"


def to_raw(value: Any, unit: str) -> Any:
    """Strip *value* to a bare magnitude expressed in *unit*.

    Parameters
    ----------
    value : pint.Quantity | float
        Quantity to convert.  Bare numbers are dimensionless, so they
        only convert to dimensionless units (e.g. radians).
    unit : str
        Target unit.

    Returns
    -------
    Any
        Magnitude in *unit*.  When *value* is already in *unit* the
        magnitude is returned untouched, keeping integers as integers.

    Raises
    ------
    pint.DimensionalityError
        If *value* does not have the dimension of *unit*.
    """
    q = value if isinstance(value, pint.Quantity) else Q_(value)
    target = ureg.Unit(unit)
    if q.units == target:
        return q.magnitude
    return q.m_as(target)


def vector3(value: pint.Quantity | Sequence[Any]) -> pint.Quantity:
    """Return *value* as a 3-component length vector in float micrometres.

    Parameters
    ----------
    value : pint.Quantity | Sequence
        Either a length quantity wrapping three magnitudes, or a sequence
        of three scalar length quantities (units may differ).

    Raises
    ------
    ValueError
        If there are not exactly three components.
    pint.DimensionalityError
        If any component is not a length.
    """
    if isinstance(value, pint.Quantity):
        mag = np.atleast_1d(np.asarray(value.magnitude))
        if mag.ndim != 1 or mag.shape[0] != 3:
            raise ValueError(
                f"position vector must consist of 3 entries, got shape {mag.shape}"
            )
        raw = np.asarray(to_raw(value, LENGTH_UNIT), dtype=float)
    else:
        items = list(value)
        if len(items) != 3:
            raise ValueError(
                f"position vector must consist of 3 entries, got {len(items)}"
            )
        raw = np.array([to_raw(v, LENGTH_UNIT) for v in items], dtype=float)
    return Q_(raw, LENGTH_UNIT)


def zero_vector() -> pint.Quantity:
    """``[0, 0, 0] um``."""
    return Q_(np.zeros(3), LENGTH_UNIT)


def rotation_matrix(angle: Any) -> np.ndarray:
    """2x2 counter-clockwise rotation matrix for *angle* (radians or angle quantity)."""
    theta = float(to_raw(angle, "rad"))
    c, s = np.cos(theta), np.sin(theta)
    return np.array([[c, -s], [s, c]])


def is_zero_angle(angle: Any) -> bool:
    return float(to_raw(angle, "rad")) == 0.0


def rotate_vector(vec: pint.Quantity, angle: Any) -> pint.Quantity:
    """Rotate a 3-vector about the z axis, leaving z untouched."""
    vec = vector3(vec)
    if is_zero_angle(angle):
        return vec
    raw = vec.m_as(LENGTH_UNIT).copy()
    raw[:2] = rotation_matrix(angle) @ raw[:2]
    return Q_(raw, LENGTH_UNIT)
