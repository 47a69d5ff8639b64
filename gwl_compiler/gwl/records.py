"""Handles to GWL scripts that have already been written to disk.

``CompiledGeometry`` remembers where a script was declared to start
(``origin``) and how far the stage ends up after running it
(``displacement``).  Because every compiled script only moves the stage
relatively, relocating one never rewrites the file: :func:`translate`
just returns a record with a shifted origin.

``GWLJob`` is a complete job script; it only keeps its file reference.

File references are opaque strings.  They are written verbatim into
``include`` directives and resolved by the instrument, not here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pint

from gwl_compiler.geometry.units import vector3


@dataclass(frozen=True, slots=True)
class CompiledGeometry:
    """A compiled GWL script usable as a geometry node.

    Parameters
    ----------
    origin : pint.Quantity
        3-component length vector where the script should start.
    filepath : str
        Reference used in ``include`` directives.
    displacement : pint.Quantity
        Net 3-component stage motion caused by running the script.
    """

    origin: pint.Quantity
    filepath: str
    displacement: pint.Quantity

    def __post_init__(self) -> None:
        try:
            origin = vector3(self.origin)
        except ValueError as exc:
            raise ValueError(f"origin must consist of 3 entries: {exc}") from exc
        try:
            displacement = vector3(self.displacement)
        except ValueError as exc:
            raise ValueError(
                f"displacement must consist of 3 entries: {exc}"
            ) from exc
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "filepath", str(self.filepath))
        object.__setattr__(self, "displacement", displacement)

    def translate(self, displacement: Any) -> CompiledGeometry:
        return translate(self, displacement)


@dataclass(frozen=True, slots=True)
class GWLJob:
    """A job script ready to be placed by :func:`~gwl_compiler.gwl.builders.multijob`."""

    filepath: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "filepath", str(self.filepath))


def translate(cg: CompiledGeometry, displacement: Any) -> CompiledGeometry:
    """Move the stage by *displacement* before running *cg*.

    Only the declared origin changes; the file and its net displacement
    are untouched.
    """
    return CompiledGeometry(
        cg.origin + vector3(displacement), cg.filepath, cg.displacement,
    )
