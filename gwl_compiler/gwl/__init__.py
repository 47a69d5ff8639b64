"""
GWL generation module.

Writes geometry as relative-motion GWL directives, builds compiled
scripts and jobs, and sequences jobs at global positions.
"""

from gwl_compiler.gwl.builders import compile_geometry, compile_job, multijob
from gwl_compiler.gwl.records import CompiledGeometry, GWLJob, translate
from gwl_compiler.gwl.writer import GWLError, GWLWriter

__all__ = [
    "CompiledGeometry",
    "GWLError",
    "GWLJob",
    "GWLWriter",
    "compile_geometry",
    "compile_job",
    "multijob",
    "translate",
]
