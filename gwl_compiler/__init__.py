"""
GWL Compiler Package.

Converts hierarchical, physically-scaled geometry into GWL control scripts
for a direct-laser-writing instrument. Scripts only ever move the stage by
relative deltas, so compiled scripts can be chained and relocated without
absolute-coordinate bookkeeping.

Subpackages:
    geometry: Units, hatched slices, blocks and nested blocks
    gwl: Directive writer, compiled scripts, jobs and multi-job sequencing
    configs: Device configuration loading and validation
    utils: Logging setup and filesystem helpers
    scripts: Command-line entry points
"""

__all__ = ["geometry", "gwl", "configs", "utils", "patterns", "scripts"]
