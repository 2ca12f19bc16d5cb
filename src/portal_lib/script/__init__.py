# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Rendering of Slurm batch scripts.

`ScriptBuilder` translates a `Job` into the text of a batch script: the
`#SBATCH` resource directives, the environment setup, and the commands to run.
Rendering is deterministic and performs no I/O.
"""

from .builder import ScriptBuilder

__all__ = ["ScriptBuilder"]
