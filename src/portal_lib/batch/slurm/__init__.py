# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Slurm backend for portal: job submission, cancellation, and state queries.

It provides:

- The `Slurm` gateway, translating portal operations into `sbatch`, `scancel`,
  `squeue`, `sacct`, and `sinfo` calls and parsing their output.

- Two transports registered with `GatewayMeta`: `SlurmLocal` (name 'local'),
  running the commands in a local shell, and `SlurmSSH` (name 'ssh'), running
  them on a remote login node.
"""

from .local import SlurmLocal
from .slurm import Slurm
from .ssh import SlurmSSH

__all__ = [
    "Slurm",
    "SlurmLocal",
    "SlurmSSH",
]
