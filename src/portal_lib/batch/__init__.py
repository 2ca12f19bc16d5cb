# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Integration of portal with the Slurm batch scheduler.

`portal_lib.batch.interface` defines the abstract `SchedulerGateway`, the
normalized `ExternalStatus` and `QueueInfo` records, and the `GatewayMeta`
registry of transports. `portal_lib.batch.slurm` implements the gateway for
Slurm over a local shell (`SlurmLocal`) or over ssh (`SlurmSSH`).
"""

# import so that these gateways are registered but do not export them from here
from .slurm import SlurmLocal as _SlurmLocal
from .slurm import SlurmSSH as _SlurmSSH

_SlurmLocal, _SlurmSSH
