# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Lifecycle engine of portal jobs.

- `transition`: the pure state-machine function deciding whether an observed
  scheduler state moves a job forward.
- `Reconciler`: applies one observed scheduler state to one stored job,
  recording an event and the job's usage where appropriate.
- `Submitter`: turns a job request into a submitted Slurm job.
- `Canceller`: cancels a queued or running job on user request.
"""

from .canceller import Canceller
from .reconciler import Reconciler
from .submitter import Submitter
from .transitions import transition

__all__ = ["Canceller", "Reconciler", "Submitter", "transition"]
