# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import asdict, dataclass
from datetime import datetime

import yaml

from portal_lib.core.common import load_yaml_dumper
from portal_lib.properties.states import JobStatus

Dumper: type[yaml.Dumper] = load_yaml_dumper()

# compact partition/node states in which a queue accepts and runs jobs
AVAILABLE_QUEUE_STATES = {"up", "idle", "mix", "mixed", "alloc", "allocated"}


@dataclass(frozen=True)
class ExternalStatus:
    """
    State of a job as reported by the scheduler, mapped onto portal states.

    Timestamps, exit code, and reason are only set if the scheduler reported them.
    """

    status: JobStatus
    start_time: datetime | None = None
    end_time: datetime | None = None
    exit_code: int | None = None
    reason: str | None = None


@dataclass(frozen=True)
class QueueInfo:
    """
    Summary of a single scheduler partition.
    """

    # Name of the partition
    name: str

    # Compact state of the partition as reported by the scheduler (e.g. 'up', 'drain')
    state: str

    # Number of nodes in the partition
    nodes: int

    # Number of CPUs per node
    cpus: int

    def isAvailable(self) -> bool:
        """Check whether the partition accepts and runs jobs."""
        return self.state.lower().rstrip("*") in AVAILABLE_QUEUE_STATES

    def toYaml(self) -> str:
        """Serialize the queue information to a YAML string."""
        return yaml.dump(
            asdict(self), default_flow_style=False, sort_keys=False, Dumper=Dumper
        )
