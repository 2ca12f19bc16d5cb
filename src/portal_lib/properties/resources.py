# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Structured representation of job resource requirements.

This module defines the `Resources` dataclass, which captures the partition,
node, task, CPU, memory, GPU, walltime, and priority requirements of a job.
"""

from dataclasses import asdict, dataclass
from typing import Self

from portal_lib.core.error import PortalError


@dataclass
class Resources:
    """
    Dataclass representing computational resources requested for a job.
    """

    # Name of the partition (queue) to submit the job to
    queue: str

    # Maximum allowed runtime of the job in seconds
    walltime: int

    # Number of computing nodes to use
    nodes: int = 1

    # Number of tasks to run on each node
    tasks_per_node: int = 1

    # Number of CPU cores per task
    cpus_per_task: int = 1

    # Memory per node in GB
    mem_per_node_gb: int = 4

    # Number of GPUs per node
    gpus_per_node: int = 0

    # Scheduling priority (meaning defined by the scheduler)
    priority: int = 0

    @property
    def total_tasks(self) -> int:
        """Total number of tasks of the job across all nodes."""
        return self.nodes * self.tasks_per_node

    @property
    def total_cpus(self) -> int:
        """Total number of CPU cores allocated to the job."""
        return self.nodes * self.tasks_per_node * self.cpus_per_task

    @property
    def total_gpus(self) -> int:
        """Total number of GPUs allocated to the job."""
        return self.nodes * self.gpus_per_node

    def toDict(self) -> dict[str, object]:
        """Return all fields as a dict."""
        return asdict(self)

    @classmethod
    def fromDict(cls, data: dict[str, object]) -> Self:
        """
        Construct Resources from a dictionary.

        Raises:
            PortalError: If a field is missing or is not an integer where one is required.
        """
        try:
            return cls(
                queue=str(data["queue"]),
                walltime=int(data["walltime"]),  # ty: ignore[invalid-argument-type]
                nodes=int(data["nodes"]),  # ty: ignore[invalid-argument-type]
                tasks_per_node=int(data["tasks_per_node"]),  # ty: ignore[invalid-argument-type]
                cpus_per_task=int(data["cpus_per_task"]),  # ty: ignore[invalid-argument-type]
                mem_per_node_gb=int(data["mem_per_node_gb"]),  # ty: ignore[invalid-argument-type]
                gpus_per_node=int(data["gpus_per_node"]),  # ty: ignore[invalid-argument-type]
                priority=int(data["priority"]),  # ty: ignore[invalid-argument-type]
            )
        except KeyError as e:
            raise PortalError(f"Missing resource property {e}.") from e
        except (TypeError, ValueError) as e:
            raise PortalError(f"Invalid resource property: {e}.") from e
