# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Job requests submitted by users.

A `JobRequest` is the abstract description of a workload before portal turns
it into a `Job`: what to run, where to run it, and which resources it needs.
Requests are usually loaded from YAML files. Omitted resource fields take the
values from `CFG.request_defaults`, and every request is validated before a
job is created from it.

Example request file:

    name: train-resnet
    queue: gpu
    walltime: "04:00:00"
    nodes: 1
    gpus_per_node: 2
    environment:
      kind: conda
      config:
        env_name: pytorch
    command: python train.py
    arguments: --epochs 100
"""

from dataclasses import dataclass, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Self

import yaml

from portal_lib.core.common import hhmmss_to_seconds, load_yaml_loader
from portal_lib.core.config import CFG
from portal_lib.core.error import PortalError
from portal_lib.core.logger import get_logger

from .environment import Environment, RawEnvironment, environment_from_dict
from .job import Job
from .resources import Resources
from .states import JobStatus

logger = get_logger(__name__)

SafeLoader: type[yaml.SafeLoader] = load_yaml_loader()


@dataclass
class JobRequest:
    """
    Dataclass representing a request to run a job.
    """

    name: str
    command: str
    resources: Resources
    environment: Environment
    arguments: str | None = None
    pre_script: str | None = None
    post_script: str | None = None
    description: str | None = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check that the request describes a job which can be submitted.

        Raises:
            PortalError: If any property of the request is invalid.
        """
        if not self.name or not self.name.strip():
            raise PortalError("Job name must not be empty.")
        if any(c.isspace() for c in self.name):
            raise PortalError(f"Job name '{self.name}' must not contain whitespace.")
        if not self.command or not self.command.strip():
            raise PortalError("Job command must not be empty.")
        if not self.resources.queue or not self.resources.queue.strip():
            raise PortalError("Queue must not be empty.")

        for attr in ("nodes", "tasks_per_node", "cpus_per_task", "mem_per_node_gb"):
            if (value := getattr(self.resources, attr)) < 1:
                raise PortalError(
                    f"Invalid value of '{attr}': {value}. Must be at least 1."
                )

        if self.resources.gpus_per_node < 0:
            raise PortalError(
                f"Invalid value of 'gpus_per_node': {self.resources.gpus_per_node}. Must not be negative."
            )

        if self.resources.walltime < CFG.request_defaults.min_walltime:
            raise PortalError(
                f"Invalid walltime: {self.resources.walltime} seconds. Must be at least {CFG.request_defaults.min_walltime} seconds."
            )

    def toJob(self, job_id: str, user: str) -> Job:
        """
        Create a new job from the request in the SUBMITTED state.

        Args:
            job_id (str): Internal identifier to assign to the job.
            user (str): Name of the submitting user.

        Returns:
            Job: The newly created job.
        """
        return Job(
            id=job_id,
            name=self.name,
            user=user,
            resources=self.resources,
            environment=self.environment,
            command=self.command,
            status=JobStatus.SUBMITTED,
            submission_time=datetime.now(),
            arguments=self.arguments,
            pre_script=self.pre_script,
            post_script=self.post_script,
            description=self.description,
        )

    @classmethod
    def fromFile(cls, file: Path, **overrides: Any) -> Self:
        """
        Load a JobRequest from a YAML file.

        Args:
            file (Path): Path to the YAML request file.
            **overrides: Values replacing those in the file. Values set to None are ignored.

        Returns:
            JobRequest: The validated request.

        Raises:
            PortalError: If the file does not exist, cannot be parsed, or describes an invalid request.
        """
        logger.debug(f"Loading job request from '{file}'.")
        if not file.is_file():
            raise PortalError(f"Job request file '{file}' does not exist.")

        try:
            with file.open("r") as input:
                data = yaml.load(input, Loader=SafeLoader)
        except yaml.YAMLError as e:
            raise PortalError(f"Could not parse the job request file '{file}': {e}.") from e

        if not isinstance(data, dict):
            raise PortalError(f"Job request file '{file}' must contain a mapping.")

        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.fromDict(data)

    @classmethod
    def fromDict(cls, data: dict[str, Any]) -> Self:
        """
        Construct a JobRequest from a flat dictionary.

        Resource fields are read from the top level of the dictionary.
        Walltime may be given in seconds or as a HH:MM:SS string.

        Raises:
            PortalError: If mandatory information is missing or invalid.
        """
        known = {f.name for f in fields(cls)} | {f.name for f in fields(Resources)}
        if unknown := set(data) - known:
            raise PortalError(
                f"Unknown job request properties: {', '.join(sorted(unknown))}."
            )

        for key in ("name", "command", "queue", "walltime"):
            if data.get(key) is None:
                raise PortalError(f"Job request is missing the property '{key}'.")

        defaults = CFG.request_defaults
        try:
            resources = Resources(
                queue=str(data["queue"]),
                walltime=_parse_walltime(data["walltime"]),
                nodes=int(data.get("nodes", defaults.nodes)),
                tasks_per_node=int(data.get("tasks_per_node", defaults.tasks_per_node)),
                cpus_per_task=int(data.get("cpus_per_task", defaults.cpus_per_task)),
                mem_per_node_gb=int(
                    data.get("mem_per_node_gb", defaults.mem_per_node_gb)
                ),
                gpus_per_node=int(data.get("gpus_per_node", defaults.gpus_per_node)),
                priority=int(data.get("priority", defaults.priority)),
            )
        except (TypeError, ValueError) as e:
            raise PortalError(f"Invalid resource property in job request: {e}.") from e

        environment = data.get("environment")
        if environment is None:
            env: Environment = RawEnvironment()
        elif isinstance(environment, dict) and "kind" in environment:
            env = environment_from_dict(environment["kind"], environment.get("config"))
        else:
            raise PortalError(
                "Job request property 'environment' must be a mapping with a 'kind' key."
            )

        return cls(
            name=str(data["name"]),
            command=str(data["command"]),
            resources=resources,
            environment=env,
            arguments=_optional_str(data.get("arguments")),
            pre_script=_optional_str(data.get("pre_script")),
            post_script=_optional_str(data.get("post_script")),
            description=_optional_str(data.get("description")),
        )


def _parse_walltime(value: object) -> int:
    """Convert walltime given in seconds or as HH:MM:SS to seconds."""
    if isinstance(value, str) and ":" in value:
        return hhmmss_to_seconds(value)
    return int(value)  # ty: ignore[invalid-argument-type]


def _optional_str(value: object) -> str | None:
    """Convert a value to string, mapping None and empty strings to None."""
    if value is None:
        return None
    return str(value) or None
