# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Records describing jobs and their history.

This module defines the `Job` dataclass (the central entity tracked by portal),
the append-only `JobEvent` log entry, and the immutable `UsageRecord` derived
once a job completes. All three serialize to and from plain dictionaries
suitable for YAML.

These classes focus strictly on data representation and serialization;
lifecycle logic is implemented in `portal_lib.lifecycle`.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Self

import yaml

from portal_lib.core.common import load_yaml_dumper
from portal_lib.core.error import PortalError
from portal_lib.core.logger import get_logger

from .environment import Environment, environment_from_dict, environment_to_dict
from .resources import Resources
from .states import EventKind, JobStatus

logger = get_logger(__name__)

Dumper: type[yaml.Dumper] = load_yaml_dumper()


@dataclass
class Job:
    """
    Dataclass storing information about a job.
    """

    # Internal identifier of the job
    id: str

    # Name of the job
    name: str

    # Name of the user who submitted the job
    user: str

    # Resources requested for the job
    resources: Resources

    # Environment the command is executed in
    environment: Environment

    # Command to execute
    command: str

    # Job state according to portal
    status: JobStatus

    # Job submission timestamp
    submission_time: datetime

    # Arguments appended to the command
    arguments: str | None = None

    # Shell snippet executed before the command
    pre_script: str | None = None

    # Shell snippet executed after the command
    post_script: str | None = None

    # Free-text description of the job
    description: str | None = None

    # Directory the job runs in (assigned once during submission)
    working_directory: Path | None = None

    # Job identifier assigned by the scheduler (set only after successful submission)
    external_id: str | None = None

    # Human-readable reason for the current state
    status_reason: str | None = None

    # Time the job started running
    start_time: datetime | None = None

    # Time the job reached a terminal state
    end_time: datetime | None = None

    # Exit code reported by the scheduler
    exit_code: int | None = None

    def toDict(self) -> dict[str, object]:
        """
        Convert the Job into a dictionary of YAML-friendly values.

        Fields set to None are omitted.
        """
        result: dict[str, object] = {
            "id": self.id,
            "name": self.name,
            "user": self.user,
            "status": str(self.status),
            "submission_time": self.submission_time.isoformat(),
            "resources": self.resources.toDict(),
            "environment": environment_to_dict(self.environment),
            "command": self.command,
        }

        optional = {
            "arguments": self.arguments,
            "pre_script": self.pre_script,
            "post_script": self.post_script,
            "description": self.description,
            "working_directory": str(self.working_directory)
            if self.working_directory
            else None,
            "external_id": self.external_id,
            "status_reason": self.status_reason,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "exit_code": self.exit_code,
        }
        result.update({k: v for k, v in optional.items() if v is not None})

        return result

    @classmethod
    def fromDict(cls, data: dict[str, object]) -> Self:
        """
        Construct a Job from a dictionary produced by `toDict`.

        Raises:
            PortalError: If mandatory information is missing or invalid.
        """
        try:
            env = data["environment"]
            working_directory = data.get("working_directory")

            return cls(
                id=str(data["id"]),
                name=str(data["name"]),
                user=str(data["user"]),
                resources=Resources.fromDict(data["resources"]),  # ty: ignore[invalid-argument-type]
                environment=environment_from_dict(env["kind"], env.get("config")),  # ty: ignore[not-subscriptable, possibly-missing-attribute]
                command=str(data["command"]),
                status=JobStatus.fromStr(str(data["status"])),
                submission_time=_to_datetime(data["submission_time"]),  # ty: ignore[invalid-argument-type]
                arguments=data.get("arguments"),  # ty: ignore[invalid-argument-type]
                pre_script=data.get("pre_script"),  # ty: ignore[invalid-argument-type]
                post_script=data.get("post_script"),  # ty: ignore[invalid-argument-type]
                description=data.get("description"),  # ty: ignore[invalid-argument-type]
                working_directory=Path(str(working_directory))
                if working_directory
                else None,
                external_id=str(data["external_id"])
                if data.get("external_id") is not None
                else None,
                status_reason=data.get("status_reason"),  # ty: ignore[invalid-argument-type]
                start_time=_to_datetime(data.get("start_time")),
                end_time=_to_datetime(data.get("end_time")),
                exit_code=data.get("exit_code"),  # ty: ignore[invalid-argument-type]
            )
        except KeyError as e:
            raise PortalError(f"Job record is missing the property {e}.") from e
        except (TypeError, ValueError) as e:
            raise PortalError(f"Invalid job record: {e}") from e

    def toYaml(self) -> str:
        """
        Serialize the Job to a YAML string.
        """
        return yaml.dump(
            self.toDict(), default_flow_style=False, sort_keys=False, Dumper=Dumper
        )


@dataclass(frozen=True)
class JobEvent:
    """
    Append-only log entry recording a state change of a job.
    """

    job_id: str
    kind: EventKind
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def toDict(self) -> dict[str, object]:
        return {
            "job_id": self.job_id,
            "kind": str(self.kind),
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def fromDict(cls, data: dict[str, object]) -> Self:
        """
        Construct a JobEvent from a dictionary produced by `toDict`.

        Raises:
            PortalError: If mandatory information is missing or invalid.
        """
        try:
            return cls(
                job_id=str(data["job_id"]),
                kind=EventKind.fromStr(str(data["kind"])),
                message=str(data["message"]),
                timestamp=_to_datetime(data["timestamp"]),  # ty: ignore[invalid-argument-type]
            )
        except KeyError as e:
            raise PortalError(f"Job event is missing the property {e}.") from e
        except (TypeError, ValueError) as e:
            raise PortalError(f"Invalid job event: {e}") from e


@dataclass(frozen=True)
class UsageRecord:
    """
    Billable resource consumption of a completed job.
    """

    job_id: str
    user: str
    cpu_hours: float
    gpu_hours: float
    walltime_seconds: int

    def toDict(self) -> dict[str, object]:
        return {
            "job_id": self.job_id,
            "user": self.user,
            "cpu_hours": self.cpu_hours,
            "gpu_hours": self.gpu_hours,
            "walltime_seconds": self.walltime_seconds,
        }

    @classmethod
    def fromDict(cls, data: dict[str, object]) -> Self:
        """
        Construct a UsageRecord from a dictionary produced by `toDict`.

        Raises:
            PortalError: If mandatory information is missing or invalid.
        """
        try:
            return cls(
                job_id=str(data["job_id"]),
                user=str(data["user"]),
                cpu_hours=float(data["cpu_hours"]),  # ty: ignore[invalid-argument-type]
                gpu_hours=float(data["gpu_hours"]),  # ty: ignore[invalid-argument-type]
                walltime_seconds=int(data["walltime_seconds"]),  # ty: ignore[invalid-argument-type]
            )
        except KeyError as e:
            raise PortalError(f"Usage record is missing the property {e}.") from e
        except (TypeError, ValueError) as e:
            raise PortalError(f"Invalid usage record: {e}") from e


def _to_datetime(value: object) -> datetime | None:
    """
    Convert an ISO timestamp (or a datetime parsed by YAML) into a datetime.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
