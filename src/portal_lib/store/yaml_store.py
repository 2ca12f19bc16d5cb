# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Job store backed by YAML files.

Layout of the store directory:

    <root>/jobs/<job id>.yaml     current record of the job
    <root>/events/<job id>.yaml   list of the job's events, oldest first
    <root>/usage/<job id>.yaml    usage record of the job (if it completed)

Every write goes to a temporary file in the target directory which then
atomically replaces the original, so readers never observe a partially
written file.
"""

import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

import yaml

from portal_lib.core.common import load_yaml_dumper, load_yaml_loader
from portal_lib.core.error import JobStoreError, PortalError
from portal_lib.core.logger import get_logger
from portal_lib.properties.job import Job, JobEvent, UsageRecord
from portal_lib.properties.states import JobStatus

from .interface import JobStore

logger = get_logger(__name__)

SafeLoader: type[yaml.SafeLoader] = load_yaml_loader()
Dumper: type[yaml.Dumper] = load_yaml_dumper()


class YamlJobStore(JobStore):
    """
    Job store keeping each record in its own YAML file.
    """

    def __init__(self, root: Path):
        """
        Args:
            root (Path): Directory of the store. Created on the first write.
        """
        self._root = root
        self._jobs_dir = root / "jobs"
        self._events_dir = root / "events"
        self._usage_dir = root / "usage"

    @property
    def root(self) -> Path:
        """Directory of the store."""
        return self._root

    def createJob(self, job: Job) -> None:
        file = self._jobFile(job.id)
        if file.exists():
            raise JobStoreError(f"Job '{job.id}' already exists.")

        logger.debug(f"Creating job '{job.id}' in '{file}'.")
        YamlJobStore._write(file, job.toDict())

    def getJob(self, job_id: str) -> Job:
        file = self._jobFile(job_id)
        if not file.is_file():
            raise JobStoreError(f"Job '{job_id}' does not exist.")

        data = YamlJobStore._read(file)
        if not isinstance(data, dict):
            raise JobStoreError(f"Job file '{file}' does not contain a mapping.")

        try:
            return Job.fromDict(data)
        except PortalError as e:
            raise JobStoreError(f"Could not load job '{job_id}': {e}") from e

    def updateJob(self, job: Job) -> None:
        file = self._jobFile(job.id)
        if not file.is_file():
            raise JobStoreError(f"Cannot update job '{job.id}': job does not exist.")

        logger.debug(f"Updating job '{job.id}' (status: {job.status}).")
        YamlJobStore._write(file, job.toDict())

    def getJobs(self, statuses: Iterable[JobStatus] | None = None) -> list[Job]:
        if not self._jobs_dir.is_dir():
            return []

        wanted = set(statuses) if statuses is not None else None
        jobs = []
        for file in sorted(self._jobs_dir.glob("*.yaml")):
            try:
                job = self.getJob(file.stem)
            except JobStoreError as e:
                logger.warning(f"Skipping unreadable job record '{file}': {e}")
                continue

            if wanted is None or job.status in wanted:
                jobs.append(job)

        jobs.sort(key=lambda job: job.submission_time)
        return jobs

    def appendEvent(self, event: JobEvent) -> None:
        file = self._eventsFile(event.job_id)
        events = YamlJobStore._read(file) if file.is_file() else []
        if not isinstance(events, list):
            raise JobStoreError(f"Event file '{file}' does not contain a list.")

        events.append(event.toDict())
        logger.debug(f"Recording event {event.kind} for job '{event.job_id}'.")
        YamlJobStore._write(file, events)

    def getEvents(self, job_id: str) -> list[JobEvent]:
        file = self._eventsFile(job_id)
        if not file.is_file():
            return []

        events = YamlJobStore._read(file)
        if not isinstance(events, list):
            raise JobStoreError(f"Event file '{file}' does not contain a list.")

        try:
            return [JobEvent.fromDict(e) for e in events]
        except PortalError as e:
            raise JobStoreError(f"Could not load events of job '{job_id}': {e}") from e

    def addUsageRecord(self, record: UsageRecord) -> None:
        file = self._usageFile(record.job_id)
        if file.exists():
            raise JobStoreError(f"Job '{record.job_id}' already has a usage record.")

        logger.debug(f"Recording usage of job '{record.job_id}'.")
        YamlJobStore._write(file, record.toDict())

    def getUsageRecord(self, job_id: str) -> UsageRecord | None:
        file = self._usageFile(job_id)
        if not file.is_file():
            return None

        data = YamlJobStore._read(file)
        if not isinstance(data, dict):
            raise JobStoreError(f"Usage file '{file}' does not contain a mapping.")

        try:
            return UsageRecord.fromDict(data)
        except PortalError as e:
            raise JobStoreError(f"Could not load usage of job '{job_id}': {e}") from e

    def _jobFile(self, job_id: str) -> Path:
        return self._jobs_dir / YamlJobStore._fileName(job_id)

    def _eventsFile(self, job_id: str) -> Path:
        return self._events_dir / YamlJobStore._fileName(job_id)

    def _usageFile(self, job_id: str) -> Path:
        return self._usage_dir / YamlJobStore._fileName(job_id)

    @staticmethod
    def _fileName(job_id: str) -> str:
        """
        Return the name of the file storing a record of the job.

        Raises:
            JobStoreError: If the job id cannot be used as a file name.
        """
        if not job_id or job_id in {".", ".."} or "/" in job_id or "\\" in job_id:
            raise JobStoreError(f"Invalid job id '{job_id}'.")
        return f"{job_id}.yaml"

    @staticmethod
    def _read(file: Path) -> object:
        """
        Load the content of a YAML file.

        Raises:
            JobStoreError: If the file cannot be read or parsed.
        """
        try:
            with file.open("r", encoding="utf-8") as input:
                return yaml.load(input, Loader=SafeLoader)
        except yaml.YAMLError as e:
            raise JobStoreError(f"Could not parse '{file}': {e}.") from e
        except OSError as e:
            raise JobStoreError(f"Could not read '{file}': {e}.") from e

    @staticmethod
    def _write(file: Path, data: object) -> None:
        """
        Atomically replace the content of a YAML file.

        The temporary file is removed if the write fails.

        Raises:
            JobStoreError: If the file cannot be written.
        """
        try:
            file.parent.mkdir(parents=True, exist_ok=True)
            output = tempfile.NamedTemporaryFile(
                "w",
                dir=file.parent,
                prefix=f".{file.stem}.",
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            )
        except OSError as e:
            raise JobStoreError(f"Could not write '{file}': {e}.") from e

        tmp = Path(output.name)
        try:
            with output:
                yaml.dump(
                    data,
                    output,
                    default_flow_style=False,
                    sort_keys=False,
                    Dumper=Dumper,
                )
            os.replace(tmp, file)
        except (OSError, yaml.YAMLError) as e:
            tmp.unlink(missing_ok=True)
            raise JobStoreError(f"Could not write '{file}': {e}.") from e
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
