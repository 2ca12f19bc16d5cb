# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from abc import ABC, abstractmethod
from collections.abc import Iterable

from portal_lib.core.error import JobStoreError
from portal_lib.properties.job import Job, JobEvent, UsageRecord
from portal_lib.properties.states import JobStatus


class JobStore(ABC):
    """
    Abstract base class for storages of jobs and their history.

    Jobs are only ever addressed by their id. Events are append-only and
    at most one usage record exists per job.

    All methods raise JobStoreError when encountering an error.
    """

    @abstractmethod
    def createJob(self, job: Job) -> None:
        """
        Store a new job.

        Raises:
            JobStoreError: If a job with the same id already exists.
        """

    @abstractmethod
    def getJob(self, job_id: str) -> Job:
        """
        Load the job with the given id.

        Raises:
            JobStoreError: If the job does not exist or cannot be read.
        """

    @abstractmethod
    def updateJob(self, job: Job) -> None:
        """
        Overwrite the stored record of an existing job.

        Raises:
            JobStoreError: If the job does not exist.
        """

    @abstractmethod
    def getJobs(self, statuses: Iterable[JobStatus] | None = None) -> list[Job]:
        """
        Load all stored jobs, optionally only those in the given states.

        Jobs are ordered by submission time. Records that cannot be read
        are skipped with a warning.
        """

    @abstractmethod
    def appendEvent(self, event: JobEvent) -> None:
        """Append an event to the event log of its job."""

    @abstractmethod
    def getEvents(self, job_id: str) -> list[JobEvent]:
        """Load the event log of a job in the order the events were appended."""

    @abstractmethod
    def addUsageRecord(self, record: UsageRecord) -> None:
        """
        Store the usage record of a job.

        Raises:
            JobStoreError: If the job already has a usage record.
        """

    @abstractmethod
    def getUsageRecord(self, job_id: str) -> UsageRecord | None:
        """Load the usage record of a job or None if it has none."""

    def resolveJob(self, job_id: str) -> Job:
        """
        Load a job by its full id or by an unambiguous prefix of it.

        Raises:
            JobStoreError: If no job or more than one job matches.
        """
        if not job_id:
            raise JobStoreError("Job id must not be empty.")

        matches = [job for job in self.getJobs() if job.id.startswith(job_id)]

        if len(matches) == 1:
            return matches[0]
        if not matches:
            raise JobStoreError(f"Job '{job_id}' does not exist.")
        if exact := [job for job in matches if job.id == job_id]:
            return exact[0]

        raise JobStoreError(
            f"Job id '{job_id}' is ambiguous: matches {len(matches)} jobs."
        )
