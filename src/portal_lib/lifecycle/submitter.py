# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import getpass
import uuid
from pathlib import Path

from portal_lib.batch.interface import SchedulerGateway
from portal_lib.core.config import CFG, WorkspaceSettings
from portal_lib.core.error import PortalError
from portal_lib.core.logger import get_logger
from portal_lib.properties.job import Job, JobEvent
from portal_lib.properties.request import JobRequest
from portal_lib.properties.states import EventKind, JobStatus
from portal_lib.script.builder import ScriptBuilder
from portal_lib.store.interface import JobStore

logger = get_logger(__name__)


class Submitter:
    """
    Turns job requests into jobs submitted to the scheduler.
    """

    def __init__(
        self,
        store: JobStore,
        gateway: SchedulerGateway,
        user: str | None = None,
        workspace: WorkspaceSettings | None = None,
    ):
        """
        Args:
            store (JobStore): Store receiving the new jobs.
            gateway (SchedulerGateway): Gateway used to submit the scripts.
            user (str | None): Name of the submitting user. Defaults to the current user.
            workspace (WorkspaceSettings | None): Workspace holding the job directories.
                Defaults to `CFG.workspace`.
        """
        self._store = store
        self._gateway = gateway
        self._user = user or getpass.getuser()
        self._workspace = workspace or CFG.workspace

    def submit(self, request: JobRequest) -> Job:
        """
        Create a job from the request and submit it to the scheduler.

        The job is stored as SUBMITTED, its working directory is created, the batch
        script is written into it and submitted. On success, the job becomes QUEUED
        and a SUBMITTED event is recorded. If any step after the job was stored fails,
        for any reason, the job becomes FAILED, a FAILED event is recorded, and the
        error is re-raised.

        Args:
            request (JobRequest): The validated job request.

        Returns:
            Job: The submitted job.

        Raises:
            PortalError: If the job could not be submitted.
        """
        job = request.toJob(uuid.uuid4().hex, self._user)
        self._store.createJob(job)
        logger.debug(f"Created job '{job.id}' ({job.name}) for user '{job.user}'.")

        try:
            job.working_directory = self._prepareWorkingDirectory(job)
            self._store.updateJob(job)

            script = self._writeScript(job)
            external_id = self._gateway.submit(script)
        except PortalError as e:
            self._markFailed(job, str(e))
            raise
        except Exception as e:
            self._markFailed(job, f"Unexpected error: {e}")
            raise

        job.external_id = external_id
        job.status = JobStatus.QUEUED
        self._store.updateJob(job)
        self._store.appendEvent(
            JobEvent(
                job_id=job.id,
                kind=EventKind.SUBMITTED,
                message=f"Job submitted to Slurm with ID {external_id}",
            )
        )

        logger.info(f"Job '{job.id}' submitted to Slurm as '{external_id}'.")
        return job

    def _prepareWorkingDirectory(self, job: Job) -> Path:
        """
        Create the working directory of the job, writable by the scheduler's user.

        Raises:
            PortalError: If the directory cannot be created.
        """
        directory = self._workspace.jobDirectory(job.user, job.id)
        try:
            directory.mkdir(parents=True, exist_ok=True)
            directory.chmod(0o777)
        except OSError as e:
            raise PortalError(
                f"Could not create working directory '{directory}': {e}."
            ) from e

        logger.debug(f"Created working directory '{directory}'.")
        return directory

    def _writeScript(self, job: Job) -> Path:
        """
        Render the batch script of the job into its working directory.

        Raises:
            PortalError: If the script cannot be written.
        """
        script = job.working_directory / self._workspace.script_name  # ty: ignore[unsupported-operator]
        content = ScriptBuilder.render(job)
        try:
            script.write_text(content, encoding="utf-8")
            script.chmod(0o755)
        except OSError as e:
            raise PortalError(f"Could not write script '{script}': {e}.") from e

        logger.debug(f"Written batch script '{script}'.")
        return script

    def _markFailed(self, job: Job, reason: str) -> None:
        """
        Record the failure of a submission.
        """
        job.status = JobStatus.FAILED
        job.status_reason = reason
        self._store.updateJob(job)
        self._store.appendEvent(
            JobEvent(
                job_id=job.id,
                kind=EventKind.FAILED,
                message=f"Job submission failed: {reason}",
            )
        )
        logger.debug(f"Submission of job '{job.id}' failed: {reason}")
