# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from portal_lib.batch.interface import SchedulerGateway
from portal_lib.core.error import JobNotSuitableError
from portal_lib.core.logger import get_logger
from portal_lib.properties.job import Job, JobEvent
from portal_lib.properties.states import EventKind, JobStatus
from portal_lib.store.interface import JobStore

from .transitions import transition

logger = get_logger(__name__)


class Canceller:
    """
    Cancels queued or running jobs on user request.
    """

    # states from which a job can be cancelled
    CANCELLABLE = frozenset({JobStatus.QUEUED, JobStatus.RUNNING})

    def __init__(self, store: JobStore, gateway: SchedulerGateway):
        self._store = store
        self._gateway = gateway

    def ensureSuitable(self, job: Job) -> None:
        """
        Verify that the job can be cancelled.

        Raises:
            JobNotSuitableError: If the job is neither queued nor running.
        """
        if job.status not in Canceller.CANCELLABLE:
            raise JobNotSuitableError(
                f"Job '{job.id}' cannot be cancelled in state {job.status}."
            )

    def cancel(self, job_id: str) -> Job:
        """
        Cancel the job with the given id.

        The cancellation is requested from the scheduler and, once accepted, the job
        is moved to CANCELLED without waiting for the scheduler to terminate it.
        If the job reached a terminal state in the meantime, that state is kept.

        Args:
            job_id (str): Internal identifier of the job.

        Returns:
            Job: The job after the cancellation.

        Raises:
            JobStoreError: If the job does not exist.
            JobNotSuitableError: If the job is neither queued nor running.
            CancelExecError: If the scheduler refused the cancellation.
                The job is left unchanged.
        """
        job = self._store.getJob(job_id)
        self.ensureSuitable(job)

        if job.external_id:
            self._gateway.cancel(job.external_id)
        else:
            logger.warning(f"Job '{job_id}' has no Slurm job id. Cancelling locally.")

        # the poller may have recorded a final state while the request was in flight
        job = self._store.getJob(job_id)
        if transition(job.status, JobStatus.CANCELLED) is None:
            logger.info(
                f"Job '{job_id}' is already {job.status}. Keeping the recorded state."
            )
            return job

        job.status = JobStatus.CANCELLED
        job.status_reason = "Cancelled by user"
        self._store.updateJob(job)
        self._store.appendEvent(
            JobEvent(
                job_id=job.id,
                kind=EventKind.CANCELLED,
                message="Job cancelled by user",
            )
        )

        logger.info(f"Job '{job_id}' cancelled.")
        return job
