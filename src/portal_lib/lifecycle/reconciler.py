# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from portal_lib.batch.interface import ExternalStatus
from portal_lib.core.logger import get_logger
from portal_lib.properties.job import Job, JobEvent
from portal_lib.properties.states import EventKind, JobStatus
from portal_lib.store.interface import JobStore
from portal_lib.usage.accountant import UsageAccountant

from .transitions import transition

logger = get_logger(__name__)


class Reconciler:
    """
    Applies states reported by the scheduler to stored jobs.
    """

    def __init__(self, store: JobStore, accountant: UsageAccountant | None = None):
        """
        Args:
            store (JobStore): Store holding the jobs.
            accountant (UsageAccountant | None): Accountant invoked when a job completes.
                Defaults to an accountant writing into `store`.
        """
        self._store = store
        self._accountant = accountant or UsageAccountant(store)

    def reconcile(self, job: Job, observed: ExternalStatus) -> bool:
        """
        Move the job to the observed state if the state machine permits it.

        The job is re-read from the store before the transition is decided, so that
        a state recorded while the scheduler was being queried (e.g. a cancellation)
        is never overwritten.

        On a transition, the job's status, timestamps, exit code, and status reason
        are updated from the observation (only where the scheduler supplied a value)
        and exactly one event is recorded. If the job has just completed and both of
        its timestamps are known, its usage is accounted.

        The usage record and the event are written before the job itself. If any of
        the writes fails, the stored job keeps its previous state and the next poll
        retries the transition without duplicating the records already written.

        Observations that do not move the job forward change nothing.

        Args:
            job (Job): The job to reconcile.
            observed (ExternalStatus): State reported by the scheduler.

        Returns:
            bool: True if the job changed state, False otherwise.

        Raises:
            JobStoreError: If the job cannot be read or any of the records cannot be written.
        """
        job = self._store.getJob(job.id)
        new_status = transition(job.status, observed.status)
        if new_status is None:
            logger.debug(
                f"Job '{job.id}': no transition from {job.status} to {observed.status}."
            )
            return False

        previous = job.status
        job.status = new_status
        if observed.start_time is not None:
            job.start_time = observed.start_time
        if observed.end_time is not None:
            job.end_time = observed.end_time
        if observed.exit_code is not None:
            job.exit_code = observed.exit_code
        if observed.reason is not None:
            job.status_reason = observed.reason

        if (
            new_status == JobStatus.COMPLETED
            and job.start_time is not None
            and job.end_time is not None
            and self._store.getUsageRecord(job.id) is None
        ):
            self._accountant.account(job)

        kind = EventKind.forStatus(new_status)
        events = self._store.getEvents(job.id)
        if not events or events[-1].kind != kind:
            self._store.appendEvent(
                JobEvent(
                    job_id=job.id,
                    kind=kind,
                    message=observed.reason or f"Job {kind.name.lower()}",
                )
            )

        self._store.updateJob(job)
        logger.info(f"Job '{job.id}' changed state: {previous} -> {new_status}.")
        return True
