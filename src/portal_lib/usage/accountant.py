# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import math

from portal_lib.core.error import PortalError
from portal_lib.core.logger import get_logger
from portal_lib.properties.job import Job, UsageRecord
from portal_lib.store.interface import JobStore

logger = get_logger(__name__)


class UsageAccountant:
    """
    Derives and records the billable resource usage of completed jobs.
    """

    def __init__(self, store: JobStore):
        self._store = store

    def account(self, job: Job) -> UsageRecord:
        """
        Compute the usage of a completed job and store it.

        Args:
            job (Job): The job. Its start and end times must be known.

        Returns:
            UsageRecord: The stored usage record.

        Raises:
            PortalError: If the start or end time of the job is not known.
            JobStoreError: If the job already has a usage record.
        """
        record = UsageAccountant.compute(job)
        self._store.addUsageRecord(record)

        logger.info(
            f"Job '{job.id}' used {record.cpu_hours:.2f} CPU-hours and {record.gpu_hours:.2f} GPU-hours."
        )
        return record

    @staticmethod
    def compute(job: Job) -> UsageRecord:
        """
        Compute the usage of a job from its resources and its runtime.

        The runtime is the whole number of seconds between the start and the end of the job.
        CPU-hours count every core of every task on every node, GPU-hours every GPU on every node.

        Raises:
            PortalError: If the start or end time of the job is not known.
        """
        if job.start_time is None or job.end_time is None:
            raise PortalError(
                f"Cannot compute usage of job '{job.id}': start or end time is not known."
            )

        runtime = max(0, math.floor((job.end_time - job.start_time).total_seconds()))
        res = job.resources

        return UsageRecord(
            job_id=job.id,
            user=job.user,
            cpu_hours=res.total_cpus * runtime / 3600,
            gpu_hours=res.total_gpus * runtime / 3600,
            walltime_seconds=runtime,
        )
