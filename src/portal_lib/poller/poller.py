# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from portal_lib.batch.interface import SchedulerGateway
from portal_lib.core.config import CFG
from portal_lib.core.error import PortalError
from portal_lib.core.logger import get_logger
from portal_lib.lifecycle.reconciler import Reconciler
from portal_lib.properties.job import Job
from portal_lib.properties.states import JobStatus
from portal_lib.store.interface import JobStore

logger = get_logger(__name__, show_time=True)


@dataclass
class PollSummary:
    """
    Outcome of a single poll cycle.
    """

    # Number of jobs queried
    checked: int = 0

    # Number of jobs that changed state
    updated: int = 0

    # Number of active jobs without a Slurm job id
    skipped: int = 0

    # Number of jobs whose state could not be obtained or applied
    failed: int = 0

    def __str__(self) -> str:
        return f"checked {self.checked}, updated {self.updated}, skipped {self.skipped}, failed {self.failed}"


class StatusPoller:
    """
    Periodically reconciles the states of unfinished jobs with the scheduler.
    """

    def __init__(
        self,
        store: JobStore,
        gateway: SchedulerGateway,
        reconciler: Reconciler | None = None,
        interval: float | None = None,
        max_workers: int | None = None,
    ):
        """
        Args:
            store (JobStore): Store holding the jobs.
            gateway (SchedulerGateway): Gateway used to query the scheduler.
            reconciler (Reconciler | None): Reconciler applying the observed states.
                Defaults to a reconciler over `store`.
            interval (float | None): Seconds between the starts of two cycles.
                Defaults to `CFG.poller.interval`.
            max_workers (int | None): Maximal number of concurrent queries.
                Defaults to `CFG.poller.max_workers`.
        """
        self._store = store
        self._gateway = gateway
        self._reconciler = reconciler or Reconciler(store)
        self._interval = interval if interval is not None else CFG.poller.interval
        self._max_workers = max_workers or CFG.poller.max_workers
        self._stop_event = threading.Event()

    def runCycle(self) -> PollSummary:
        """
        Query the scheduler for all unfinished jobs and apply the answers.

        Jobs are queried concurrently. A failure for one job is logged
        and does not affect the others.

        Returns:
            PollSummary: Counts of the processed jobs.
        """
        summary = PollSummary()
        jobs = self._store.getJobs(JobStatus.active())
        logger.debug(f"Found {len(jobs)} active jobs to poll.")

        pollable = []
        for job in jobs:
            if job.external_id:
                pollable.append(job)
            else:
                logger.debug(f"Skipping job '{job.id}': it has no Slurm job id.")
                summary.skipped += 1

        if not pollable:
            return summary

        with ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(pollable))
        ) as executor:
            futures: dict[Future[bool], Job] = {
                executor.submit(self._pollJob, job): job for job in pollable
            }

            for future in as_completed(futures):
                job = futures[future]
                summary.checked += 1
                try:
                    if future.result():
                        summary.updated += 1
                except PortalError as e:
                    logger.warning(f"Could not update job '{job.id}': {e}")
                    summary.failed += 1
                except Exception as e:
                    logger.error(
                        f"Unexpected error when updating job '{job.id}': {e}",
                        exc_info=True,
                    )
                    summary.failed += 1

        logger.debug(f"Poll cycle finished: {summary}.")
        return summary

    def run(self, cycles: int | None = None) -> None:
        """
        Run poll cycles every `interval` seconds.

        Cycles never overlap: if a cycle takes longer than the interval,
        the next one starts right after it.

        Args:
            cycles (int | None): Number of cycles to run. If None, runs until `stop` is called.
        """
        logger.info(
            f"Polling the scheduler every {self._interval} seconds using {self._max_workers} workers."
        )

        completed = 0
        while not self._stop_event.is_set():
            started = time.monotonic()
            try:
                summary = self.runCycle()
                if summary.updated or summary.failed:
                    logger.info(f"Poll cycle: {summary}.")
            except PortalError as e:
                logger.error(f"Poll cycle failed: {e}")

            completed += 1
            if cycles is not None and completed >= cycles:
                break

            remaining = self._interval - (time.monotonic() - started)
            self._stop_event.wait(max(0.0, remaining))

    def stop(self) -> None:
        """
        Request the poller to stop after the current cycle.
        """
        self._stop_event.set()

    def _pollJob(self, job: Job) -> bool:
        """
        Query the state of a single job and apply it.

        Returns:
            bool: True if the job changed state.
        """
        observed = self._gateway.queryStatus(job.external_id)  # ty: ignore[invalid-argument-type]
        logger.debug(f"Job '{job.id}' (Slurm '{job.external_id}') reported as {observed.status}.")
        return self._reconciler.reconcile(job, observed)
