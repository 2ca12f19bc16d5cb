# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from portal_lib.batch.interface import ExternalStatus
from portal_lib.core.error import JobStoreError
from portal_lib.lifecycle import Reconciler
from portal_lib.properties.environment import RawEnvironment
from portal_lib.properties.job import Job
from portal_lib.properties.resources import Resources
from portal_lib.properties.states import EventKind, JobStatus
from portal_lib.store import YamlJobStore

START = datetime(2025, 3, 1, 12, 0, 0)
END = datetime(2025, 3, 1, 13, 0, 0)


@pytest.fixture
def store(tmp_path) -> YamlJobStore:
    return YamlJobStore(tmp_path)


@pytest.fixture
def job(store) -> Job:
    job = Job(
        id="abc",
        name="train",
        user="alice",
        resources=Resources(queue="cpu", walltime=7200, nodes=2, cpus_per_task=4),
        environment=RawEnvironment(),
        command="hostname",
        status=JobStatus.QUEUED,
        submission_time=datetime(2025, 3, 1, 11, 0, 0),
        external_id="55021",
    )
    store.createJob(job)
    return job


def test_reconcile_running(store, job):
    changed = Reconciler(store).reconcile(
        job, ExternalStatus(JobStatus.RUNNING, start_time=START)
    )

    assert changed
    stored = store.getJob("abc")
    assert stored.status == JobStatus.RUNNING
    assert stored.start_time == START
    events = store.getEvents("abc")
    assert [e.kind for e in events] == [EventKind.STARTED]
    assert events[0].message == "Job started"


def test_reconcile_same_state_is_noop(store, job):
    store_spy = MagicMock(wraps=store)

    changed = Reconciler(store_spy).reconcile(job, ExternalStatus(JobStatus.QUEUED))

    assert not changed
    store_spy.updateJob.assert_not_called()
    store_spy.appendEvent.assert_not_called()


def test_reconcile_backwards_is_ignored(store, job):
    job.status = JobStatus.RUNNING
    store.updateJob(job)

    assert not Reconciler(store).reconcile(job, ExternalStatus(JobStatus.QUEUED))
    assert store.getJob("abc").status == JobStatus.RUNNING
    assert store.getEvents("abc") == []


def test_reconcile_failed_uses_reason_as_message(store, job):
    observed = ExternalStatus(
        JobStatus.FAILED,
        start_time=START,
        end_time=END,
        exit_code=3,
        reason="Slurm reported state 'FAILED'.",
    )

    assert Reconciler(store).reconcile(job, observed)

    stored = store.getJob("abc")
    assert stored.exit_code == 3
    assert stored.status_reason == "Slurm reported state 'FAILED'."
    assert store.getEvents("abc")[0].message == "Slurm reported state 'FAILED'."
    assert store.getUsageRecord("abc") is None


def test_reconcile_keeps_known_values_when_not_reported(store, job):
    job.status = JobStatus.RUNNING
    job.start_time = START
    store.updateJob(job)

    Reconciler(store).reconcile(job, ExternalStatus(JobStatus.CANCELLED))

    assert store.getJob("abc").start_time == START


def test_reconcile_completed_records_usage_once(store, job):
    reconciler = Reconciler(store)
    observed = ExternalStatus(
        JobStatus.COMPLETED, start_time=START, end_time=END, exit_code=0
    )

    assert reconciler.reconcile(job, observed)
    assert not reconciler.reconcile(store.getJob("abc"), observed)

    usage = store.getUsageRecord("abc")
    assert usage.walltime_seconds == 3600
    assert usage.cpu_hours == pytest.approx(8.0)
    assert [e.kind for e in store.getEvents("abc")] == [EventKind.COMPLETED]


def test_reconcile_completed_without_times_skips_usage(store, job):
    accountant = MagicMock()

    Reconciler(store, accountant).reconcile(job, ExternalStatus(JobStatus.COMPLETED))

    accountant.account.assert_not_called()
    assert store.getJob("abc").status == JobStatus.COMPLETED


def test_reconcile_uses_stored_state_not_the_given_snapshot(store, job):
    stored = store.getJob("abc")
    stored.status = JobStatus.CANCELLED
    store.updateJob(stored)

    # `job` still says QUEUED
    changed = Reconciler(store).reconcile(
        job, ExternalStatus(JobStatus.COMPLETED, start_time=START, end_time=END)
    )

    assert not changed
    assert store.getJob("abc").status == JobStatus.CANCELLED
    assert store.getEvents("abc") == []
    assert store.getUsageRecord("abc") is None


def test_reconcile_retry_after_failed_job_write(store, job):
    reconciler = Reconciler(store)
    observed = ExternalStatus(JobStatus.COMPLETED, start_time=START, end_time=END)

    with (
        patch.object(store, "updateJob", side_effect=JobStoreError("disk full")),
        pytest.raises(JobStoreError),
    ):
        reconciler.reconcile(job, observed)

    # the job is still active and gets polled again
    assert store.getJob("abc").status == JobStatus.QUEUED

    assert reconciler.reconcile(job, observed)

    assert store.getJob("abc").status == JobStatus.COMPLETED
    assert [e.kind for e in store.getEvents("abc")] == [EventKind.COMPLETED]
    assert store.getUsageRecord("abc").walltime_seconds == 3600
