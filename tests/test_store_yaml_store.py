# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
import yaml

from portal_lib.core.error import JobStoreError
from portal_lib.properties.environment import ModulesEnvironment
from portal_lib.properties.job import Job, JobEvent, UsageRecord
from portal_lib.properties.resources import Resources
from portal_lib.properties.states import EventKind, JobStatus
from portal_lib.store import YamlJobStore


@pytest.fixture
def store(tmp_path) -> YamlJobStore:
    return YamlJobStore(tmp_path / "store")


def _job(job_id: str, status=JobStatus.QUEUED, minutes: int = 0) -> Job:
    return Job(
        id=job_id,
        name=f"job-{job_id}",
        user="alice",
        resources=Resources(queue="cpu", walltime=3600),
        environment=ModulesEnvironment(modules=["gcc"]),
        command="hostname",
        status=status,
        submission_time=datetime(2025, 3, 1, 12, 0) + timedelta(minutes=minutes),
    )


def test_create_and_get_job(store):
    job = _job("abc")
    store.createJob(job)

    assert store.getJob("abc") == job
    assert (store.root / "jobs" / "abc.yaml").is_file()


def test_create_existing_job_raises(store):
    store.createJob(_job("abc"))

    with pytest.raises(JobStoreError, match="already exists"):
        store.createJob(_job("abc"))


def test_get_missing_job_raises(store):
    with pytest.raises(JobStoreError, match="does not exist"):
        store.getJob("missing")


def test_get_corrupted_job_raises(store):
    (store.root / "jobs").mkdir(parents=True)
    (store.root / "jobs" / "bad.yaml").write_text("id: [unclosed\n")

    with pytest.raises(JobStoreError, match="Could not parse"):
        store.getJob("bad")


def test_get_incomplete_job_raises(store):
    (store.root / "jobs").mkdir(parents=True)
    (store.root / "jobs" / "bad.yaml").write_text("id: bad\nname: x\n")

    with pytest.raises(JobStoreError, match="Could not load job 'bad'"):
        store.getJob("bad")


def test_update_job(store):
    job = _job("abc")
    store.createJob(job)

    job.status = JobStatus.RUNNING
    job.external_id = "55021"
    store.updateJob(job)

    loaded = store.getJob("abc")
    assert loaded.status == JobStatus.RUNNING
    assert loaded.external_id == "55021"


def test_update_missing_job_raises(store):
    with pytest.raises(JobStoreError, match="does not exist"):
        store.updateJob(_job("abc"))


def test_update_leaves_no_temporary_files(store):
    job = _job("abc")
    store.createJob(job)
    store.updateJob(job)

    assert sorted(p.name for p in (store.root / "jobs").iterdir()) == ["abc.yaml"]


def test_failed_write_keeps_previous_content(store):
    job = _job("abc")
    store.createJob(job)

    job.status = JobStatus.RUNNING
    with (
        patch("portal_lib.store.yaml_store.os.replace", side_effect=OSError("disk full")),
        pytest.raises(JobStoreError, match="Could not write"),
    ):
        store.updateJob(job)

    assert store.getJob("abc").status == JobStatus.QUEUED
    assert sorted(p.name for p in (store.root / "jobs").iterdir()) == ["abc.yaml"]


def test_failed_serialization_is_wrapped_and_cleaned_up(store):
    job = _job("abc")
    store.createJob(job)

    with (
        patch(
            "portal_lib.store.yaml_store.yaml.dump",
            side_effect=yaml.representer.RepresenterError("cannot represent an object"),
        ),
        pytest.raises(JobStoreError, match="Could not write"),
    ):
        store.updateJob(job)

    assert store.getJob("abc") == job
    assert sorted(p.name for p in (store.root / "jobs").iterdir()) == ["abc.yaml"]


def test_get_jobs_skips_unreadable_records(store):
    store.createJob(_job("good"))
    (store.root / "jobs" / "bad.yaml").write_text("id: bad\n")

    with patch("portal_lib.store.yaml_store.logger") as mock_logger:
        jobs = store.getJobs(JobStatus.active())

    assert [j.id for j in jobs] == ["good"]
    mock_logger.warning.assert_called_once()
    assert "bad.yaml" in mock_logger.warning.call_args[0][0]


def test_get_jobs_empty_store(store):
    assert store.getJobs() == []


def test_get_jobs_sorted_by_submission_and_filtered(store):
    store.createJob(_job("c", JobStatus.RUNNING, minutes=1))
    store.createJob(_job("a", JobStatus.COMPLETED, minutes=2))
    store.createJob(_job("b", JobStatus.QUEUED, minutes=0))

    assert [j.id for j in store.getJobs()] == ["b", "c", "a"]
    assert [j.id for j in store.getJobs(JobStatus.active())] == ["b", "c"]
    assert [j.id for j in store.getJobs([JobStatus.COMPLETED])] == ["a"]


def test_events_are_appended_in_order(store):
    first = JobEvent("abc", EventKind.SUBMITTED, "Job submitted", datetime(2025, 3, 1, 12))
    second = JobEvent("abc", EventKind.STARTED, "Job started", datetime(2025, 3, 1, 13))

    store.appendEvent(first)
    store.appendEvent(second)

    assert store.getEvents("abc") == [first, second]
    assert store.getEvents("other") == []


def test_usage_record(store):
    record = UsageRecord("abc", "alice", 16.0, 2.0, 3600)

    assert store.getUsageRecord("abc") is None
    store.addUsageRecord(record)
    assert store.getUsageRecord("abc") == record


def test_duplicate_usage_record_raises(store):
    store.addUsageRecord(UsageRecord("abc", "alice", 1.0, 0.0, 3600))

    with pytest.raises(JobStoreError, match="already has a usage record"):
        store.addUsageRecord(UsageRecord("abc", "alice", 2.0, 0.0, 7200))

    assert store.getUsageRecord("abc").cpu_hours == 1.0


@pytest.mark.parametrize("job_id", ["", ".", "..", "a/b", "..\\x"])
def test_invalid_job_id_raises(store, job_id):
    with pytest.raises(JobStoreError, match="Invalid job id"):
        store.getJob(job_id)


def test_resolve_job_by_prefix(store):
    store.createJob(_job("abc123"))
    store.createJob(_job("abd456"))

    assert store.resolveJob("abc").id == "abc123"
    assert store.resolveJob("abd456").id == "abd456"


def test_resolve_job_ambiguous_prefix_raises(store):
    store.createJob(_job("abc123"))
    store.createJob(_job("abd456"))

    with pytest.raises(JobStoreError, match="ambiguous"):
        store.resolveJob("ab")


def test_resolve_job_exact_match_wins(store):
    store.createJob(_job("abc"))
    store.createJob(_job("abcdef"))

    assert store.resolveJob("abc").id == "abc"


def test_resolve_job_missing_raises(store):
    with pytest.raises(JobStoreError, match="does not exist"):
        store.resolveJob("zzz")

    with pytest.raises(JobStoreError, match="must not be empty"):
        store.resolveJob("")
