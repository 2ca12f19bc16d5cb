# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re
from datetime import datetime, timedelta
from pathlib import Path

import pytest
import yaml
from rich.console import Console

from portal_lib.core.config import CFG
from portal_lib.jobs import JobsPresenter
from portal_lib.jobs.presenter import JobsStatistics
from portal_lib.properties.environment import RawEnvironment
from portal_lib.properties.job import Job
from portal_lib.properties.resources import Resources
from portal_lib.properties.states import JobStatus

_ANSI = re.compile(r"\x1b\[[0-9;]*m")


def _plain(text: str) -> str:
    return _ANSI.sub("", text)


def _job(job_id="a1b2c3d4e5f6", status=JobStatus.RUNNING, **kwargs) -> Job:
    params = {
        "id": job_id,
        "name": "train",
        "user": "alice",
        "resources": Resources(
            queue="gpu", walltime=7200, nodes=2, cpus_per_task=4, gpus_per_node=1
        ),
        "environment": RawEnvironment(),
        "command": "hostname",
        "status": status,
        "submission_time": datetime.now() - timedelta(hours=1),
        "external_id": "55021",
    }
    params.update(kwargs)
    return Job(**params)


def test_create_row_shows_short_id_and_totals():
    presenter = JobsPresenter([], extra=False, all=False)

    row = [_plain(cell) for cell in presenter._createJobRow(_job())]

    assert row[:9] == ["R", "a1b2c3d4", "55021", "alice", "train", "gpu", "8", "2", "2"]
    assert row[9].endswith(" / 2h")


def test_create_row_all_includes_exit_code():
    presenter = JobsPresenter([], extra=False, all=True)
    job = _job(status=JobStatus.FAILED, exit_code=3, end_time=datetime(2025, 3, 1, 13, 0))

    row = presenter._createJobRow(job)

    assert _plain(row[-1]) == "3"
    assert _plain(row[-2]) == "2025-03-01 13:00:00"


@pytest.mark.parametrize(
    "status, exit_code, expected",
    [
        (JobStatus.COMPLETED, 0, "0"),
        (JobStatus.FAILED, 1, "1"),
        (JobStatus.COMPLETED, None, ""),
        (JobStatus.RUNNING, 0, ""),
    ],
)
def test_format_exit_code(status, exit_code, expected):
    job = _job(status=status, exit_code=exit_code)

    assert _plain(JobsPresenter._formatExitCode(job)) == expected


def test_format_time_finished_without_end_time():
    assert JobsPresenter._formatTime(_job(status=JobStatus.CANCELLED)) == ""


def test_format_time_queued_shows_waiting_time():
    job = _job(status=JobStatus.QUEUED, submission_time=datetime.now() - timedelta(minutes=5))

    assert _plain(JobsPresenter._formatTime(job)).startswith("5m")


def test_shorten_job_name():
    limit = CFG.jobs_presenter.max_job_name_length
    long_name = "x" * (limit + 5)

    assert JobsPresenter._shortenJobName("short") == "short"
    assert JobsPresenter._shortenJobName(long_name) == "x" * limit + "…"


def test_color_unknown_color_is_ignored():
    assert JobsPresenter._color("text", "not-a-color") == "text\033[0m"
    assert JobsPresenter._color("text") == "text"


def test_insert_extra_info():
    job = _job(
        working_directory=Path("/work/a1"),
        status_reason="Slurm reported state 'FAILED'.",
        description="baseline run",
    )
    presenter = JobsPresenter([job], extra=True, all=False)

    table = _plain(presenter._insertExtraInfo(presenter._createBasicJobsTable()))

    assert "Working directory: /work/a1" in table
    assert "Reason:            Slurm reported state 'FAILED'." in table
    assert "Description:       baseline run" in table


def test_create_jobs_info_panel_renders():
    jobs = [_job(), _job("ffff0000", JobStatus.QUEUED)]
    console = Console(record=True, width=160)

    console.print(JobsPresenter(jobs, extra=False, all=False).createJobsInfoPanel(console))
    output = console.export_text()

    assert "PORTAL JOBS" in output
    assert "a1b2c3d4" in output
    assert "ffff0000" in output
    assert "Requested" in output
    assert "Allocated" in output


def test_dump_yaml(capsys):
    JobsPresenter([_job(), _job("b")], extra=False, all=False).dumpYaml()

    documents = [d for d in capsys.readouterr().out.split("\n\n") if d.strip()]
    assert [yaml.safe_load(d)["id"] for d in documents] == ["a1b2c3d4e5f6", "b"]


def test_statistics_add_job():
    stats = JobsStatistics()
    stats.addJob(JobStatus.QUEUED, 4, 1, 1)
    stats.addJob(JobStatus.SUBMITTED, 2, 0, 1)
    stats.addJob(JobStatus.RUNNING, 8, 2, 2)
    stats.addJob(JobStatus.COMPLETED, 16, 0, 4)

    assert stats.n_jobs == {
        JobStatus.QUEUED: 1,
        JobStatus.SUBMITTED: 1,
        JobStatus.RUNNING: 1,
        JobStatus.COMPLETED: 1,
    }
    assert (stats.n_requested_cpus, stats.n_requested_gpus, stats.n_requested_nodes) == (6, 1, 2)
    assert (stats.n_allocated_cpus, stats.n_allocated_gpus, stats.n_allocated_nodes) == (8, 2, 2)


def test_statistics_job_states_line():
    stats = JobsStatistics()
    stats.addJob(JobStatus.QUEUED, 1, 0, 1)
    stats.addJob(JobStatus.QUEUED, 1, 0, 1)
    stats.addJob(JobStatus.RUNNING, 1, 0, 1)

    text = stats._createJobStatesStats().plain

    assert "Q 2" in text
    assert "R 1" in text
    assert "Σ 3" in text
