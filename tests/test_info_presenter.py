# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from datetime import datetime
from pathlib import Path

import pytest
import yaml
from rich.console import Console

from portal_lib.info import InfoPresenter
from portal_lib.properties.environment import ContainerEnvironment
from portal_lib.properties.job import Job, JobEvent, UsageRecord
from portal_lib.properties.resources import Resources
from portal_lib.properties.states import EventKind, JobStatus


@pytest.fixture
def job() -> Job:
    return Job(
        id="a1b2c3",
        name="train",
        user="alice",
        resources=Resources(queue="gpu", walltime=3600, gpus_per_node=2),
        environment=ContainerEnvironment(image="/img/tool.sif", bind_paths=["/data"]),
        command="python train.py",
        arguments="--epochs 10",
        status=JobStatus.COMPLETED,
        submission_time=datetime(2025, 3, 1, 11, 0, 0),
        working_directory=Path("/work/a1b2c3"),
        external_id="55021",
        start_time=datetime(2025, 3, 1, 12, 0, 0),
        end_time=datetime(2025, 3, 1, 13, 0, 0),
        exit_code=0,
    )


@pytest.fixture
def events() -> list[JobEvent]:
    return [
        JobEvent("a1b2c3", EventKind.SUBMITTED, "Job submitted to Slurm with ID 55021", datetime(2025, 3, 1, 11, 0, 1)),
        JobEvent("a1b2c3", EventKind.COMPLETED, "Job completed", datetime(2025, 3, 1, 13, 0, 30)),
    ]


def _render(renderable) -> str:
    console = Console(record=True, width=200)
    console.print(renderable)
    return console.export_text()


def test_short_info(job, events):
    assert InfoPresenter(job, events).getShortInfo().plain == "a1b2c3    COMPLETED"


def test_full_info_panel(job, events):
    usage = UsageRecord("a1b2c3", "alice", 1.0, 2.0, 3600)
    console = Console(record=True, width=200)

    output = _render(InfoPresenter(job, events, usage).createFullInfoPanel(console))

    for expected in (
        "JOB: a1b2c3",
        "Slurm job ID:",
        "55021",
        "python train.py --epochs 10",
        "RESOURCES",
        "gpus-per-node:",
        "ENVIRONMENT",
        "container",
        "/img/tool.sif",
        "HISTORY",
        "CREATED",
        "Job submitted to Slurm with ID 55021",
        "USAGE",
        "CPU-hours:",
        "2.00",
        "STATE",
        "Exit code:",
    ):
        assert expected in output


def test_full_info_panel_without_usage_and_external_id(job):
    job.external_id = None
    job.status = JobStatus.QUEUED

    output = _render(InfoPresenter(job, []).createFullInfoPanel(Console(width=200)))

    assert "USAGE" not in output
    assert "Slurm job ID:" not in output


def test_dump_yaml(job, events, capsys):
    InfoPresenter(job, events).dumpYaml()

    data = yaml.safe_load(capsys.readouterr().out)
    assert data["job"]["id"] == "a1b2c3"
    assert [e["kind"] for e in data["events"]] == ["SUBMITTED", "COMPLETED"]
    assert "usage" not in data
