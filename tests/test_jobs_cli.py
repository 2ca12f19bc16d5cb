# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from portal_lib.core.config import CFG
from portal_lib.core.error import JobStoreError
from portal_lib.jobs.cli import jobs
from portal_lib.properties.states import JobStatus


def _job(user, name="job", job_id="0"):
    job = MagicMock()
    job.user = user
    job.name = name
    job.id = job_id
    return job


def test_jobs_shows_active_jobs_by_default():
    runner = CliRunner()
    active = [_job("alice"), _job("bob")]

    with (
        patch("portal_lib.jobs.cli.YamlJobStore") as mock_store_cls,
        patch("portal_lib.jobs.cli.JobsPresenter") as mock_presenter_cls,
        patch("portal_lib.jobs.cli.Console"),
    ):
        mock_store_cls.return_value.getJobs.return_value = active
        result = runner.invoke(jobs, [])

    assert result.exit_code == 0
    mock_store_cls.return_value.getJobs.assert_called_once_with(JobStatus.active())
    mock_presenter_cls.assert_called_once_with(active, False, False)
    mock_presenter_cls.return_value.createJobsInfoPanel.assert_called_once()


def test_jobs_all_and_user_filter():
    runner = CliRunner()
    alice, bob = _job("alice"), _job("bob")

    with (
        patch("portal_lib.jobs.cli.YamlJobStore") as mock_store_cls,
        patch("portal_lib.jobs.cli.JobsPresenter") as mock_presenter_cls,
        patch("portal_lib.jobs.cli.Console"),
    ):
        mock_store_cls.return_value.getJobs.return_value = [alice, bob]
        result = runner.invoke(jobs, ["--all", "--extra", "-u", "bob"])

    assert result.exit_code == 0
    mock_store_cls.return_value.getJobs.assert_called_once_with(None)
    mock_presenter_cls.assert_called_once_with([bob], True, True)


def test_jobs_yaml():
    runner = CliRunner()

    with (
        patch("portal_lib.jobs.cli.YamlJobStore") as mock_store_cls,
        patch("portal_lib.jobs.cli.JobsPresenter") as mock_presenter_cls,
    ):
        mock_store_cls.return_value.getJobs.return_value = [_job("alice")]
        result = runner.invoke(jobs, ["--yaml"])

    assert result.exit_code == 0
    mock_presenter_cls.return_value.dumpYaml.assert_called_once()
    mock_presenter_cls.return_value.createJobsInfoPanel.assert_not_called()


def test_jobs_none_found():
    runner = CliRunner()

    with (
        patch("portal_lib.jobs.cli.YamlJobStore") as mock_store_cls,
        patch("portal_lib.jobs.cli.JobsPresenter") as mock_presenter_cls,
        patch("portal_lib.jobs.cli.logger") as mock_logger,
    ):
        mock_store_cls.return_value.getJobs.return_value = []
        result = runner.invoke(jobs, [])

    assert result.exit_code == 0
    mock_presenter_cls.assert_not_called()
    mock_logger.info.assert_called_once_with("No jobs found.")


def test_jobs_store_error():
    runner = CliRunner()

    with patch("portal_lib.jobs.cli.YamlJobStore") as mock_store_cls:
        mock_store_cls.return_value.getJobs.side_effect = JobStoreError("corrupted")
        result = runner.invoke(jobs, [])

    assert result.exit_code == CFG.exit_codes.default


def test_jobs_status_filter_overrides_all():
    runner = CliRunner()
    done = _job("alice")

    with (
        patch("portal_lib.jobs.cli.YamlJobStore") as mock_store_cls,
        patch("portal_lib.jobs.cli.JobsPresenter") as mock_presenter_cls,
        patch("portal_lib.jobs.cli.Console"),
    ):
        mock_store_cls.return_value.getJobs.return_value = [done]
        result = runner.invoke(jobs, ["-s", "completed", "--status", "FAILED"])

    assert result.exit_code == 0
    mock_store_cls.return_value.getJobs.assert_called_once_with(
        {JobStatus.COMPLETED, JobStatus.FAILED}
    )
    mock_presenter_cls.assert_called_once_with([done], False, True)


def test_jobs_unknown_status():
    runner = CliRunner()

    with (
        patch("portal_lib.jobs.cli.YamlJobStore") as mock_store_cls,
        patch("portal_lib.jobs.cli.logger") as mock_logger,
    ):
        result = runner.invoke(jobs, ["--status", "sleeping"])

    assert result.exit_code == CFG.exit_codes.default
    mock_store_cls.return_value.getJobs.assert_not_called()
    assert "sleeping" in str(mock_logger.error.call_args[0][0])


def test_jobs_search_matches_name_or_id_case_insensitively():
    runner = CliRunner()
    by_name = _job("alice", name="Train-ResNet", job_id="a1")
    by_id = _job("alice", name="eval", job_id="ffrestart")
    other = _job("alice", name="preprocess", job_id="b2")

    with (
        patch("portal_lib.jobs.cli.YamlJobStore") as mock_store_cls,
        patch("portal_lib.jobs.cli.JobsPresenter") as mock_presenter_cls,
        patch("portal_lib.jobs.cli.Console"),
    ):
        mock_store_cls.return_value.getJobs.return_value = [by_name, by_id, other]
        result = runner.invoke(jobs, ["--search", "RES"])

    assert result.exit_code == 0
    mock_presenter_cls.assert_called_once_with([by_name, by_id], False, False)


def test_jobs_limit_keeps_most_recent():
    runner = CliRunner()
    listed = [_job("alice", job_id=str(i)) for i in range(4)]

    with (
        patch("portal_lib.jobs.cli.YamlJobStore") as mock_store_cls,
        patch("portal_lib.jobs.cli.JobsPresenter") as mock_presenter_cls,
        patch("portal_lib.jobs.cli.Console"),
    ):
        mock_store_cls.return_value.getJobs.return_value = listed
        result = runner.invoke(jobs, ["-n", "2"])

    assert result.exit_code == 0
    mock_presenter_cls.assert_called_once_with(listed[2:], False, False)
