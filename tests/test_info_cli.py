# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from portal_lib.core.config import CFG
from portal_lib.core.error import JobStoreError
from portal_lib.info.cli import info


def test_info_full_panel():
    runner = CliRunner()
    job = MagicMock(id="abc123")

    with (
        patch("portal_lib.info.cli.YamlJobStore") as mock_store_cls,
        patch("portal_lib.info.cli.InfoPresenter") as mock_presenter_cls,
        patch("portal_lib.info.cli.Console"),
    ):
        store = mock_store_cls.return_value
        store.resolveJob.return_value = job
        result = runner.invoke(info, ["abc"])

    assert result.exit_code == 0
    store.resolveJob.assert_called_once_with("abc")
    store.getEvents.assert_called_once_with("abc123")
    store.getUsageRecord.assert_called_once_with("abc123")
    mock_presenter_cls.assert_called_once_with(
        job, store.getEvents.return_value, store.getUsageRecord.return_value
    )
    mock_presenter_cls.return_value.createFullInfoPanel.assert_called_once()


def test_info_short():
    runner = CliRunner()

    with (
        patch("portal_lib.info.cli.YamlJobStore"),
        patch("portal_lib.info.cli.InfoPresenter") as mock_presenter_cls,
        patch("portal_lib.info.cli.Console"),
    ):
        result = runner.invoke(info, ["abc", "--short"])

    assert result.exit_code == 0
    mock_presenter_cls.return_value.getShortInfo.assert_called_once()
    mock_presenter_cls.return_value.createFullInfoPanel.assert_not_called()


def test_info_yaml():
    runner = CliRunner()

    with (
        patch("portal_lib.info.cli.YamlJobStore"),
        patch("portal_lib.info.cli.InfoPresenter") as mock_presenter_cls,
        patch("portal_lib.info.cli.Console"),
    ):
        result = runner.invoke(info, ["abc", "--yaml"])

    assert result.exit_code == 0
    mock_presenter_cls.return_value.dumpYaml.assert_called_once()


def test_info_unknown_job():
    runner = CliRunner()

    with (
        patch("portal_lib.info.cli.YamlJobStore") as mock_store_cls,
        patch("portal_lib.info.cli.logger") as mock_logger,
    ):
        error = JobStoreError("Job 'zzz' does not exist.")
        mock_store_cls.return_value.resolveJob.side_effect = error
        result = runner.invoke(info, ["zzz"])

    assert result.exit_code == CFG.exit_codes.default
    mock_logger.error.assert_called_once_with(error)
