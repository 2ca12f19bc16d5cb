# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from portal_lib.core.config import CFG
from portal_lib.core.error import PortalError
from portal_lib.queues.cli import queues


def test_queues_prints_panel():
    runner = CliRunner()
    queue = MagicMock()

    with (
        patch("portal_lib.queues.cli.GatewayMeta.obtain") as mock_obtain,
        patch("portal_lib.queues.cli.QueuesPresenter") as mock_presenter_cls,
        patch("portal_lib.queues.cli.Console"),
    ):
        mock_obtain.return_value.return_value.listQueues.return_value = [queue]
        result = runner.invoke(queues, [])

    assert result.exit_code == 0
    mock_obtain.assert_called_once_with(None)
    mock_presenter_cls.assert_called_once_with([queue])
    mock_presenter_cls.return_value.createQueuesInfoPanel.assert_called_once()


def test_queues_yaml():
    runner = CliRunner()

    with (
        patch("portal_lib.queues.cli.GatewayMeta.obtain") as mock_obtain,
        patch("portal_lib.queues.cli.QueuesPresenter") as mock_presenter_cls,
    ):
        mock_obtain.return_value.return_value.listQueues.return_value = [MagicMock()]
        result = runner.invoke(queues, ["--yaml", "--scheduler", "local"])

    assert result.exit_code == 0
    mock_obtain.assert_called_once_with("local")
    mock_presenter_cls.return_value.dumpYaml.assert_called_once()


def test_queues_none_found():
    runner = CliRunner()

    with (
        patch("portal_lib.queues.cli.GatewayMeta.obtain") as mock_obtain,
        patch("portal_lib.queues.cli.QueuesPresenter") as mock_presenter_cls,
        patch("portal_lib.queues.cli.logger") as mock_logger,
    ):
        mock_obtain.return_value.return_value.listQueues.return_value = []
        result = runner.invoke(queues, [])

    assert result.exit_code == 0
    mock_presenter_cls.assert_not_called()
    mock_logger.info.assert_called_once_with("No queues found.")


def test_queues_gateway_error():
    runner = CliRunner()

    with patch(
        "portal_lib.queues.cli.GatewayMeta.obtain", side_effect=PortalError("no host")
    ):
        result = runner.invoke(queues, [])

    assert result.exit_code == CFG.exit_codes.default
