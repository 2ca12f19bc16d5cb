# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import sys
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand
from rich.console import Console

from portal_lib.batch.interface import GatewayMeta
from portal_lib.core.config import CFG
from portal_lib.core.error import PortalError
from portal_lib.core.logger import get_logger

from .presenter import QueuesPresenter

logger = get_logger(__name__)


@click.command(
    short_help="Display the scheduler's queues.",
    help="Display the partitions of the scheduler together with their state and size.",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@click.option(
    "--scheduler",
    type=str,
    default=None,
    help="Scheduler transport to use ('local' or 'ssh'). Defaults to the configured one.",
)
@click.option("--yaml", is_flag=True, help="Output queue metadata in YAML format.")
def queues(scheduler: str | None, yaml: bool) -> NoReturn:
    try:
        gateway = GatewayMeta.obtain(scheduler)()
        queues = gateway.listQueues()

        if not queues:
            logger.info("No queues found.")
            sys.exit(0)

        presenter = QueuesPresenter(queues)
        if yaml:
            presenter.dumpYaml()
        else:
            console = Console(record=False, markup=False)
            panel = presenter.createQueuesInfoPanel(console)
            console.print(panel)
        sys.exit(0)
    except PortalError as e:
        logger.error(e)
        print()
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        print()
        sys.exit(CFG.exit_codes.unexpected_error)
