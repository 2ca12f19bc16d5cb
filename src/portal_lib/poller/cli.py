# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand

from portal_lib.batch.interface import GatewayMeta
from portal_lib.core.config import CFG
from portal_lib.core.error import PortalError
from portal_lib.core.logger import get_logger
from portal_lib.poller.poller import StatusPoller
from portal_lib.store.yaml_store import YamlJobStore

logger = get_logger(__name__, show_time=True)


@click.command(
    short_help="Synchronize job states with Slurm.",
    help=f"""Periodically query Slurm for the state of every unfinished job and record the changes.

Runs until interrupted unless `--once` is specified.
The polling interval and the number of concurrent queries default to
the values from the portal configuration ({CFG.poller.interval} s, {CFG.poller.max_workers} workers).""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@click.option("--once", is_flag=True, help="Run a single poll cycle and exit.")
@click.option(
    "--interval",
    type=click.IntRange(min=1),
    default=None,
    help="Seconds between the starts of two poll cycles.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Maximal number of jobs queried concurrently.",
)
@click.option(
    "--scheduler",
    type=str,
    default=None,
    help="Scheduler transport to use ('local' or 'ssh'). Defaults to the configured one.",
)
def poll(
    once: bool, interval: int | None, workers: int | None, scheduler: str | None
) -> NoReturn:
    try:
        poller = StatusPoller(
            YamlJobStore(CFG.workspace.store_path),
            GatewayMeta.obtain(scheduler)(),
            interval=interval,
            max_workers=workers,
        )

        if once:
            summary = poller.runCycle()
            logger.info(f"Poll cycle finished: {summary}.")
        else:
            try:
                poller.run()
            except KeyboardInterrupt:
                poller.stop()
                logger.info("Polling stopped.")
        sys.exit(0)
    except PortalError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
