# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand

from portal_lib.batch.interface import GatewayMeta
from portal_lib.core.common import yes_or_no_prompt
from portal_lib.core.config import CFG
from portal_lib.core.error import JobNotSuitableError, PortalError
from portal_lib.core.error_handlers import (
    handle_general_portal_error,
    handle_not_suitable_error,
)
from portal_lib.core.logger import get_logger
from portal_lib.core.repeater import Repeater
from portal_lib.lifecycle.canceller import Canceller
from portal_lib.store.interface import JobStore
from portal_lib.store.yaml_store import YamlJobStore

logger = get_logger(__name__)


@click.command(
    short_help="Cancel jobs.",
    help=f"""Cancel the specified portal jobs.

{click.style("JOB_ID", fg="green")}   Identifiers of the jobs to cancel (or unambiguous prefixes of them).

By default, `{CFG.binary_name} cancel` prompts for confirmation before cancelling a job.
Only jobs that are queued or running can be cancelled.""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument(
    "jobs",
    type=str,
    nargs=-1,
    required=True,
    metavar=click.style("JOB_ID", fg="green"),
)
@click.option("-y", "--yes", is_flag=True, help="Cancel the jobs without confirmation.")
@click.option(
    "--scheduler",
    type=str,
    default=None,
    help="Scheduler transport to use ('local' or 'ssh'). Defaults to the configured one.",
)
def cancel(jobs: tuple[str, ...], yes: bool, scheduler: str | None) -> NoReturn:
    """
    Cancel the specified portal jobs.
    """
    try:
        store = YamlJobStore(CFG.workspace.store_path)
        canceller = Canceller(store, GatewayMeta.obtain(scheduler)())

        repeater = Repeater(list(jobs), cancel_job, store, canceller, yes)
        repeater.onException(JobNotSuitableError, handle_not_suitable_error)
        repeater.onException(PortalError, handle_general_portal_error)
        repeater.run()
        print()
        sys.exit(0)
    # PortalErrors raised for individual jobs are caught by Repeater
    except PortalError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)


def cancel_job(job_id: str, store: JobStore, canceller: Canceller, yes: bool) -> None:
    """
    Cancel a single job, asking for confirmation unless `yes` is set.

    Raises:
        JobNotSuitableError: If the job is neither queued nor running.
        PortalError: If the job does not exist or cannot be cancelled.
    """
    job = store.resolveJob(job_id)
    canceller.ensureSuitable(job)

    if yes or yes_or_no_prompt(f"Do you want to cancel the job '{job.id}' ({job.name})?"):
        canceller.cancel(job.id)
        logger.info(f"Cancelled the job '{job.id}'.")
    else:
        logger.info("Operation aborted.")
