# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand
from rich.console import Console

from portal_lib.core.config import CFG
from portal_lib.core.error import PortalError
from portal_lib.core.logger import get_logger
from portal_lib.info.presenter import InfoPresenter
from portal_lib.store.yaml_store import YamlJobStore

logger = get_logger(__name__)


@click.command(
    short_help="Display information about a job.",
    help=f"""Display information about the state and properties of the specified portal job.

{click.style("JOB_ID", fg="green")}   The identifier of the job (or an unambiguous prefix of it).""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument(
    "job",
    type=str,
    metavar=click.style("JOB_ID", fg="green"),
)
@click.option(
    "-s", "--short", is_flag=True, help="Display only the job ID and current state."
)
@click.option("--yaml", is_flag=True, help="Output job metadata in YAML format.")
def info(job: str, short: bool, yaml: bool) -> NoReturn:
    """
    Get information about the specified portal job.
    """
    try:
        store = YamlJobStore(CFG.workspace.store_path)
        record = store.resolveJob(job)
        presenter = InfoPresenter(
            record, store.getEvents(record.id), store.getUsageRecord(record.id)
        )

        console = Console()
        if yaml:
            presenter.dumpYaml()
        elif short:
            console.print(presenter.getShortInfo())
        else:
            console.print(presenter.createFullInfoPanel(console))
        sys.exit(0)
    except PortalError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
