# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import sys
from pathlib import Path
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand
from click_option_group import optgroup

from portal_lib.batch.interface import GatewayMeta
from portal_lib.core.config import CFG
from portal_lib.core.error import PortalError
from portal_lib.core.logger import get_logger
from portal_lib.lifecycle.submitter import Submitter
from portal_lib.properties.request import JobRequest
from portal_lib.store.yaml_store import YamlJobStore

logger = get_logger(__name__)


@click.command(
    short_help="Submit a job to Slurm.",
    help=f"""
Submit a job described by a request file to Slurm.

{click.style("REQUEST", fg="green")}   Path to the YAML file describing the job.

Options given on the command line override the values from the request file.
""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument("request", type=str, metavar=click.style("REQUEST", fg="green"))
@optgroup.group(f"{click.style('General settings', fg='yellow')}")
@optgroup.option("--name", type=str, default=None, help="Name of the job.")
@optgroup.option(
    "--queue",
    "-q",
    type=str,
    default=None,
    help="Name of the queue (Slurm partition) to submit the job to.",
)
@optgroup.option(
    "--description", type=str, default=None, help="Free-text description of the job."
)
@optgroup.option(
    "--scheduler",
    type=str,
    default=None,
    help=f"Scheduler transport to use ('local' or 'ssh'). If not specified, uses the environment variable '{CFG.env_vars.scheduler_mode}' or the configured transport.",
)
@optgroup.group(f"{click.style('Requested resources', fg='yellow')}")
@optgroup.option(
    "--nodes", type=int, default=None, help="Number of computing nodes to allocate."
)
@optgroup.option(
    "--tasks-per-node", type=int, default=None, help="Number of tasks to run on each node."
)
@optgroup.option(
    "--cpus-per-task", type=int, default=None, help="Number of CPU cores per task."
)
@optgroup.option(
    "--mem",
    "mem_per_node_gb",
    type=int,
    default=None,
    help="Memory to allocate per node in GB.",
)
@optgroup.option(
    "--gpus-per-node", type=int, default=None, help="Number of GPUs to allocate per node."
)
@optgroup.option(
    "--walltime",
    type=str,
    default=None,
    help="Maximal runtime of the job. Specify as seconds or in the format 'HH:MM:SS'.",
)
@optgroup.option(
    "--priority", type=int, default=None, help="Scheduling priority of the job."
)
@optgroup.group(f"{click.style('Execution', fg='yellow')}")
@optgroup.option("--command", type=str, default=None, help="Command to execute.")
@optgroup.option(
    "--arguments", type=str, default=None, help="Arguments appended to the command."
)
def submit(request: str, scheduler: str | None, **kwargs) -> NoReturn:
    """
    Submit a job request to Slurm.
    """
    try:
        job_request = JobRequest.fromFile(Path(request), **kwargs)
        gateway = GatewayMeta.obtain(scheduler)()
        store = YamlJobStore(CFG.workspace.store_path)

        job = Submitter(store, gateway).submit(job_request)
        logger.info(
            f"Job '{job.id}' submitted successfully as Slurm job '{job.external_id}'."
        )
        sys.exit(0)
    except PortalError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
