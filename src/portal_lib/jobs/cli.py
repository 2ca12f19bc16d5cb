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
from portal_lib.jobs.presenter import JobsPresenter
from portal_lib.properties.states import JobStatus
from portal_lib.store.yaml_store import YamlJobStore

logger = get_logger(__name__)


@click.command(
    short_help="Display a summary of jobs.",
    help="Display a summary of the jobs tracked by portal. By default, only unfinished jobs are shown.",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@click.option(
    "-u",
    "--user",
    type=str,
    default=None,
    help="Only display jobs of the specified user.",
)
@click.option(
    "-e",
    "--extra",
    is_flag=True,
    help="Show additional information about the jobs.",
)
@click.option(
    "-a",
    "--all",
    is_flag=True,
    help="Include both unfinished and finished jobs in the summary.",
)
@click.option(
    "-s",
    "--status",
    type=str,
    multiple=True,
    help="Only display jobs in the specified state. Can be given multiple times. Overrides `--all`.",
)
@click.option(
    "-q",
    "--search",
    type=str,
    default=None,
    help="Only display jobs whose name or ID contains the given text (case-insensitive).",
)
@click.option(
    "-n",
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Only display the specified number of most recently submitted jobs.",
)
@click.option("--yaml", is_flag=True, help="Output job metadata in YAML format.")
def jobs(
    user: str | None,
    extra: bool,
    all: bool,
    status: tuple[str, ...],
    search: str | None,
    limit: int | None,
    yaml: bool,
) -> NoReturn:
    try:
        if status:
            statuses = _parse_statuses(status)
        else:
            statuses = None if all else JobStatus.active()

        store = YamlJobStore(CFG.workspace.store_path)
        jobs = store.getJobs(statuses)

        if user:
            jobs = [job for job in jobs if job.user == user]

        if search:
            needle = search.lower()
            jobs = [
                job
                for job in jobs
                if needle in job.name.lower() or needle in job.id.lower()
            ]

        if limit is not None:
            jobs = jobs[-limit:]

        if not jobs:
            logger.info("No jobs found.")
            sys.exit(0)

        presenter = JobsPresenter(jobs, extra, all or bool(status))
        if yaml:
            presenter.dumpYaml()
        else:
            console = Console(record=False, markup=False)
            panel = presenter.createJobsInfoPanel(console)
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


def _parse_statuses(values: tuple[str, ...]) -> set[JobStatus]:
    """
    Convert state names given on the command line to job states.

    Raises:
        PortalError: If any of the names is not a job state.
    """
    try:
        return {JobStatus.fromStr(value) for value in values}
    except ValueError as e:
        raise PortalError(str(e)) from e
