# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys

import click
from click_help_colors import HelpColorsGroup

from portal_lib.cancel.cli import cancel
from portal_lib.info.cli import info
from portal_lib.jobs.cli import jobs
from portal_lib.poller.cli import poll
from portal_lib.queues.cli import queues
from portal_lib.submit.cli import submit

__version__ = "0.1.0"

# support both --help and -h
_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(
    cls=HelpColorsGroup,
    help_options_color="bright_blue",
    invoke_without_command=True,
    context_settings=_CONTEXT_SETTINGS,
)
@click.option(
    "--version",
    is_flag=True,
    help="Print the current version of portal and exit.",
)
@click.pass_context
def cli(ctx: click.Context, version: bool):
    """
    Run any portal command.

    portal submits compute jobs to Slurm, tracks their lifecycle, and accounts
    the resources they used.
    """
    if version:
        print(__version__)
        sys.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        sys.exit(0)


cli.add_command(submit)
cli.add_command(cancel)
cli.add_command(jobs)
cli.add_command(info)
cli.add_command(queues)
cli.add_command(poll)
