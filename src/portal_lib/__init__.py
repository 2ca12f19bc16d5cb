# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core implementation of the portal command-line tool.

This package provides the job lifecycle and scheduler-integration engine
behind portal. It translates job requests into Slurm batch scripts, submits
and cancels jobs through a local or remote (ssh) execution channel,
reconciles the scheduler's view of each job into an internal state machine
on a fixed polling cycle, and records billable resource usage of completed
jobs. All portal CLI commands ultimately delegate to the functionality
implemented here.
"""

from .portal import __version__, cli

__all__ = [
    "__version__",
    "cli",
    "batch",
    "cancel",
    "core",
    "info",
    "jobs",
    "lifecycle",
    "poller",
    "properties",
    "queues",
    "script",
    "store",
    "submit",
    "usage",
]
