# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Periodic reconciliation of job states with the scheduler.

`StatusPoller` runs poll cycles on a fixed interval. Each cycle queries the
scheduler for every job that has not finished yet and feeds the answers to
the `Reconciler`. Errors are contained per job: a job whose state cannot be
obtained is left untouched and retried in the next cycle.
"""

from .poller import PollSummary, StatusPoller

__all__ = ["PollSummary", "StatusPoller"]
