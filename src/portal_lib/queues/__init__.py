# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Listing of scheduler partitions.

This module implements `portal queues`, which lists the partitions reported
by the scheduler either as a rich panel or as YAML.
"""

from .presenter import QueuesPresenter

__all__ = [
    "QueuesPresenter",
]
