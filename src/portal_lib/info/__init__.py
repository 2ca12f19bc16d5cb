# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Detailed information about a single job.

This module implements `portal info`, which shows a job's properties,
requested resources, execution environment, event history, and usage.
"""

from .presenter import InfoPresenter

__all__ = [
    "InfoPresenter",
]
