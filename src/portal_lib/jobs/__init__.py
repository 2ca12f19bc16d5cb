# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Listing of jobs tracked by portal.

This module implements `portal jobs`, which shows a compact table of stored
jobs together with statistics of their states and requested resources.
"""

from .presenter import JobsPresenter

__all__ = [
    "JobsPresenter",
]
