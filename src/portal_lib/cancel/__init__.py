# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Cancellation of jobs.

This module implements `portal cancel`, which asks Slurm to cancel queued or
running jobs and records the cancellation.
"""
