# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Data types describing portal jobs.

This module groups the job states and event kinds, the resource requirements,
the closed union of execution environments, the job request submitted by users,
and the persisted records (jobs, events, usage records).
"""
