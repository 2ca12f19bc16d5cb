# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core infrastructure for portal.

This module collects the foundational classes, utilities, and helpers used
across the portal codebase: configuration, the error hierarchy, structured
logging, time and YAML helpers, and per-item error handling for commands
operating on multiple jobs.
"""
