# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Accounting of billable resource usage of completed jobs.
"""

from .accountant import UsageAccountant

__all__ = ["UsageAccountant"]
