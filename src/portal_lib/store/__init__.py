# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Persistence of jobs, job events, and usage records.

`JobStore` is the abstract persistence boundary used by the lifecycle engine.
`YamlJobStore` keeps every job, its event log, and its usage record in
separate YAML files under a single directory.
"""

from .interface import JobStore
from .yaml_store import YamlJobStore

__all__ = ["JobStore", "YamlJobStore"]
