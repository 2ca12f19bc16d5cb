# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Abstractions for talking to a batch scheduler.

- `SchedulerGateway`: the abstract interface every scheduler backend implements
  (submit, cancel, queryStatus, listQueues). Concrete transports only decide
  how a shell command reaches the scheduler.

- `ExternalStatus` and `QueueInfo`: normalized views of the scheduler's answers.

- `GatewayMeta`: a metaclass registering the available transports and selecting
  one by name, environment variable, or configuration. The `@gateway` decorator
  registers implementations automatically.
"""

from .gateway import SchedulerGateway
from .meta import GatewayMeta, gateway
from .status import ExternalStatus, QueueInfo

__all__ = [
    "ExternalStatus",
    "GatewayMeta",
    "QueueInfo",
    "SchedulerGateway",
    "gateway",
]
