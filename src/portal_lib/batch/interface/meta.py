# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import os
from abc import ABCMeta

from portal_lib.core.config import CFG
from portal_lib.core.error import PortalError
from portal_lib.core.logger import get_logger

from .gateway import SchedulerGateway

logger = get_logger(__name__)


class GatewayMeta(ABCMeta):
    """
    Metaclass for scheduler gateway classes.
    """

    # registry of supported transports
    _registry: dict[str, type[SchedulerGateway]] = {}

    def __str__(cls: type[SchedulerGateway]):
        """
        Get the string representation of the gateway class.
        """
        return cls.envName()

    @classmethod
    def register(mcs, gateway_cls: type[SchedulerGateway]):
        """
        Register a gateway class in the metaclass registry.

        Args:
            gateway_cls: Subclass of SchedulerGateway to register.
        """
        mcs._registry[gateway_cls.envName()] = gateway_cls

    @classmethod
    def fromStr(mcs, name: str) -> type[SchedulerGateway]:
        """
        Return the gateway class registered with the given name.

        Raises:
            PortalError: If no class is registered for the given name.
        """
        try:
            return mcs._registry[name.lower()]
        except KeyError as e:
            raise PortalError(
                f"No scheduler gateway registered as '{name}'. Available: {', '.join(mcs._registry)}."
            ) from e

    @classmethod
    def obtain(mcs, name: str | None = None) -> type[SchedulerGateway]:
        """
        Obtain a gateway class by name, environment variable, or configuration.

        Args:
            name (str | None): Optional name of the gateway to obtain.
                - If provided, returns the class registered under this name.
                - If `None`, uses the name from the `PORTAL_SCHEDULER_MODE`
                  environment variable or, if that is not set, `CFG.scheduler.mode`.

        Returns:
            type[SchedulerGateway]: The selected gateway class.

        Raises:
            PortalError: If no gateway is registered under the selected name.
        """
        if name:
            return mcs.fromStr(name)

        if env_name := os.environ.get(CFG.env_vars.scheduler_mode):
            logger.debug(
                f"Using scheduler gateway name from an environment variable: {env_name}."
            )
            return mcs.fromStr(env_name)

        return mcs.fromStr(CFG.scheduler.mode)


def gateway(cls):
    """
    Class decorator to register a scheduler gateway with the metaclass.
    """
    GatewayMeta.register(cls)
    return cls
