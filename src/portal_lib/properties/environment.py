# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Execution environments of jobs.

A job runs in exactly one kind of environment: environment modules, a conda
environment, a Singularity/Apptainer container, or a raw shell setup. Each
kind is a separate dataclass carrying its own configuration, and `Environment`
is the closed union of all of them. Configurations are validated when an
environment is constructed from a dictionary, so every `Environment` instance
can be rendered without further checks.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Self

from portal_lib.core.error import PortalError


class EnvironmentKind(Enum):
    """Kind of the job's execution environment."""

    MODULES = 1
    CONDA = 2
    CONTAINER = 3
    RAW = 4

    def __str__(self) -> str:
        return self.name

    @classmethod
    def fromStr(cls, s: str) -> Self:
        """
        Convert a string to the corresponding EnvironmentKind enum variant.

        Raises:
            PortalError: If the string does not name an environment kind.
        """
        try:
            return cls[s.upper()]
        except KeyError as e:
            raise PortalError(
                f"Unknown environment kind '{s}'. Supported kinds: {', '.join(k.name for k in cls)}."
            ) from e


@dataclass(frozen=True)
class ModulesEnvironment:
    """Environment modules loaded in the given order after a purge."""

    modules: list[str] = field(default_factory=list)

    kind = EnvironmentKind.MODULES

    @classmethod
    def fromConfig(cls, config: dict[str, object]) -> Self:
        modules = config.get("modules", [])
        if isinstance(modules, str):
            modules = modules.split()
        if not isinstance(modules, list) or not all(
            isinstance(m, str) and m for m in modules
        ):
            raise PortalError(
                f"Invalid 'modules' configuration: expected a list of module names, got '{modules}'."
            )
        return cls(modules=list(modules))

    def toConfig(self) -> dict[str, object]:
        return {"modules": list(self.modules)}


@dataclass(frozen=True)
class CondaEnvironment:
    """Named conda environment activated before the command is run."""

    env_name: str

    kind = EnvironmentKind.CONDA

    @classmethod
    def fromConfig(cls, config: dict[str, object]) -> Self:
        env_name = config.get("env_name")
        if not isinstance(env_name, str) or not env_name.strip():
            raise PortalError(
                "Invalid 'conda' configuration: 'env_name' must be a non-empty string."
            )
        return cls(env_name=env_name.strip())

    def toConfig(self) -> dict[str, object]:
        return {"env_name": self.env_name}


@dataclass(frozen=True)
class ContainerEnvironment:
    """Singularity/Apptainer image the command is executed in."""

    image: str
    bind_paths: list[str] = field(default_factory=list)

    kind = EnvironmentKind.CONTAINER

    @classmethod
    def fromConfig(cls, config: dict[str, object]) -> Self:
        image = config.get("image")
        if not isinstance(image, str) or not image.strip():
            raise PortalError(
                "Invalid 'container' configuration: 'image' must be a non-empty string."
            )

        bind_paths = config.get("bind_paths") or []
        if isinstance(bind_paths, str):
            bind_paths = [p.strip() for p in bind_paths.split(",") if p.strip()]
        if not isinstance(bind_paths, list) or not all(
            isinstance(p, str) for p in bind_paths
        ):
            raise PortalError(
                f"Invalid 'container' configuration: 'bind_paths' must be a list of paths, got '{bind_paths}'."
            )

        return cls(image=image.strip(), bind_paths=list(bind_paths))

    def toConfig(self) -> dict[str, object]:
        config: dict[str, object] = {"image": self.image}
        if self.bind_paths:
            config["bind_paths"] = list(self.bind_paths)
        return config


@dataclass(frozen=True)
class RawEnvironment:
    """Arbitrary shell setup inserted verbatim into the script."""

    commands: str | None = None

    kind = EnvironmentKind.RAW

    @classmethod
    def fromConfig(cls, config: dict[str, object]) -> Self:
        commands = config.get("commands")
        if commands is not None and not isinstance(commands, str):
            raise PortalError(
                "Invalid 'raw' configuration: 'commands' must be a string."
            )
        return cls(commands=commands or None)

    def toConfig(self) -> dict[str, object]:
        return {"commands": self.commands} if self.commands else {}


Environment = ModulesEnvironment | CondaEnvironment | ContainerEnvironment | RawEnvironment

_ENVIRONMENTS: dict[EnvironmentKind, type[Environment]] = {
    EnvironmentKind.MODULES: ModulesEnvironment,
    EnvironmentKind.CONDA: CondaEnvironment,
    EnvironmentKind.CONTAINER: ContainerEnvironment,
    EnvironmentKind.RAW: RawEnvironment,
}


def environment_from_dict(
    kind: EnvironmentKind | str, config: dict[str, object] | None
) -> Environment:
    """
    Construct and validate an environment of the given kind.

    Args:
        kind (EnvironmentKind | str): Kind of the environment.
        config (dict[str, object] | None): Kind-specific configuration.

    Returns:
        Environment: The validated environment.

    Raises:
        PortalError: If the kind is unknown or the configuration is invalid for it.
    """
    if isinstance(kind, str):
        kind = EnvironmentKind.fromStr(kind)

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise PortalError(
            f"Environment configuration must be a mapping, got '{config}'."
        )

    return _ENVIRONMENTS[kind].fromConfig(config)


def environment_to_dict(env: Environment) -> dict[str, object]:
    """
    Serialize an environment into a dictionary with `kind` and `config` keys.
    """
    return {"kind": str(env.kind), "config": env.toConfig()}
