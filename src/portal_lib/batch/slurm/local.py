# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import shutil
import subprocess

from portal_lib.batch.interface.meta import gateway
from portal_lib.core.config import CFG
from portal_lib.core.error import CommandError
from portal_lib.core.logger import get_logger

from .slurm import Slurm

logger = get_logger(__name__)


@gateway
class SlurmLocal(Slurm):
    """
    Slurm gateway running the scheduler commands on the current host.
    """

    def __init__(self, timeout: int | None = None):
        """
        Args:
            timeout (int | None): Timeout for a single command in seconds.
                Defaults to `CFG.timeouts.command`.
        """
        self._timeout = timeout or CFG.timeouts.command

    @staticmethod
    def envName() -> str:
        return "local"

    @staticmethod
    def isAvailable() -> bool:
        """Check whether Slurm commands are available on the current host."""
        return shutil.which("sbatch") is not None

    def _execute(self, command: str) -> str:
        logger.debug(command)

        try:
            result = subprocess.run(
                ["bash"],
                input=command,
                text=True,
                check=False,
                capture_output=True,
                errors="replace",
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandError(
                f"Command '{command}' timed out after {self._timeout} seconds."
            ) from e

        if result.returncode != 0:
            raise CommandError(
                f"Command '{command}' failed with exit code {result.returncode}: {result.stderr.strip()}.",
                returncode=result.returncode,
                stderr=result.stderr,
            )

        return result.stdout
