# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import subprocess

from portal_lib.batch.interface.meta import gateway
from portal_lib.core.config import CFG
from portal_lib.core.error import CommandError, PortalError
from portal_lib.core.logger import get_logger

from .slurm import Slurm

logger = get_logger(__name__)


@gateway
class SlurmSSH(Slurm):
    """
    Slurm gateway running the scheduler commands on a remote host over ssh.

    Authentication uses a private key; password authentication is never attempted.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        user: str | None = None,
        key_path: str | None = None,
        timeout: int | None = None,
    ):
        """
        Args:
            host (str | None): Host to connect to. Defaults to `CFG.scheduler.ssh_host`.
            port (int | None): Port of the ssh server. Defaults to `CFG.scheduler.ssh_port`.
            user (str | None): User to log in as. Defaults to `CFG.scheduler.ssh_user`.
            key_path (str | None): Private key. Defaults to `CFG.scheduler.ssh_key_path`.
            timeout (int | None): Timeout for a single command in seconds.
                Defaults to `CFG.timeouts.command`.

        Raises:
            PortalError: If no host is configured.
        """
        self._host = host or CFG.scheduler.ssh_host
        if not self._host:
            raise PortalError(
                "No ssh host configured for the scheduler. Set 'scheduler.ssh_host' in the portal config."
            )

        self._port = port or CFG.scheduler.ssh_port
        self._user = user or CFG.scheduler.ssh_user
        self._key_path = key_path or CFG.scheduler.ssh_key_path
        self._timeout = timeout or CFG.timeouts.command

    @staticmethod
    def envName() -> str:
        return "ssh"

    def _execute(self, command: str) -> str:
        ssh_command = self._translateSSHCommand(command)
        logger.debug(f"Using ssh: '{' '.join(ssh_command)}'")

        try:
            result = subprocess.run(
                ssh_command,
                text=True,
                check=False,
                capture_output=True,
                errors="replace",
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandError(
                f"Command '{command}' on '{self._host}' timed out after {self._timeout} seconds."
            ) from e

        if result.returncode == SlurmSSH.SSH_FAIL:
            raise CommandError(
                f"Could not connect to '{self._host}': {result.stderr.strip()}.",
                returncode=result.returncode,
                stderr=result.stderr,
            )

        if result.returncode != 0:
            raise CommandError(
                f"Command '{command}' on '{self._host}' failed with exit code {result.returncode}: {result.stderr.strip()}.",
                returncode=result.returncode,
                stderr=result.stderr,
            )

        return result.stdout

    def _translateSSHCommand(self, command: str) -> list[str]:
        """
        Construct the ssh command running `command` on the configured host.
        """
        ssh_command = [
            "ssh",
            "-o PasswordAuthentication=no",  # never ask for password
            f"-o ConnectTimeout={CFG.timeouts.ssh}",
            "-q",  # suppress some SSH messages
            "-p",
            str(self._port),
        ]

        if self._key_path:
            ssh_command.extend(["-i", self._key_path])

        destination = f"{self._user}@{self._host}" if self._user else self._host
        ssh_command.extend([destination, command])

        return ssh_command
