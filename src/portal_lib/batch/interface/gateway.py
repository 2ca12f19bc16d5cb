# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from abc import ABC, abstractmethod
from pathlib import Path

from portal_lib.core.logger import get_logger

from .status import ExternalStatus, QueueInfo

logger = get_logger(__name__)


class SchedulerGateway(ABC):
    """
    Abstract base class for scheduler integrations.

    A gateway owns all interaction with the scheduler's command-line surface:
    it builds the commands, runs them through its transport, and parses their
    output into portal types.

    Every operation raises a subclass of PortalError when encountering an error.
    """

    # exit code of ssh if connection fails
    SSH_FAIL = 255

    @staticmethod
    @abstractmethod
    def envName() -> str:
        """
        Return the name under which the gateway is registered.

        Returns:
            str: The gateway name.
        """

    @abstractmethod
    def submit(self, script: Path) -> str:
        """
        Submit a batch script to the scheduler.

        Args:
            script (Path): Path to the script on a filesystem visible to the scheduler.

        Returns:
            str: The identifier the scheduler assigned to the job.

        Raises:
            SubmissionExecError: If the submission command fails or times out.
            SubmissionParseError: If the job identifier cannot be found in the output.
        """

    @abstractmethod
    def cancel(self, external_id: str) -> None:
        """
        Request cancellation of a job. Does not wait for the job to terminate.

        Args:
            external_id (str): Identifier of the job assigned by the scheduler.

        Raises:
            CancelExecError: If the cancellation command fails or times out.
        """

    @abstractmethod
    def queryStatus(self, external_id: str) -> ExternalStatus:
        """
        Obtain the current state of a job from the scheduler.

        Args:
            external_id (str): Identifier of the job assigned by the scheduler.

        Returns:
            ExternalStatus: State of the job mapped onto portal states.

        Raises:
            JobNotFoundError: If the scheduler has no record of the job.
            StatusQueryError: If the state could not be obtained.
        """

    @abstractmethod
    def listQueues(self) -> list[QueueInfo]:
        """
        List the partitions of the scheduler.

        Returns an empty list if the partitions cannot be obtained.

        Returns:
            list[QueueInfo]: Information about the individual partitions.
        """

    @abstractmethod
    def _execute(self, command: str) -> str:
        """
        Run a shell command through the gateway's transport.

        Args:
            command (str): The command to run.

        Returns:
            str: Standard output of the command.

        Raises:
            CommandError: If the command exits with a non-zero code,
                the transport fails, or the command times out.
        """
