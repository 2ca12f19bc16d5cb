# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import shlex
from pathlib import Path

from portal_lib.batch.interface import ExternalStatus, QueueInfo, SchedulerGateway
from portal_lib.batch.interface.meta import GatewayMeta
from portal_lib.core.error import (
    CancelExecError,
    CommandError,
    JobNotFoundError,
    StatusQueryError,
    SubmissionExecError,
)
from portal_lib.core.logger import get_logger

from .common import (
    SACCT_FIELDS,
    SINFO_FIELDS,
    SQUEUE_FIELDS,
    parse_sacct_output,
    parse_sinfo_output,
    parse_squeue_output,
    parse_submit_output,
)

logger = get_logger(__name__)


class Slurm(SchedulerGateway, metaclass=GatewayMeta):
    """
    Gateway to the Slurm batch scheduler.

    Builds Slurm commands and parses their output. Subclasses only decide
    how the commands are executed (see `_execute`).
    """

    def submit(self, script: Path) -> str:
        command = Slurm._translateSubmit(script)
        try:
            output = self._execute(command)
        except CommandError as e:
            raise SubmissionExecError(
                f"Failed to submit script '{script}': {e}"
            ) from e

        job_id = parse_submit_output(output)
        logger.debug(f"Script '{script}' submitted as Slurm job '{job_id}'.")
        return job_id

    def cancel(self, external_id: str) -> None:
        command = Slurm._translateCancel(external_id)
        try:
            self._execute(command)
        except CommandError as e:
            raise CancelExecError(
                f"Failed to cancel Slurm job '{external_id}': {e}"
            ) from e

    def queryStatus(self, external_id: str) -> ExternalStatus:
        # squeue only knows jobs that are pending, running, or recently finished
        try:
            output = self._execute(Slurm._translateSqueue(external_id))
        except CommandError as e:
            logger.debug(
                f"squeue failed for job '{external_id}' ({e}), falling back to sacct."
            )
        else:
            if (status := parse_squeue_output(output)) is not None:
                return status

        try:
            output = self._execute(Slurm._translateSacct(external_id))
        except CommandError as e:
            raise StatusQueryError(
                f"Could not query the state of Slurm job '{external_id}': {e}"
            ) from e

        if not output.strip():
            raise JobNotFoundError(f"Slurm job '{external_id}' does not exist.")

        return parse_sacct_output(output)

    def listQueues(self) -> list[QueueInfo]:
        try:
            output = self._execute(Slurm._translateSinfo())
        except CommandError as e:
            logger.warning(f"Could not retrieve information about queues: {e}")
            return []

        return parse_sinfo_output(output)

    @staticmethod
    def _translateSubmit(script: Path) -> str:
        """Return the command submitting the script."""
        return f"sbatch {shlex.quote(str(script))}"

    @staticmethod
    def _translateCancel(external_id: str) -> str:
        """Return the command cancelling the job."""
        return f"scancel {shlex.quote(external_id)}"

    @staticmethod
    def _translateSqueue(external_id: str) -> str:
        """Return the command obtaining the live state of the job."""
        return f"squeue -j {shlex.quote(external_id)} --Format={SQUEUE_FIELDS} --noheader"

    @staticmethod
    def _translateSacct(external_id: str) -> str:
        """Return the command obtaining the accounting record of the job."""
        return f"sacct -j {shlex.quote(external_id)} --allocations --format={SACCT_FIELDS} --noheader --parsable2"

    @staticmethod
    def _translateSinfo() -> str:
        """Return the command listing the partitions."""
        return f"sinfo --Format={SINFO_FIELDS} --noheader"
