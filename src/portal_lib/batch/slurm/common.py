# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Parsers of the output of Slurm commands.

All functions are pure: they take the text printed by `sbatch`, `squeue`,
`sacct`, or `sinfo` and convert it into portal types.
"""

import re
from datetime import datetime

from portal_lib.batch.interface.status import ExternalStatus, QueueInfo
from portal_lib.core.config import CFG
from portal_lib.core.error import (
    JobNotFoundError,
    StatusQueryError,
    SubmissionParseError,
)
from portal_lib.core.logger import get_logger
from portal_lib.properties.states import JobStatus

logger = get_logger(__name__)

# fields requested from squeue
SQUEUE_FIELDS = "State,StartTime,EndTime,ExitCode"

# fields requested from sacct
SACCT_FIELDS = "State,Start,End,ExitCode"

# fields requested from sinfo
SINFO_FIELDS = "PartitionName,StateCompact,Nodes,CPUs"

# values Slurm prints in place of a timestamp that is not known
SLURM_UNKNOWN_TIMES = {"Unknown", "None", "N/A", "NONE", ""}

_SUBMIT_PATTERN = re.compile(r"Submitted batch job (\d+)")


def parse_submit_output(output: str) -> str:
    """
    Extract the job id from the output of `sbatch`.

    Args:
        output (str): Standard output of a successful `sbatch` call.

    Returns:
        str: The job id assigned by Slurm.

    Raises:
        SubmissionParseError: If the output does not contain a job id.
    """
    if match := _SUBMIT_PATTERN.search(output):
        return match.group(1)

    raise SubmissionParseError(
        f"Could not find the job id in the output of sbatch: '{output.strip()}'."
    )


def parse_slurm_datetime(value: str) -> datetime | None:
    """
    Convert a Slurm timestamp into a datetime.

    Returns None for the placeholders Slurm uses for unknown times.

    Raises:
        ValueError: If the value is neither a placeholder nor a valid timestamp.
    """
    value = value.strip()
    if value in SLURM_UNKNOWN_TIMES:
        return None

    return datetime.strptime(value, CFG.date_formats.slurm)


def live_state_to_status(state: str) -> JobStatus:
    """
    Map a state printed by `squeue` onto a portal state.

    Both full names (RUNNING) and compact codes (R) are recognized.
    Unrecognized states are treated as QUEUED.
    """
    if "RUNNING" in state or state == "R":
        return JobStatus.RUNNING
    if "PENDING" in state or state == "PD":
        return JobStatus.QUEUED
    if "COMPLETED" in state or state == "CD":
        return JobStatus.COMPLETED
    if "FAILED" in state or state == "F":
        return JobStatus.FAILED
    if "CANCELLED" in state or state == "CA":
        return JobStatus.CANCELLED
    return JobStatus.QUEUED


def accounting_state_to_status(state: str) -> JobStatus:
    """
    Map a state printed by `sacct` onto a portal state.

    Unrecognized states are treated as QUEUED.
    """
    if "COMPLETED" in state:
        return JobStatus.COMPLETED
    if "FAILED" in state or "TIMEOUT" in state:
        return JobStatus.FAILED
    if "CANCELLED" in state:
        return JobStatus.CANCELLED
    if "RUNNING" in state:
        return JobStatus.RUNNING
    return JobStatus.QUEUED


def parse_squeue_output(output: str) -> ExternalStatus | None:
    """
    Parse the output of `squeue -j <id> --Format=State,StartTime,EndTime,ExitCode --noheader`.

    Only the state is taken from the output, except for running jobs, for which
    the start time is also returned if it can be parsed. Start times of pending
    jobs are only estimates and are ignored.

    Args:
        output (str): Standard output of squeue.

    Returns:
        ExternalStatus | None: The state of the job or None if squeue printed nothing.
    """
    parts = output.split()
    if not parts:
        return None

    status = live_state_to_status(parts[0])
    start_time = None
    if status == JobStatus.RUNNING and len(parts) > 1:
        try:
            start_time = parse_slurm_datetime(parts[1])
        except ValueError:
            logger.debug(f"Ignoring unparsable start time '{parts[1]}' in squeue output.")

    return ExternalStatus(status=status, start_time=start_time)


def parse_sacct_output(output: str) -> ExternalStatus:
    """
    Parse the output of `sacct -j <id> --format=State,Start,End,ExitCode --noheader --parsable2`.

    Only the first line (the job allocation) is considered.
    The exit code is the integer preceding the ':' separator.

    Args:
        output (str): Standard output of sacct.

    Returns:
        ExternalStatus: The state of the job.

    Raises:
        JobNotFoundError: If sacct printed nothing.
        StatusQueryError: If the line cannot be parsed.
    """
    lines = output.strip().splitlines()
    if not lines:
        raise JobNotFoundError("Job is not known to sacct.")

    line = lines[0].strip()
    fields = line.split("|")
    if len(fields) < 4:
        raise StatusQueryError(f"Unexpected sacct output: '{line}'.")

    state, start, end, exit_code_str = (f.strip() for f in fields[:4])

    try:
        start_time = parse_slurm_datetime(start)
        end_time = parse_slurm_datetime(end)
    except ValueError as e:
        raise StatusQueryError(f"Could not parse timestamps in sacct output '{line}': {e}.") from e

    exit_code = None
    if exit_code_str:
        try:
            exit_code = int(exit_code_str.split(":")[0])
        except ValueError as e:
            raise StatusQueryError(
                f"Could not parse exit code '{exit_code_str}' in sacct output."
            ) from e

    status = accounting_state_to_status(state)
    reason = (
        f"Slurm reported state '{state}'."
        if status in {JobStatus.FAILED, JobStatus.CANCELLED}
        else None
    )

    return ExternalStatus(
        status=status,
        start_time=start_time,
        end_time=end_time,
        exit_code=exit_code,
        reason=reason,
    )


def parse_sinfo_output(output: str) -> list[QueueInfo]:
    """
    Parse the output of `sinfo --Format=PartitionName,StateCompact,Nodes,CPUs --noheader`.

    Every non-empty line describes one partition. Counts that are not numbers become 0.
    """
    queues = []
    for line in output.strip().splitlines():
        parts = line.split()
        if not parts:
            continue

        queues.append(
            QueueInfo(
                name=parts[0],
                state=parts[1] if len(parts) > 1 else "",
                nodes=_to_count(parts[2]) if len(parts) > 2 else 0,
                cpus=_to_count(parts[3]) if len(parts) > 3 else 0,
            )
        )

    logger.debug(f"Parsed {len(queues)} queues from sinfo output.")
    return queues


def _to_count(value: str) -> int:
    """Convert a count printed by Slurm to int, falling back to 0."""
    match = re.match(r"\d+", value)
    return int(match.group(0)) if match else 0
