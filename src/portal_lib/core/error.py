# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Exception types used throughout portal.

This module defines the portal-specific exceptions: transport-level command
failures, the submission, cancellation and status-query errors raised by
scheduler gateways, job-suitability errors, and job-store errors. Each
exception carries an associated exit code used by portal commands to report
failures consistently.
"""

from .config import CFG


class PortalError(Exception):
    """Common exception type for all recoverable portal errors."""

    exit_code = CFG.exit_codes.default


class CommandError(PortalError):
    """
    Raised when a scheduler command could not be executed successfully.

    Covers non-zero exit codes, transport failures, and timeouts.
    """

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class SubmissionExecError(PortalError):
    """Raised when the submission command fails."""

    pass


class SubmissionParseError(PortalError):
    """Raised when the job id cannot be found in the output of a successful submission."""

    pass


class CancelExecError(PortalError):
    """Raised when the cancellation command fails."""

    pass


class StatusQueryError(PortalError):
    """Raised when the status of a job cannot be obtained from the scheduler."""

    pass


class JobNotFoundError(StatusQueryError):
    """Raised when the scheduler has no record of the queried job."""

    pass


class JobNotSuitableError(PortalError):
    """Raised when a job is unsuitable for an operation."""

    pass


class JobStoreError(PortalError):
    """Raised when the job store cannot be read or written."""

    pass
