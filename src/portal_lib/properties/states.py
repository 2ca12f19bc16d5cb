# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from enum import Enum
from typing import Self

from portal_lib.core.config import CFG


class JobStatus(Enum):
    """
    Lifecycle state of a job as tracked by portal.

    States are ordered: SUBMITTED < QUEUED < RUNNING < {COMPLETED, FAILED, CANCELLED}.
    The three final states are terminal and share the highest rank.
    """

    SUBMITTED = 1
    QUEUED = 2
    RUNNING = 3
    COMPLETED = 4
    FAILED = 5
    CANCELLED = 6

    def __str__(self) -> str:
        """
        Return the uppercase name of the state.

        Returns:
            str: The name of the state.
        """
        return self.name

    @classmethod
    def fromStr(cls, s: str) -> Self:
        """
        Convert a string to the corresponding JobStatus enum variant.

        Args:
            s (str): String representation of the state (case-insensitive).

        Returns:
            JobStatus: Corresponding enum variant.

        Raises:
            ValueError: If the string does not name a job status.
        """
        try:
            return cls[s.upper()]
        except KeyError as e:
            raise ValueError(f"Unknown job status '{s}'.") from e

    @classmethod
    def terminal(cls) -> frozenset["JobStatus"]:
        """Return the set of terminal states."""
        return frozenset({cls.COMPLETED, cls.FAILED, cls.CANCELLED})

    @classmethod
    def active(cls) -> frozenset["JobStatus"]:
        """Return the set of non-terminal states."""
        return frozenset(set(cls) - cls.terminal())

    @property
    def rank(self) -> int:
        """Position of the state in the lifecycle ordering."""
        return {
            JobStatus.SUBMITTED: 0,
            JobStatus.QUEUED: 1,
            JobStatus.RUNNING: 2,
            JobStatus.COMPLETED: 3,
            JobStatus.FAILED: 3,
            JobStatus.CANCELLED: 3,
        }[self]

    def toCode(self) -> str:
        """
        Return a one-letter code of the state used in compact job listings.
        """
        return {
            JobStatus.SUBMITTED: "S",
            JobStatus.QUEUED: "Q",
            JobStatus.RUNNING: "R",
            JobStatus.COMPLETED: "C",
            JobStatus.FAILED: "F",
            JobStatus.CANCELLED: "X",
        }[self]

    def isTerminal(self) -> bool:
        """Check whether no further transition is permitted from this state."""
        return self in JobStatus.terminal()

    @property
    def color(self) -> str:
        """
        Return the display color associated with this JobStatus.

        Returns:
            str: A string representing the color for presentation purposes.
        """
        return getattr(CFG.state_colors, self.name.lower())


class EventKind(Enum):
    """
    Kind of a job event recorded whenever a job changes state.
    """

    SUBMITTED = 1
    STARTED = 2
    COMPLETED = 3
    FAILED = 4
    CANCELLED = 5

    def __str__(self) -> str:
        return self.name

    @classmethod
    def fromStr(cls, s: str) -> Self:
        """
        Convert a string to the corresponding EventKind enum variant.

        Raises:
            ValueError: If the string does not name an event kind.
        """
        try:
            return cls[s.upper()]
        except KeyError as e:
            raise ValueError(f"Unknown event kind '{s}'.") from e

    @classmethod
    def forStatus(cls, status: JobStatus) -> Self:
        """
        Return the event kind recorded when a job enters the given state.

        Args:
            status (JobStatus): The state being entered.

        Returns:
            EventKind: The corresponding event kind.

        Raises:
            ValueError: If no event is associated with entering the state.
        """
        match status:
            case JobStatus.QUEUED:
                return cls.SUBMITTED
            case JobStatus.RUNNING:
                return cls.STARTED
            case JobStatus.COMPLETED:
                return cls.COMPLETED
            case JobStatus.FAILED:
                return cls.FAILED
            case JobStatus.CANCELLED:
                return cls.CANCELLED

        raise ValueError(f"No event is associated with entering the state '{status}'.")
