# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import sys

from .config import CFG
from .error import JobNotSuitableError
from .logger import get_logger
from .repeater import Repeater

logger = get_logger(__name__)


def handle_not_suitable_error(
    exception: BaseException,
    metadata: Repeater,
) -> None:
    """
    Handle cases where a job is unsuitable for a portal operation.
    """
    # if this is the only item, print exception as an error
    if len(metadata.items) == 1:
        logger.error(exception)
        print()
        sys.exit(CFG.exit_codes.default)

    # if this is one of many items, print exception as info
    logger.info(exception)

    # if all jobs were unsuitable
    if sum(
        isinstance(x, JobNotSuitableError) for x in metadata.encountered_errors.values()
    ) == len(metadata.items):
        logger.error("No suitable job.\n")
        sys.exit(CFG.exit_codes.default)


def handle_general_portal_error(
    exception: BaseException,
    metadata: Repeater,
) -> None:
    """
    Handle general portal errors that occur during a portal operation.
    """
    logger.error(exception)

    # if the operation failed for all items
    if len(metadata.items) == len(metadata.encountered_errors):
        print()
        sys.exit(CFG.exit_codes.default)
