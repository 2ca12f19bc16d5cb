# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from portal_lib.properties.states import JobStatus


def transition(current: JobStatus, observed: JobStatus) -> JobStatus | None:
    """
    Decide whether a job moves to an observed state.

    A job only ever moves forward: a transition fires if the current state is not
    terminal and the observed state ranks strictly above it. Observations equal to
    or behind the current state are ignored, which makes reconciliation idempotent.

    Args:
        current (JobStatus): State of the job according to portal.
        observed (JobStatus): State reported by the scheduler.

    Returns:
        JobStatus | None: The new state of the job or None if no transition fires.
    """
    if current.isTerminal() or observed == current:
        return None

    if observed.rank > current.rank:
        return observed

    return None
