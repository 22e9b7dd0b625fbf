"""
Detection Job State Machine

Defines the lifecycle states of an asynchronous text detection job
and the transitions the controller is allowed to make.

    SUBMITTED -> IN_PROGRESS -> {SUCCEEDED, FAILED}
"""

from enum import Enum
from typing import Final

import structlog

from textract_trigger.exceptions import InvalidJobTransitionError

log = structlog.get_logger()


class JobStatus(str, Enum):
    """
    Detection job status enum.

    States are mutually exclusive. SUCCEEDED and FAILED are terminal.
    """

    SUBMITTED = "SUBMITTED"
    """Job accepted by Textract, status not yet observed."""

    IN_PROGRESS = "IN_PROGRESS"
    """Textract reports the job as still running."""

    SUCCEEDED = "SUCCEEDED"
    """Job finished, result pages are available."""

    FAILED = "FAILED"
    """Job finished without usable results."""

    @property
    def is_terminal(self) -> bool:
        """Check if this is a terminal state (no outgoing transitions)."""
        return self in TERMINAL_STATES

    @classmethod
    def from_string(cls, value: str) -> "JobStatus":
        """Convert string to JobStatus enum."""
        try:
            return cls(value.upper())
        except ValueError as e:
            raise ValueError(
                f"Invalid job status: '{value}'. "
                f"Valid values are: {[s.value for s in cls]}"
            ) from e

    @classmethod
    def from_service(cls, value: str | None) -> "JobStatus":
        """
        Map a Textract JobStatus string onto the controller's states.

        Anything that is neither IN_PROGRESS nor SUCCEEDED is a failure,
        including PARTIAL_SUCCESS and values Textract may add later.
        """
        if value == "IN_PROGRESS":
            return cls.IN_PROGRESS
        if value == "SUCCEEDED":
            return cls.SUCCEEDED
        if value != "FAILED":
            log.warning("job_status_treated_as_failed", service_status=value)
        return cls.FAILED


TERMINAL_STATES: Final[frozenset[JobStatus]] = frozenset({
    JobStatus.SUCCEEDED,
    JobStatus.FAILED,
})

# Key: current status, Value: set of allowed next statuses
VALID_TRANSITIONS: Final[dict[JobStatus, frozenset[JobStatus]]] = {
    JobStatus.SUBMITTED: frozenset({
        JobStatus.IN_PROGRESS,
        JobStatus.SUCCEEDED,
        JobStatus.FAILED,
    }),
    JobStatus.IN_PROGRESS: frozenset({
        JobStatus.SUCCEEDED,
        JobStatus.FAILED,
    }),
    JobStatus.SUCCEEDED: frozenset(),  # Terminal
    JobStatus.FAILED: frozenset(),     # Terminal
}


def validate_transition(
    current_status: JobStatus | str,
    new_status: JobStatus | str,
    *,
    raise_on_invalid: bool = True,
) -> bool:
    """
    Validate that a status transition is allowed.

    Staying in a non-terminal state (another IN_PROGRESS poll) is not a
    transition and is always valid.

    Args:
        current_status: Current job status
        new_status: Observed next status
        raise_on_invalid: If True, raise exception on invalid transition

    Returns:
        True if transition is valid

    Raises:
        InvalidJobTransitionError: If transition is invalid and raise_on_invalid=True
    """
    if isinstance(current_status, str):
        current_status = JobStatus.from_string(current_status)
    if isinstance(new_status, str):
        new_status = JobStatus.from_string(new_status)

    if current_status == new_status and not current_status.is_terminal:
        return True

    allowed = VALID_TRANSITIONS.get(current_status, frozenset())
    is_valid = new_status in allowed

    if not is_valid and raise_on_invalid:
        log.warning(
            "invalid_job_transition",
            current_status=current_status.value,
            new_status=new_status.value,
            allowed_transitions=sorted(s.value for s in allowed),
        )
        raise InvalidJobTransitionError(
            current_status=current_status.value,
            new_status=new_status.value,
            allowed_transitions=sorted(s.value for s in allowed),
        )

    return is_valid
