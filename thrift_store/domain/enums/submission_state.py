from enum import Enum


class SubmissionState(str, Enum):
    """States of the submit action for a draft listing."""

    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    UPLOADING = "UPLOADING"
    SUBMITTING = "SUBMITTING"
    DONE = "DONE"
    FAILED = "FAILED"

    @property
    def is_in_flight(self) -> bool:
        """A submit is running and must not be started again."""
        return self in (
            SubmissionState.VALIDATING,
            SubmissionState.UPLOADING,
            SubmissionState.SUBMITTING,
        )

    @property
    def is_settled(self) -> bool:
        return self in (SubmissionState.DONE, SubmissionState.FAILED)
