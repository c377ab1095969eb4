from thrift_store.domain.enums.submission_state import SubmissionState


# Mapping of valid transitions: from_state -> set of allowed to_states
VALID_TRANSITIONS: dict[SubmissionState, frozenset[SubmissionState]] = {
    SubmissionState.IDLE: frozenset({SubmissionState.VALIDATING}),
    SubmissionState.VALIDATING: frozenset({SubmissionState.UPLOADING, SubmissionState.FAILED}),
    SubmissionState.UPLOADING: frozenset({SubmissionState.SUBMITTING, SubmissionState.FAILED}),
    SubmissionState.SUBMITTING: frozenset({SubmissionState.DONE, SubmissionState.FAILED}),
    # Settled states only leave when the user triggers a new submit
    SubmissionState.DONE: frozenset({SubmissionState.IDLE}),
    SubmissionState.FAILED: frozenset({SubmissionState.IDLE}),
}


class InvalidStateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: SubmissionState, to_state: SubmissionState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid transition from {from_state.value} to {to_state.value}. "
            f"Allowed transitions: {sorted(s.value for s in VALID_TRANSITIONS.get(from_state, frozenset()))}"
        )


class SubmissionStateMachine:
    """
    Validates and enforces transitions of the submit action.

    Stateless: call can_transition() or validate_transition() with explicit states.
    """

    def can_transition(self, from_state: SubmissionState, to_state: SubmissionState) -> bool:
        """Return True if transitioning from_state → to_state is permitted."""
        return to_state in VALID_TRANSITIONS.get(from_state, frozenset())

    def validate_transition(self, from_state: SubmissionState, to_state: SubmissionState) -> None:
        """Raise InvalidStateTransitionError if the transition is not permitted."""
        if not self.can_transition(from_state, to_state):
            raise InvalidStateTransitionError(from_state, to_state)

    def get_allowed_transitions(self, from_state: SubmissionState) -> frozenset[SubmissionState]:
        """Return the set of states reachable from from_state."""
        return VALID_TRANSITIONS.get(from_state, frozenset())
