"""Unit tests for the submission state machine."""
import pytest

from thrift_store.domain.enums.submission_state import SubmissionState
from thrift_store.domain.state_machine.submission_state_machine import (
    InvalidStateTransitionError,
    SubmissionStateMachine,
)


@pytest.fixture()
def sm() -> SubmissionStateMachine:
    return SubmissionStateMachine()


class TestValidTransitions:
    def test_idle_to_validating(self, sm: SubmissionStateMachine) -> None:
        assert sm.can_transition(SubmissionState.IDLE, SubmissionState.VALIDATING) is True

    def test_validating_to_uploading(self, sm: SubmissionStateMachine) -> None:
        assert sm.can_transition(SubmissionState.VALIDATING, SubmissionState.UPLOADING) is True

    def test_uploading_to_submitting(self, sm: SubmissionStateMachine) -> None:
        assert sm.can_transition(SubmissionState.UPLOADING, SubmissionState.SUBMITTING) is True

    def test_submitting_to_done(self, sm: SubmissionStateMachine) -> None:
        assert sm.can_transition(SubmissionState.SUBMITTING, SubmissionState.DONE) is True

    @pytest.mark.parametrize(
        "stage",
        [SubmissionState.VALIDATING, SubmissionState.UPLOADING, SubmissionState.SUBMITTING],
    )
    def test_every_running_stage_can_fail(
        self, sm: SubmissionStateMachine, stage: SubmissionState
    ) -> None:
        assert sm.can_transition(stage, SubmissionState.FAILED) is True

    def test_failed_resets_to_idle(self, sm: SubmissionStateMachine) -> None:
        assert sm.can_transition(SubmissionState.FAILED, SubmissionState.IDLE) is True

    def test_done_resets_to_idle(self, sm: SubmissionStateMachine) -> None:
        assert sm.can_transition(SubmissionState.DONE, SubmissionState.IDLE) is True


class TestInvalidTransitions:
    def test_cannot_skip_validation(self, sm: SubmissionStateMachine) -> None:
        assert sm.can_transition(SubmissionState.IDLE, SubmissionState.UPLOADING) is False

    def test_cannot_submit_before_upload(self, sm: SubmissionStateMachine) -> None:
        assert sm.can_transition(SubmissionState.VALIDATING, SubmissionState.SUBMITTING) is False

    def test_idle_cannot_fail(self, sm: SubmissionStateMachine) -> None:
        assert sm.can_transition(SubmissionState.IDLE, SubmissionState.FAILED) is False

    def test_failed_does_not_resume_pipeline(self, sm: SubmissionStateMachine) -> None:
        for state in SubmissionState:
            if state != SubmissionState.IDLE:
                assert sm.can_transition(SubmissionState.FAILED, state) is False

    def test_done_cannot_fail(self, sm: SubmissionStateMachine) -> None:
        assert sm.can_transition(SubmissionState.DONE, SubmissionState.FAILED) is False


class TestValidateTransition:
    def test_valid_transition_does_not_raise(self, sm: SubmissionStateMachine) -> None:
        sm.validate_transition(SubmissionState.IDLE, SubmissionState.VALIDATING)  # no exception

    def test_invalid_transition_raises(self, sm: SubmissionStateMachine) -> None:
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            sm.validate_transition(SubmissionState.IDLE, SubmissionState.DONE)
        assert "IDLE" in str(exc_info.value)
        assert "DONE" in str(exc_info.value)


class TestGetAllowedTransitions:
    def test_validating_allowed(self, sm: SubmissionStateMachine) -> None:
        allowed = sm.get_allowed_transitions(SubmissionState.VALIDATING)
        assert allowed == frozenset({SubmissionState.UPLOADING, SubmissionState.FAILED})

    def test_failed_only_resets(self, sm: SubmissionStateMachine) -> None:
        assert sm.get_allowed_transitions(SubmissionState.FAILED) == frozenset(
            {SubmissionState.IDLE}
        )


class TestStateFlags:
    def test_in_flight_states(self) -> None:
        assert {s for s in SubmissionState if s.is_in_flight} == {
            SubmissionState.VALIDATING,
            SubmissionState.UPLOADING,
            SubmissionState.SUBMITTING,
        }

    def test_settled_states(self) -> None:
        assert {s for s in SubmissionState if s.is_settled} == {
            SubmissionState.DONE,
            SubmissionState.FAILED,
        }
