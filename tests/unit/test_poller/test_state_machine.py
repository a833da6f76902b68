"""Unit tests for the poller freshness state machine."""

import pytest
from structlog.testing import capture_logs

from src.poller.state_machine import (
    Outcome,
    PollerState,
    PollerStateMachine,
    next_state,
)


class TestPollerState:
    """Tests for PollerState enum."""

    @pytest.mark.unit
    def test_all_states_defined(self) -> None:
        """Test that all expected states are defined."""
        assert {state.name for state in PollerState} == {
            "INITIAL",
            "FRESH",
            "STALE",
            "ERRORING",
        }

    @pytest.mark.unit
    def test_values_are_lowercase_names(self) -> None:
        """Test that state values are the lowercase names."""
        for state in PollerState:
            assert state.value == state.name.lower()


class TestNextState:
    """Tests for the transition function."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("current", "outcome", "expected"),
        [
            (PollerState.INITIAL, Outcome.SUCCESS, PollerState.FRESH),
            (PollerState.INITIAL, Outcome.FAILURE, PollerState.ERRORING),
            (PollerState.ERRORING, Outcome.SUCCESS, PollerState.FRESH),
            (PollerState.ERRORING, Outcome.FAILURE, PollerState.ERRORING),
            (PollerState.FRESH, Outcome.SUCCESS, PollerState.FRESH),
            (PollerState.FRESH, Outcome.FAILURE, PollerState.STALE),
            (PollerState.STALE, Outcome.SUCCESS, PollerState.FRESH),
            (PollerState.STALE, Outcome.FAILURE, PollerState.STALE),
        ],
    )
    def test_transition(
        self,
        current: PollerState,
        outcome: Outcome,
        expected: PollerState,
    ) -> None:
        """Test every state and outcome pair."""
        assert next_state(current, outcome) == expected

    @pytest.mark.unit
    def test_never_returns_to_initial(self) -> None:
        """Test that INITIAL is not reachable once left."""
        for state in PollerState:
            for outcome in Outcome:
                assert next_state(state, outcome) != PollerState.INITIAL


class TestPollerStateMachine:
    """Tests for PollerStateMachine."""

    @pytest.mark.unit
    def test_initial_state(self) -> None:
        """Test that a new machine starts INITIAL."""
        machine = PollerStateMachine("http://example.com/")

        assert machine.state == PollerState.INITIAL
        assert not machine.has_succeeded

    @pytest.mark.unit
    def test_failure_before_success_is_erroring(self) -> None:
        """Test that failing without prior success means ERRORING."""
        machine = PollerStateMachine("http://example.com/")

        assert machine.fail() == PollerState.ERRORING
        assert machine.fail() == PollerState.ERRORING
        assert not machine.has_succeeded

    @pytest.mark.unit
    def test_failure_after_success_is_stale(self) -> None:
        """Test that failing after a success means STALE."""
        machine = PollerStateMachine("http://example.com/")
        machine.succeed()

        assert machine.fail() == PollerState.STALE
        assert machine.has_succeeded
        assert machine.succeed() == PollerState.FRESH

    @pytest.mark.unit
    def test_custom_initial_state(self) -> None:
        """Test starting from a given state."""
        machine = PollerStateMachine("http://example.com/", PollerState.FRESH)

        assert machine.fail() == PollerState.STALE

    @pytest.mark.unit
    def test_logs_changes_only(self) -> None:
        """Test that only actual transitions are logged."""
        machine = PollerStateMachine("http://example.com/")

        with capture_logs() as logs:
            machine.succeed()
            machine.succeed()
            machine.fail()

        transitions = [e for e in logs if e["event"] == "state_transition"]
        assert [(e["from_state"], e["to_state"]) for e in transitions] == [
            ("initial", "fresh"),
            ("fresh", "stale"),
        ]
        assert transitions[0]["url"] == "http://example.com/"
