"""Tests for scaffold run stage ordering."""

from __future__ import annotations

import pytest

from orchestrator.state_machine import InvalidTransition, StateMachine
from schemas.run_state import RunStatus, Stage


HAPPY_PATH = [
    Stage.RESOLVING_TARGET,
    Stage.SEARCHING_TEMPLATES,
    Stage.SELECTING_TEMPLATE,
    Stage.AWAITING_OVERWRITE_DECISION,
    Stage.FETCHING_ARCHIVE,
    Stage.COLLECTING_VARIABLES,
    Stage.INSTANTIATING,
    Stage.DONE,
]


def _advance(sm: StateMachine, stages: list[Stage]) -> None:
    for stage in stages:
        sm.transition(stage)


class TestStateMachine:
    def test_initial_state(self) -> None:
        sm = StateMachine()

        assert sm.state.current_stage == Stage.INIT
        assert sm.state.status == RunStatus.PENDING
        assert not sm.is_finished()

    def test_full_sequence(self) -> None:
        sm = StateMachine()

        _advance(sm, HAPPY_PATH)

        assert sm.is_completed()
        assert sm.state.status == RunStatus.COMPLETED
        assert sm.state.visited == HAPPY_PATH
        assert sm.state.started_at is not None
        assert sm.state.completed_at >= sm.state.started_at

    def test_overwrite_decision_is_optional(self) -> None:
        sm = StateMachine()

        _advance(sm, [s for s in HAPPY_PATH if s != Stage.AWAITING_OVERWRITE_DECISION])

        assert sm.is_completed()

    def test_selection_skipped_for_given_template(self) -> None:
        sm = StateMachine()

        _advance(sm, [Stage.RESOLVING_TARGET, Stage.SEARCHING_TEMPLATES, Stage.FETCHING_ARCHIVE])

        assert sm.state.current_stage == Stage.FETCHING_ARCHIVE

    def test_skipping_ahead_is_rejected(self) -> None:
        sm = StateMachine()
        sm.transition(Stage.RESOLVING_TARGET)

        with pytest.raises(InvalidTransition):
            sm.transition(Stage.INSTANTIATING)

    def test_stages_are_not_revisited(self) -> None:
        sm = StateMachine()
        _advance(sm, HAPPY_PATH[:3])

        assert not sm.can_transition(Stage.SEARCHING_TEMPLATES)
        with pytest.raises(InvalidTransition):
            sm.transition(Stage.RESOLVING_TARGET)

    def test_cancel_from_overwrite_decision(self) -> None:
        sm = StateMachine()
        _advance(sm, HAPPY_PATH[:4])

        sm.cancel("Operation cancelled")

        assert sm.state.current_stage == Stage.CANCELLED
        assert sm.state.status == RunStatus.CANCELLED
        assert sm.state.error == "Operation cancelled"
        assert sm.is_finished()
        assert not sm.is_completed()

    def test_fail_from_any_stage(self) -> None:
        sm = StateMachine()
        _advance(sm, HAPPY_PATH[:5])

        sm.fail("download failed")

        assert sm.state.status == RunStatus.FAILED
        assert sm.state.completed_at is not None

    def test_terminal_stage_is_final(self) -> None:
        sm = StateMachine()
        sm.transition(Stage.RESOLVING_TARGET)
        sm.cancel("Operation cancelled")

        for stage in (Stage.SEARCHING_TEMPLATES, Stage.FAILED, Stage.DONE):
            assert not sm.can_transition(stage)
        with pytest.raises(InvalidTransition):
            sm.fail("late")
