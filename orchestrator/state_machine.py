"""State machine implementation for scaffold orchestration."""

from dataclasses import dataclass
from datetime import datetime

from schemas.run_state import RunState, RunStatus, Stage
from scaffolding.errors import ScaffoldError


class InvalidTransition(ScaffoldError):
    """Raised when a stage is entered out of order."""

    pass


@dataclass(frozen=True)
class Transition:
    """Defines a valid state transition."""

    from_stage: Stage
    to_stage: Stage


class StateMachine:
    """State machine for a scaffolding run.

    Stages run strictly in sequence and are never revisited. The
    overwrite decision is only entered when the target has content, and
    template selection is skipped when the template was given up front.
    """

    TRANSITIONS: list[Transition] = [
        # Happy path
        Transition(Stage.INIT, Stage.RESOLVING_TARGET),
        Transition(Stage.RESOLVING_TARGET, Stage.SEARCHING_TEMPLATES),
        Transition(Stage.SEARCHING_TEMPLATES, Stage.SELECTING_TEMPLATE),
        Transition(Stage.SELECTING_TEMPLATE, Stage.AWAITING_OVERWRITE_DECISION),
        Transition(Stage.AWAITING_OVERWRITE_DECISION, Stage.FETCHING_ARCHIVE),
        Transition(Stage.FETCHING_ARCHIVE, Stage.COLLECTING_VARIABLES),
        Transition(Stage.COLLECTING_VARIABLES, Stage.INSTANTIATING),
        Transition(Stage.INSTANTIATING, Stage.DONE),
        # No conflict in the target directory
        Transition(Stage.SELECTING_TEMPLATE, Stage.FETCHING_ARCHIVE),
        # Template given on the command line
        Transition(Stage.SEARCHING_TEMPLATES, Stage.AWAITING_OVERWRITE_DECISION),
        Transition(Stage.SEARCHING_TEMPLATES, Stage.FETCHING_ARCHIVE),
    ]

    TERMINAL_STAGES = {Stage.DONE, Stage.CANCELLED, Stage.FAILED}

    def __init__(self, state: RunState | None = None) -> None:
        """Initialize state machine.

        Args:
            state: Initial run state (default: fresh state)
        """
        self.state = state or RunState()

        self._transition_map: dict[Stage, list[Stage]] = {}
        for t in self.TRANSITIONS:
            self._transition_map.setdefault(t.from_stage, []).append(t.to_stage)

    def can_transition(self, to_stage: Stage) -> bool:
        """Check if transition to target stage is valid.

        Args:
            to_stage: Target stage

        Returns:
            True if transition is valid
        """
        current = self.state.current_stage
        if current in self.TERMINAL_STAGES or to_stage in self.state.visited:
            return False
        if to_stage in (Stage.CANCELLED, Stage.FAILED):
            return True
        return to_stage in self._transition_map.get(current, [])

    def transition(self, to_stage: Stage) -> None:
        """Move to a new stage.

        Args:
            to_stage: Target stage

        Raises:
            InvalidTransition: If the move is out of order or a revisit
        """
        if not self.can_transition(to_stage):
            raise InvalidTransition(
                f"Cannot move from {self.state.current_stage.value} to {to_stage.value}"
            )

        if self.state.status == RunStatus.PENDING:
            self.state.status = RunStatus.RUNNING
            self.state.started_at = datetime.now()

        self.state.mark_stage_started(to_stage)

        if to_stage in self.TERMINAL_STAGES:
            self.state.completed_at = datetime.now()
            self.state.status = {
                Stage.DONE: RunStatus.COMPLETED,
                Stage.CANCELLED: RunStatus.CANCELLED,
                Stage.FAILED: RunStatus.FAILED,
            }[to_stage]

    def cancel(self, reason: str) -> None:
        """End the run as cancelled by the user."""
        self.state.error = reason
        self.transition(Stage.CANCELLED)

    def fail(self, error: str) -> None:
        """End the run as failed."""
        self.state.error = error
        self.transition(Stage.FAILED)

    def is_completed(self) -> bool:
        return self.state.current_stage == Stage.DONE

    def is_finished(self) -> bool:
        return self.state.current_stage in self.TERMINAL_STAGES
