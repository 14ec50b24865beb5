"""Generic State Machine for status transitions.

This module provides a reusable state machine pattern for managing
status transitions of media channels and assembled artifacts.

Example:
    # Define transitions
    CHANNEL_TRANSITIONS: TransitionMap[ChannelStatus] = {
        ChannelStatus.PENDING: [ChannelStatus.GENERATING],
        ChannelStatus.GENERATING: [ChannelStatus.COMPLETED, ChannelStatus.FAILED],
        ...
    }

    # Create state machine
    sm = StateMachine(ChannelStatus.PENDING, CHANNEL_TRANSITIONS)

    # Check and perform transitions
    if sm.can_transition(ChannelStatus.GENERATING):
        sm.transition(ChannelStatus.GENERATING)

    # Or use transition_to for simpler API
    sm.transition_to(ChannelStatus.COMPLETED)
"""

from enum import Enum
from typing import Generic, TypeVar

from docreel.core.exceptions import ValidationError

T = TypeVar("T", bound=str | Enum)

# Type alias for transition maps
TransitionMap = dict[T, list[T]]


class InvalidTransitionError(ValidationError):
    """Raised when an invalid state transition is attempted."""

    def __init__(
        self,
        current: T,
        target: T,
        allowed: list[T] | None = None,
        segment_id: str | None = None,
    ):
        self.current = current
        self.target = target
        self.allowed = allowed or []
        self.error_code = "INVALID_TRANSITION"
        allowed_str = ", ".join(str(s) for s in self.allowed) if self.allowed else "none"
        super().__init__(
            message=f"Invalid transition from '{current}' to '{target}'. "
            f"Allowed transitions: {allowed_str}",
            segment_id=segment_id,
            context={
                "current": str(current),
                "target": str(target),
                "allowed": [str(s) for s in self.allowed],
            },
        )


class StateMachine(Generic[T]):
    """Generic state machine for status transitions.

    Provides a type-safe way to manage status transitions with
    explicit allowed transitions defined upfront.

    Attributes:
        current: Current state
        transitions: Map of allowed transitions from each state

    Example:
        sm = StateMachine(
            initial=ArtifactState.ASSEMBLED,
            transitions={
                ArtifactState.ASSEMBLED: [ArtifactState.APPROVED],
                ArtifactState.APPROVED: [ArtifactState.EXPORTED, ArtifactState.ASSEMBLED],
                ArtifactState.EXPORTED: [],
            }
        )

        sm.transition_to(ArtifactState.APPROVED)  # OK
        sm.transition_to(ArtifactState.PREVIEWED)  # Raises InvalidTransitionError
    """

    def __init__(self, initial: T, transitions: TransitionMap[T], subject: str | None = None):
        """Initialize state machine.

        Args:
            initial: Initial state
            transitions: Map of state -> list of allowed target states
            subject: Identifier of the entity being tracked (used in errors)
        """
        self._current = initial
        self._transitions = transitions
        self._subject = subject

    @property
    def current(self) -> T:
        """Get current state."""
        return self._current

    @property
    def allowed_transitions(self) -> list[T]:
        """Get list of states we can transition to from current state."""
        return self._transitions.get(self._current, [])

    def can_transition(self, target: T) -> bool:
        """Check if transition to target state is allowed.

        Args:
            target: Target state to check

        Returns:
            True if transition is allowed, False otherwise
        """
        return target in self.allowed_transitions

    def transition(self, target: T) -> None:
        """Perform transition to target state.

        Args:
            target: Target state

        Raises:
            InvalidTransitionError: If transition is not allowed
        """
        if not self.can_transition(target):
            raise InvalidTransitionError(
                current=self._current,
                target=target,
                allowed=self.allowed_transitions,
                segment_id=self._subject,
            )
        self._current = target

    def transition_to(self, target: T) -> T:
        """Perform transition and return new state.

        Args:
            target: Target state

        Returns:
            The new current state (same as target)

        Raises:
            InvalidTransitionError: If transition is not allowed
        """
        self.transition(target)
        return self._current

    def reset(self, state: T) -> None:
        """Reset state machine to a specific state (bypass transition rules).

        Use with caution - this bypasses transition validation.

        Args:
            state: State to reset to
        """
        self._current = state

    def __str__(self) -> str:
        return f"StateMachine(current={self._current})"

    def __repr__(self) -> str:
        return f"StateMachine(current={self._current!r}, allowed={self.allowed_transitions!r})"


# ============================================
# Predefined Transition Maps
# ============================================


def get_channel_transitions() -> TransitionMap:
    """Get transition map for ChannelStatus (visual, audio, background score)."""
    from docreel.models.status import ChannelStatus

    return {
        ChannelStatus.PENDING: [ChannelStatus.GENERATING],
        ChannelStatus.GENERATING: [ChannelStatus.COMPLETED, ChannelStatus.FAILED],
        ChannelStatus.COMPLETED: [
            ChannelStatus.APPROVED,
            ChannelStatus.REJECTED,
            ChannelStatus.GENERATING,
        ],
        ChannelStatus.FAILED: [ChannelStatus.GENERATING],  # Allow retry
        ChannelStatus.APPROVED: [ChannelStatus.GENERATING],  # Explicit regenerate only
        ChannelStatus.REJECTED: [ChannelStatus.PENDING],  # Allow regeneration
    }


def get_artifact_transitions() -> TransitionMap:
    """Get transition map for ArtifactState."""
    from docreel.models.artifact import ArtifactState

    return {
        ArtifactState.ABSENT: [],
        ArtifactState.PREVIEWED: [],  # Non-durable, replaced on next change
        ArtifactState.ASSEMBLED: [ArtifactState.APPROVED],
        ArtifactState.APPROVED: [ArtifactState.EXPORTED, ArtifactState.ASSEMBLED],
        ArtifactState.EXPORTED: [],  # Terminal; export is idempotent
    }


# ============================================
# Factory Functions
# ============================================


def create_channel_state_machine(
    initial_status: str | None = None,
    subject: str | None = None,
) -> StateMachine:
    """Create a state machine for a media channel.

    Args:
        initial_status: Initial status (default: PENDING)
        subject: Segment ID the channel belongs to

    Returns:
        Configured StateMachine for a channel
    """
    from docreel.models.status import ChannelStatus

    initial = ChannelStatus(initial_status) if initial_status else ChannelStatus.PENDING
    return StateMachine(initial, get_channel_transitions(), subject=subject)


def create_artifact_state_machine(initial_state: str | None = None) -> StateMachine:
    """Create a state machine for an assembled artifact.

    Args:
        initial_state: Initial state (default: ASSEMBLED)

    Returns:
        Configured StateMachine for an artifact
    """
    from docreel.models.artifact import ArtifactState

    initial = ArtifactState(initial_state) if initial_state else ArtifactState.ASSEMBLED
    return StateMachine(initial, get_artifact_transitions())
