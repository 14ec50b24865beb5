"""Unit tests for StateMachine."""

import pytest

from docreel.core.exceptions import ValidationError
from docreel.core.state_machine import (
    InvalidTransitionError,
    StateMachine,
    create_artifact_state_machine,
    create_channel_state_machine,
)
from docreel.models.artifact import ArtifactState
from docreel.models.status import ChannelStatus


class TestStateMachine:
    """Tests for generic StateMachine."""

    @pytest.fixture
    def simple_transitions(self):
        """Create simple transition map for testing."""
        return {
            "start": ["middle", "end"],
            "middle": ["end"],
            "end": [],
        }

    @pytest.fixture
    def state_machine(self, simple_transitions):
        """Create state machine with simple transitions."""
        return StateMachine("start", simple_transitions)

    def test_initial_state(self, state_machine):
        """Test that initial state is set correctly."""
        assert state_machine.current == "start"

    def test_can_transition(self, state_machine):
        """Test can_transition for valid and invalid targets."""
        assert state_machine.can_transition("middle") is True
        assert state_machine.can_transition("nonexistent") is False

    def test_transition_invalid_raises(self, state_machine):
        """Test invalid transition raises error with details."""
        state_machine.transition("middle")

        with pytest.raises(InvalidTransitionError) as exc_info:
            state_machine.transition("start")

        assert exc_info.value.current == "middle"
        assert exc_info.value.target == "start"
        assert exc_info.value.allowed == ["end"]

    def test_invalid_transition_is_validation_error(self, state_machine):
        """Test InvalidTransitionError is surfaced as a ValidationError."""
        with pytest.raises(ValidationError):
            state_machine.transition("start")

    def test_subject_in_error_context(self, simple_transitions):
        """Test the tracked subject is carried as segment_id."""
        sm = StateMachine("end", simple_transitions, subject="seg-1")

        with pytest.raises(InvalidTransitionError) as exc_info:
            sm.transition("start")

        assert exc_info.value.context["segment_id"] == "seg-1"

    def test_terminal_state_has_no_transitions(self, state_machine):
        """Test terminal state allows nothing."""
        state_machine.transition("end")
        assert state_machine.allowed_transitions == []

    def test_reset_bypasses_rules(self, state_machine):
        """Test reset sets state without validation."""
        state_machine.transition("end")
        state_machine.reset("start")
        assert state_machine.current == "start"


class TestChannelStateMachine:
    """Tests for the channel lifecycle."""

    def test_default_is_pending(self):
        """Test channel starts pending."""
        assert create_channel_state_machine().current == ChannelStatus.PENDING

    def test_happy_path(self):
        """Test pending -> generating -> completed -> approved."""
        sm = create_channel_state_machine()
        sm.transition(ChannelStatus.GENERATING)
        sm.transition(ChannelStatus.COMPLETED)
        sm.transition(ChannelStatus.APPROVED)
        assert sm.current == ChannelStatus.APPROVED

    def test_cannot_approve_while_generating(self):
        """Test approval requires a completed channel."""
        sm = create_channel_state_machine("generating")
        with pytest.raises(InvalidTransitionError):
            sm.transition(ChannelStatus.APPROVED)

    def test_approved_only_leaves_via_regenerate(self):
        """Test approved channels can only go back to generating."""
        sm = create_channel_state_machine("approved")
        assert sm.allowed_transitions == [ChannelStatus.GENERATING]

    def test_rejected_returns_to_pending(self):
        """Test rejected -> pending is allowed."""
        sm = create_channel_state_machine("rejected")
        assert sm.transition_to(ChannelStatus.PENDING) == ChannelStatus.PENDING

    def test_failed_allows_retry(self):
        """Test failed -> generating is allowed."""
        sm = create_channel_state_machine("failed")
        assert sm.can_transition(ChannelStatus.GENERATING)


class TestArtifactStateMachine:
    """Tests for the artifact lifecycle."""

    def test_default_is_assembled(self):
        """Test artifact machine starts assembled."""
        assert create_artifact_state_machine().current == ArtifactState.ASSEMBLED

    def test_approve_then_export(self):
        """Test assembled -> approved -> exported."""
        sm = create_artifact_state_machine()
        sm.transition(ArtifactState.APPROVED)
        sm.transition(ArtifactState.EXPORTED)
        assert sm.current == ArtifactState.EXPORTED

    def test_cannot_export_unapproved(self):
        """Test assembled artifacts cannot be exported directly."""
        sm = create_artifact_state_machine("assembled")
        with pytest.raises(InvalidTransitionError):
            sm.transition(ArtifactState.EXPORTED)

    def test_preview_is_dead_end(self):
        """Test previews cannot be approved."""
        sm = create_artifact_state_machine("previewed")
        assert not sm.can_transition(ArtifactState.APPROVED)
