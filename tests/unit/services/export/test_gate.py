"""Unit tests for ExportGate."""

import re
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from docreel.config.assembly import ExportConfig
from docreel.core.exceptions import ExternalAPIError, ExportNotAllowedError, ValidationError
from docreel.core.state_machine import InvalidTransitionError
from docreel.models.artifact import ArtifactState, AssembledArtifact
from docreel.services.export import ExportGate, LocalDownloadTarget
from docreel.services.session import ScriptSession


@pytest.fixture
def session(abc_script, handles, resolver, video_payload):
    """Session holding a durable, not yet approved artifact."""
    script = abc_script.with_artifact(AssembledArtifact(payload=video_payload, duration=4.5))
    return ScriptSession(script, handles, resolver)


@pytest.fixture
def gate(session, tmp_path):
    """Gate writing into a temporary directory."""
    return ExportGate(session, LocalDownloadTarget(tmp_path))


def set_artifact(session, artifact):
    """Replace the session artifact."""
    session.update(lambda s: s.with_artifact(artifact))


class TestApproval:
    """Tests for approve and reject."""

    def test_approve(self, gate, session):
        """Test assembled -> approved."""
        artifact = gate.approve()

        assert artifact.state == ArtifactState.APPROVED
        assert session.snapshot.artifact.state == ArtifactState.APPROVED

    def test_reject(self, gate):
        """Test approved -> assembled."""
        gate.approve()

        assert gate.reject().state == ArtifactState.ASSEMBLED

    def test_reject_unapproved(self, gate):
        """Test reject needs an approved artifact."""
        with pytest.raises(InvalidTransitionError):
            gate.reject()

    def test_approve_without_artifact(self, gate, session):
        """Test approving nothing is refused."""
        set_artifact(session, None)

        with pytest.raises(ExportNotAllowedError) as exc_info:
            gate.approve()

        assert exc_info.value.reason == "no_artifact"

    def test_approve_preview(self, gate, session):
        """Test previews cannot be approved."""
        set_artifact(
            session,
            AssembledArtifact(
                state=ArtifactState.PREVIEWED,
                fingerprint=session.fingerprint(),
            ),
        )

        with pytest.raises(ExportNotAllowedError) as exc_info:
            gate.approve()

        assert exc_info.value.reason == "preview_only"

    def test_exported_is_terminal(self, gate, session, video_payload):
        """Test exported artifacts cannot go back."""
        exported = AssembledArtifact(state=ArtifactState.EXPORTED, payload=video_payload)
        set_artifact(session, exported)

        with pytest.raises(InvalidTransitionError):
            gate.reject()


class TestPrepare:
    """Tests for export preconditions."""

    def test_not_approved(self, gate):
        """Test an assembled but unapproved artifact cannot be exported."""
        with pytest.raises(ValidationError) as exc_info:
            gate.prepare()

        assert exc_info.value.reason == "not_approved"

    def test_handle_only_artifact(self, gate, session):
        """Test an approved artifact without payload is not exportable."""
        set_artifact(
            session, AssembledArtifact(state=ArtifactState.APPROVED, handle="blob:docreel/1")
        )

        with pytest.raises(ExportNotAllowedError) as exc_info:
            gate.prepare()

        assert exc_info.value.reason == "not_durable"

    def test_payload_too_small(self, session, tmp_path):
        """Test the minimum payload size."""
        gate = ExportGate(
            session, LocalDownloadTarget(tmp_path), ExportConfig(min_payload_bytes=10_000)
        )
        gate.approve()

        with pytest.raises(ExportNotAllowedError) as exc_info:
            gate.prepare()

        assert exc_info.value.reason == "not_durable"

    def test_prepare_decodes_payload(self, gate, video_bytes):
        """Test the prepared export holds the decoded bytes."""
        gate.approve()

        result = gate.prepare()

        assert result.data == video_bytes
        assert result.mime_type == "video/mp4"
        assert result.size_bytes == len(video_bytes)

    def test_filename(self, gate):
        """Test filenames use the epoch in milliseconds."""
        when = datetime(2025, 1, 1, tzinfo=UTC)

        assert gate.filename(when) == "final-video-1735689600000.mp4"
        assert re.fullmatch(r"final-video-\d+\.mp4", gate.filename())


class TestExport:
    """Tests for export."""

    @pytest.mark.asyncio
    async def test_export_writes_file(self, gate, session, tmp_path, video_bytes):
        """Test export writes the video and marks the artifact exported."""
        gate.approve()

        result = await gate.export()

        assert result.location is not None
        written = tmp_path / result.filename
        assert written.read_bytes() == video_bytes
        artifact = session.snapshot.artifact
        assert artifact.state == ArtifactState.EXPORTED
        assert artifact.exported_at == result.created_at

    @pytest.mark.asyncio
    async def test_export_twice_same_bytes(self, gate, session):
        """Test re-exporting delivers identical bytes without changing state."""
        gate.approve()

        first = await gate.export()
        exported_at = session.snapshot.artifact.exported_at
        second = await gate.export()

        assert second.data == first.data
        assert session.snapshot.artifact.state == ArtifactState.EXPORTED
        assert session.snapshot.artifact.exported_at == exported_at

    @pytest.mark.asyncio
    async def test_export_unapproved(self, gate, session):
        """Test export of an assembled, unapproved artifact is refused."""
        with pytest.raises(ValidationError):
            await gate.export()

        assert session.snapshot.artifact.state == ArtifactState.ASSEMBLED

    @pytest.mark.asyncio
    async def test_custom_target(self, gate, session, video_bytes):
        """Test an explicit target receives the export and the snapshot."""
        target = MagicMock()
        target.name = "distribution"
        target.deliver = AsyncMock(return_value="dist-1")
        gate.approve()

        result = await gate.export(target)

        assert result.location == "dist-1"
        delivered, script = target.deliver.call_args.args
        assert delivered.data == video_bytes
        assert script.id == "script-1"

    @pytest.mark.asyncio
    async def test_target_failure_keeps_approval(self, gate, session):
        """Test a failed delivery leaves the artifact approved."""
        target = MagicMock()
        target.name = "distribution"
        target.deliver = AsyncMock(side_effect=ExternalAPIError("distribution", "down"))
        gate.approve()

        with pytest.raises(ExternalAPIError):
            await gate.export(target)

        assert session.snapshot.artifact.state == ArtifactState.APPROVED
