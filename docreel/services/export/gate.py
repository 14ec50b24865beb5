"""Export gate.

State machine over the assembled artifact:

    assembled -> approved -> exported
    approved -> assembled   (reject)

Export requires an approved artifact holding a durable payload; a preview
or a handle-only artifact is refused. Exporting an exported artifact again
delivers the same payload again; it never re-renders.
"""

import time
from dataclasses import replace
from datetime import UTC, datetime

from docreel.config.assembly import ExportConfig
from docreel.core.exceptions import ExportNotAllowedError
from docreel.core.logging import get_logger
from docreel.core.state_machine import create_artifact_state_machine
from docreel.models.artifact import ArtifactState, AssembledArtifact
from docreel.models.media import decode_payload
from docreel.services.export.targets import ExportResult, ExportTarget
from docreel.services.session import ScriptSession

logger = get_logger(__name__)


class ExportGate:
    """Approve, reject and export the assembled artifact.

    Example:
        >>> gate = ExportGate(session, LocalDownloadTarget("./outputs"))
        >>> gate.approve()
        >>> result = await gate.export()
        >>> result.filename
        'final-video-1735689600000.mp4'
    """

    def __init__(
        self,
        session: ScriptSession,
        default_target: ExportTarget,
        config: ExportConfig | None = None,
    ) -> None:
        """Initialize ExportGate.

        Args:
            session: Script session holding the artifact
            default_target: Target used when export() gets none
            config: Export configuration
        """
        self.session = session
        self.default_target = default_target
        self.config = config or ExportConfig()

    @property
    def artifact(self) -> AssembledArtifact | None:
        """Current artifact."""
        return self.session.snapshot.artifact

    def approve(self) -> AssembledArtifact:
        """Approve the assembled artifact.

        Raises:
            ExportNotAllowedError: If there is no durable artifact
            InvalidTransitionError: If the artifact is not ASSEMBLED
        """
        return self._transition(ArtifactState.APPROVED)

    def reject(self) -> AssembledArtifact:
        """Send an approved artifact back to ASSEMBLED."""
        return self._transition(ArtifactState.ASSEMBLED)

    def prepare(self) -> ExportResult:
        """Check export preconditions and decode the payload.

        Raises:
            ExportNotAllowedError: If the artifact is missing, a preview,
                not approved or not durable
        """
        artifact = self.artifact
        if artifact is None:
            raise ExportNotAllowedError("no_artifact")
        if artifact.is_preview:
            raise ExportNotAllowedError("preview_only")
        if artifact.state not in (ArtifactState.APPROVED, ArtifactState.EXPORTED):
            raise ExportNotAllowedError("not_approved").with_context(state=artifact.state.value)
        if not artifact.is_durable:
            raise ExportNotAllowedError("not_durable")

        data = decode_payload(artifact.payload or "")
        if len(data) < self.config.min_payload_bytes:
            raise ExportNotAllowedError("not_durable").with_context(size_bytes=len(data))

        now = datetime.now(tz=UTC)
        return ExportResult(
            filename=self.filename(now),
            data=data,
            mime_type=self.config.mime_type,
            created_at=now,
        )

    async def export(self, target: ExportTarget | None = None) -> ExportResult:
        """Deliver the approved artifact to a target.

        Args:
            target: Export target (default: the gate's default target)

        Returns:
            The delivered export with its location

        Raises:
            ExportNotAllowedError: If export preconditions fail
            ProviderError: If a remote target fails
        """
        result = self.prepare()
        target = target or self.default_target
        snapshot = self.session.snapshot
        location = await target.deliver(result, snapshot)
        result = replace(result, location=location)

        artifact = self.artifact
        if artifact is not None and artifact.state == ArtifactState.APPROVED:
            sm = create_artifact_state_machine(artifact.state.value)
            exported = artifact.model_copy(
                update={
                    "state": sm.transition_to(ArtifactState.EXPORTED),
                    "exported_at": result.created_at,
                }
            )
            self.session.update(lambda s: s.with_artifact(exported))

        logger.info(
            "Artifact exported",
            target=target.name,
            filename=result.filename,
            size_bytes=result.size_bytes,
            location=location,
        )
        return result

    def filename(self, when: datetime | None = None) -> str:
        """Build an export filename: ``{prefix}-{epoch_ms}.{ext}``."""
        epoch_ms = int(when.timestamp() * 1000) if when else int(time.time() * 1000)
        return f"{self.config.filename_prefix}-{epoch_ms}.{self.config.extension}"

    def _transition(self, target: ArtifactState) -> AssembledArtifact:
        artifact = self.artifact
        if artifact is None or artifact.is_preview:
            raise ExportNotAllowedError("no_artifact" if artifact is None else "preview_only")
        sm = create_artifact_state_machine(artifact.state.value)
        updated = artifact.model_copy(update={"state": sm.transition_to(target)})
        self.session.update(lambda s: s.with_artifact(updated))
        logger.info("Artifact state changed", state=updated.state.value)
        return updated


__all__ = ["ExportGate"]
