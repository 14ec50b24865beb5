"""Assembly coordinator.

Runs preview and assemble renders against the current session snapshot:

1. Commit pending edits (auto-save before assemble)
2. Build the request from committed state
3. Call the renderer under a new request version
4. Apply the result only if it is still fresh: no newer request was issued
   and the eligibility fingerprint still matches the current snapshot

Stale results are discarded silently; the newer state always wins.
"""

from typing import TYPE_CHECKING, Literal

from docreel.config.assembly import AspectRatio
from docreel.core.exceptions import ExternalAPIError, StalenessError
from docreel.core.logging import get_logger
from docreel.infrastructure.renderer import RenderServiceClient
from docreel.models.artifact import ArtifactState, AssembledArtifact
from docreel.models.assembly import AssemblyRequest, RenderResult
from docreel.models.media import decode_payload
from docreel.services.assembly.builder import AssemblyRequestBuilder

if TYPE_CHECKING:
    from docreel.services.session import ScriptSession

logger = get_logger(__name__)

RenderKind = Literal["preview", "assemble"]


class AssemblyCoordinator:
    """Render orchestration with staleness protection.

    Example:
        >>> coordinator = AssemblyCoordinator(session, builder, renderer)
        >>> artifact = await coordinator.assemble()
        >>> artifact.state
        <ArtifactState.ASSEMBLED: 'assembled'>
    """

    def __init__(
        self,
        session: "ScriptSession",
        builder: AssemblyRequestBuilder,
        renderer: RenderServiceClient,
    ) -> None:
        """Initialize AssemblyCoordinator.

        Args:
            session: Script session
            builder: Assembly request builder
            renderer: Renderer client
        """
        self.session = session
        self.builder = builder
        self.renderer = renderer
        self._version = 0
        self._in_flight = 0

    @property
    def version(self) -> int:
        """Latest issued request version."""
        return self._version

    @property
    def in_flight(self) -> bool:
        """Check if a render call is pending."""
        return self._in_flight > 0

    async def preview(self, aspect_ratio: AspectRatio | None = None) -> AssembledArtifact | None:
        """Render a non-durable preview.

        Returns:
            The applied artifact, or None if the result went stale

        Raises:
            ValidationError: If no segment is eligible
            ProviderError: If the renderer fails
        """
        return await self._run("preview", aspect_ratio)

    async def assemble(self, aspect_ratio: AspectRatio | None = None) -> AssembledArtifact | None:
        """Render the durable artifact.

        Returns:
            The applied artifact, or None if the result went stale

        Raises:
            ValidationError: If no segment is eligible
            ProviderError: If the renderer fails
        """
        return await self._run("assemble", aspect_ratio)

    async def _run(
        self,
        kind: RenderKind,
        aspect_ratio: AspectRatio | None,
    ) -> AssembledArtifact | None:
        if self.session.overlay.has_uncommitted_changes():
            self.session.commit_edits()
            logger.info("Pending edits committed before render", kind=kind)

        request = self.builder.build(self.session.snapshot, aspect_ratio=aspect_ratio)
        self._version += 1
        version = self._version

        self._in_flight += 1
        try:
            if kind == "preview":
                result = await self.renderer.preview(request)
            else:
                result = await self.renderer.assemble(request)
        finally:
            self._in_flight -= 1

        try:
            self._check_fresh(version, request)
        except StalenessError as e:
            logger.debug("Stale render result discarded", kind=kind, **e.context)
            return None
        return self._apply(kind, request, result)

    def _check_fresh(self, version: int, request: AssemblyRequest) -> None:
        """Raise StalenessError if the result no longer matches current state."""
        if version != self._version:
            raise StalenessError(version, self._version)
        current = self.session.fingerprint()
        if current != request.fingerprint:
            raise StalenessError(version, self._version).with_context(
                request_fingerprint=request.fingerprint[:12],
                current_fingerprint=current[:12],
            )

    def _apply(
        self,
        kind: RenderKind,
        request: AssemblyRequest,
        result: RenderResult,
    ) -> AssembledArtifact:
        try:
            data = decode_payload(result.video_payload)
        except ValueError as e:
            raise ExternalAPIError("renderer", f"undecodable video payload: {e}") from e

        handle = self.session.handles.create(data, "video/mp4")
        artifact = AssembledArtifact(
            state=ArtifactState.PREVIEWED if kind == "preview" else ArtifactState.ASSEMBLED,
            payload=result.video_payload if kind == "assemble" else None,
            handle=handle,
            duration=result.duration,
            aspect_ratio=result.aspect_ratio or request.aspect_ratio,
            segment_count=result.segment_count or len(request.segments),
            fingerprint=request.fingerprint,
        )
        self.session.update(lambda s: s.with_artifact(artifact))
        logger.info(
            "Render applied",
            kind=kind,
            duration=artifact.duration,
            segment_count=artifact.segment_count,
            size_bytes=len(data),
        )
        return artifact


__all__ = ["AssemblyCoordinator"]
