"""Segment approval state machine.

Each segment has two independent channels (visual, audio); the script has
one background score that follows the same lifecycle:

    pending -> generating -> {completed | failed}
    completed -> approved | rejected | generating
    rejected -> pending
    failed -> generating
    approved -> generating   (explicit regenerate only)

Every operation takes a Script snapshot and returns a new one; nothing is
mutated in place. Approval requires the channel to be completed AND its
media to be resolvable.
"""

from dataclasses import dataclass

from docreel.core.exceptions import UnresolvedMediaError, ValidationError
from docreel.core.logging import get_logger, short_id
from docreel.core.state_machine import create_channel_state_machine
from docreel.models.media import EMPTY_MEDIA, MediaRef
from docreel.models.score import BackgroundScore
from docreel.models.script import Script
from docreel.models.segment import Audio, Segment, Visual
from docreel.models.status import Channel, ChannelStatus, GenerationMode, Provenance
from docreel.services.media.resolver import MediaSourceResolver

logger = get_logger(__name__)

SCORE_SUBJECT = "background_score"


@dataclass(frozen=True)
class VisualMedia:
    """Media produced for a visual channel.

    Attributes:
        video: Clip reference
        image: Image reference (static-image mode or still)
        thumbnail: Thumbnail reference
        mode: Generation mode (None keeps the current mode)
    """

    video: MediaRef = EMPTY_MEDIA
    image: MediaRef = EMPTY_MEDIA
    thumbnail: MediaRef = EMPTY_MEDIA
    mode: GenerationMode | None = None


@dataclass(frozen=True)
class AudioMedia:
    """Media produced for a narration channel.

    Attributes:
        media: Audio reference
        duration: Duration in seconds
        voice_id: Voice used for synthesis
    """

    media: MediaRef
    duration: float | None = None
    voice_id: str | None = None


@dataclass(frozen=True)
class ScoreMedia:
    """Media produced for the background score.

    Attributes:
        media: Audio reference
        duration: Duration in seconds
        prompt: Generation prompt
        seed: Generation seed
    """

    media: MediaRef
    duration: float | None = None
    prompt: str | None = None
    seed: int | None = None


def _advance(current: ChannelStatus, path: list[ChannelStatus], subject: str) -> ChannelStatus:
    """Walk a transition path, validating every step.

    Raises:
        InvalidTransitionError: If any step is not allowed
    """
    sm = create_channel_state_machine(current.value, subject=subject)
    for target in path:
        sm.transition(target)
    return sm.current


def _regenerate_path(current: ChannelStatus) -> list[ChannelStatus]:
    """Legal path from the current status into GENERATING."""
    if current == ChannelStatus.REJECTED:
        return [ChannelStatus.PENDING, ChannelStatus.GENERATING]
    if current == ChannelStatus.GENERATING:
        return []
    return [ChannelStatus.GENERATING]


class SegmentApprovalService:
    """Channel transitions over the Script aggregate.

    Example:
        >>> service = SegmentApprovalService(MediaSourceResolver())
        >>> script = service.start_generation(script, "s1", Channel.VISUAL)
        >>> script = service.complete_visual(script, "s1", VisualMedia(video=ref))
        >>> script = service.approve(script, "s1", Channel.VISUAL)
    """

    def __init__(self, resolver: MediaSourceResolver) -> None:
        """Initialize SegmentApprovalService.

        Args:
            resolver: Media source resolver used to validate approvals
        """
        self.resolver = resolver

    # =========================================================================
    # Queries
    # =========================================================================

    def channel_status(self, script: Script, segment_id: str, channel: Channel) -> ChannelStatus:
        """Get the status of a segment channel (PENDING if audio is absent)."""
        segment = script.segment(segment_id)
        if channel == Channel.VISUAL:
            return segment.visual.status
        return segment.audio.status if segment.audio else ChannelStatus.PENDING

    def is_resolvable(self, segment: Segment, channel: Channel) -> bool:
        """Check if a channel's media resolves to a transmittable source."""
        if channel == Channel.VISUAL:
            return self.resolver.can_resolve_visual(segment.visual)
        return self.resolver.resolve_audio(segment.audio) is not None

    # =========================================================================
    # Generic channel transitions
    # =========================================================================

    def start_generation(
        self,
        script: Script,
        segment_id: str,
        channel: Channel,
        prompt: str | None = None,
    ) -> Script:
        """Move a channel into GENERATING (pending, failed, completed, approved).

        Raises:
            InvalidTransitionError: If the channel cannot start generating
        """
        return self._set_status(
            script,
            segment_id,
            channel,
            [ChannelStatus.GENERATING],
            prompt=prompt,
            clear_error=True,
        )

    def fail_generation(
        self,
        script: Script,
        segment_id: str,
        channel: Channel,
        error: str,
    ) -> Script:
        """Record a provider failure (GENERATING -> FAILED)."""
        logger.warning(
            "Channel generation failed",
            segment_id=short_id(segment_id),
            channel=channel.value,
            error=error,
        )
        return self._set_status(
            script, segment_id, channel, [ChannelStatus.FAILED], error=error
        )

    def approve(self, script: Script, segment_id: str, channel: Channel) -> Script:
        """Approve a completed channel.

        Raises:
            InvalidTransitionError: If the channel is not COMPLETED
            UnresolvedMediaError: If the channel's media cannot be resolved
        """
        segment = script.segment(segment_id)
        current = self.channel_status(script, segment_id, channel)
        _advance(current, [ChannelStatus.APPROVED], segment_id)
        if not self.is_resolvable(segment, channel):
            raise UnresolvedMediaError(segment_id, channel.value)

        logger.info("Channel approved", segment_id=short_id(segment_id), channel=channel.value)
        return self._set_status(script, segment_id, channel, [ChannelStatus.APPROVED])

    def reject(self, script: Script, segment_id: str, channel: Channel) -> Script:
        """Reject a completed channel (COMPLETED -> REJECTED)."""
        logger.info("Channel rejected", segment_id=short_id(segment_id), channel=channel.value)
        return self._set_status(script, segment_id, channel, [ChannelStatus.REJECTED])

    def reset(self, script: Script, segment_id: str, channel: Channel) -> Script:
        """Return a rejected channel to PENDING."""
        return self._set_status(script, segment_id, channel, [ChannelStatus.PENDING])

    def regenerate(
        self,
        script: Script,
        segment_id: str,
        channel: Channel,
        prompt: str | None = None,
    ) -> Script:
        """Re-enter GENERATING from any settled status, clearing approval."""
        current = self.channel_status(script, segment_id, channel)
        path = _regenerate_path(current)
        if not path:
            raise ValidationError(
                "Channel is already generating", segment_id=segment_id
            ).with_context(channel=channel.value)
        return self._set_status(
            script, segment_id, channel, path, prompt=prompt, clear_error=True
        )

    # =========================================================================
    # Media results
    # =========================================================================

    def complete_generation(
        self,
        script: Script,
        segment_id: str,
        media: VisualMedia | AudioMedia,
    ) -> Script:
        """Record provider output for the channel matching the media type.

        Raises:
            InvalidTransitionError: If the channel is not GENERATING
        """
        if isinstance(media, VisualMedia):
            return self.complete_visual(script, segment_id, media)
        return self.complete_audio(script, segment_id, media)

    def upload_media(
        self,
        script: Script,
        segment_id: str,
        media: VisualMedia | AudioMedia,
    ) -> Script:
        """Record user-supplied media; the channel goes straight to COMPLETED."""
        if isinstance(media, VisualMedia):
            return self.upload_visual(script, segment_id, media)
        return self.upload_audio(script, segment_id, media)

    def complete_visual(self, script: Script, segment_id: str, media: VisualMedia) -> Script:
        """Record a generated visual (GENERATING -> COMPLETED)."""
        return self._apply_visual(script, segment_id, media, uploaded=False, via_upload=False)

    def upload_visual(self, script: Script, segment_id: str, media: VisualMedia) -> Script:
        """Record a user-uploaded visual; the manual fallback when generation fails."""
        return self._apply_visual(script, segment_id, media, uploaded=True, via_upload=True)

    def complete_audio(self, script: Script, segment_id: str, media: AudioMedia) -> Script:
        """Record generated narration (GENERATING -> COMPLETED)."""
        return self._apply_audio(script, segment_id, media, custom=False, via_upload=False)

    def upload_audio(self, script: Script, segment_id: str, media: AudioMedia) -> Script:
        """Record user-supplied narration."""
        return self._apply_audio(script, segment_id, media, custom=True, via_upload=True)

    # =========================================================================
    # Background score
    # =========================================================================

    def start_score_generation(self, script: Script, prompt: str | None = None) -> Script:
        """Move the background score into GENERATING."""
        score = script.background_score or BackgroundScore()
        status = _advance(score.status, _regenerate_path(score.status), SCORE_SUBJECT)
        update: dict[str, object] = {"status": status}
        if prompt is not None:
            update["prompt"] = prompt
        return script.with_background_score(score.model_copy(update=update))

    def complete_score(self, script: Script, media: ScoreMedia) -> Script:
        """Record a generated background score."""
        return self._apply_score(script, media, provenance=Provenance.GENERATED, via_upload=False)

    def upload_score(self, script: Script, media: ScoreMedia) -> Script:
        """Record an uploaded background score."""
        return self._apply_score(script, media, provenance=Provenance.UPLOADED, via_upload=True)

    def fail_score(self, script: Script, error: str) -> Script:
        """Record a failed background score generation."""
        score = self._require_score(script)
        status = _advance(score.status, [ChannelStatus.FAILED], SCORE_SUBJECT)
        logger.warning("Background score generation failed", error=error)
        return script.with_background_score(score.model_copy(update={"status": status}))

    def approve_score(self, script: Script) -> Script:
        """Approve the background score.

        Raises:
            InvalidTransitionError: If the score is not COMPLETED
            UnresolvedMediaError: If the score media cannot be resolved
        """
        score = self._require_score(script)
        _advance(score.status, [ChannelStatus.APPROVED], SCORE_SUBJECT)
        if self.resolver.resolve_score(score) is None:
            raise UnresolvedMediaError(None, SCORE_SUBJECT)
        return script.with_background_score(
            score.model_copy(update={"status": ChannelStatus.APPROVED})
        )

    def reject_score(self, script: Script) -> Script:
        """Reject the background score."""
        score = self._require_score(script)
        status = _advance(score.status, [ChannelStatus.REJECTED], SCORE_SUBJECT)
        return script.with_background_score(score.model_copy(update={"status": status}))

    def set_score_mix(
        self,
        script: Script,
        volume: float | None = None,
        trim_start: float | None = None,
        trim_end: float | None = None,
    ) -> Script:
        """Update volume and trim window of the background score."""
        score = self._require_score(script)
        data = score.model_dump()
        if volume is not None:
            data["volume"] = volume
        if trim_start is not None:
            data["trim_start"] = trim_start
        if trim_end is not None:
            data["trim_end"] = trim_end
        try:
            updated = BackgroundScore.model_validate(data)
        except ValueError as e:
            raise ValidationError(f"Invalid background score mix: {e}") from e
        return script.with_background_score(updated)

    # =========================================================================
    # Private helpers
    # =========================================================================

    def _require_score(self, script: Script) -> BackgroundScore:
        if script.background_score is None:
            raise ValidationError("Script has no background score")
        return script.background_score

    def _set_status(
        self,
        script: Script,
        segment_id: str,
        channel: Channel,
        path: list[ChannelStatus],
        prompt: str | None = None,
        error: str | None = None,
        clear_error: bool = False,
    ) -> Script:
        current = self.channel_status(script, segment_id, channel)
        status = _advance(current, path, segment_id)

        def apply(segment: Segment) -> Segment:
            if channel == Channel.VISUAL:
                update: dict[str, object] = {"status": status}
                if prompt is not None:
                    update["prompt"] = prompt
                if error is not None:
                    update["error"] = error
                elif clear_error:
                    update["error"] = None
                return segment.model_copy(
                    update={"visual": segment.visual.model_copy(update=update)}
                )
            audio = segment.audio or Audio()
            audio_update: dict[str, object] = {"status": status}
            if error is not None:
                audio_update["error"] = error
            elif clear_error:
                audio_update["error"] = None
            return segment.model_copy(update={"audio": audio.model_copy(update=audio_update)})

        return script.update_segment(segment_id, apply)

    def _apply_visual(
        self,
        script: Script,
        segment_id: str,
        media: VisualMedia,
        uploaded: bool,
        via_upload: bool,
    ) -> Script:
        current = script.segment(segment_id).visual.status
        path = _regenerate_path(current) if via_upload else []
        status = _advance(current, [*path, ChannelStatus.COMPLETED], segment_id)

        def apply(segment: Segment) -> Segment:
            visual: Visual = segment.visual
            update: dict[str, object] = {
                "status": status,
                "video": media.video,
                "image": media.image,
                "thumbnail": media.thumbnail,
                "uploaded": uploaded,
                "error": None,
            }
            if media.mode is not None:
                update["mode"] = media.mode
            return segment.model_copy(update={"visual": visual.model_copy(update=update)})

        logger.info(
            "Visual media recorded",
            segment_id=short_id(segment_id),
            uploaded=uploaded,
        )
        return script.update_segment(segment_id, apply)

    def _apply_audio(
        self,
        script: Script,
        segment_id: str,
        media: AudioMedia,
        custom: bool,
        via_upload: bool,
    ) -> Script:
        segment = script.segment(segment_id)
        current = segment.audio.status if segment.audio else ChannelStatus.PENDING
        path = _regenerate_path(current) if via_upload else []
        status = _advance(current, [*path, ChannelStatus.COMPLETED], segment_id)

        def apply(seg: Segment) -> Segment:
            audio = seg.audio or Audio()
            return seg.model_copy(
                update={
                    "audio": audio.model_copy(
                        update={
                            "status": status,
                            "media": media.media,
                            "duration": media.duration,
                            "voice_id": media.voice_id if not custom else None,
                            "custom": custom,
                            "error": None,
                        }
                    )
                }
            )

        logger.info("Audio media recorded", segment_id=short_id(segment_id), custom=custom)
        return script.update_segment(segment_id, apply)

    def _apply_score(
        self,
        script: Script,
        media: ScoreMedia,
        provenance: Provenance,
        via_upload: bool,
    ) -> Script:
        score = script.background_score or BackgroundScore()
        path = _regenerate_path(score.status) if via_upload else []
        status = _advance(score.status, [*path, ChannelStatus.COMPLETED], SCORE_SUBJECT)
        update: dict[str, object] = {
            "status": status,
            "media": media.media,
            "duration": media.duration,
            "provenance": provenance,
        }
        if media.prompt is not None:
            update["prompt"] = media.prompt
        if media.seed is not None:
            update["seed"] = media.seed
        return script.with_background_score(score.model_copy(update=update))


__all__ = [
    "AudioMedia",
    "ScoreMedia",
    "SegmentApprovalService",
    "VisualMedia",
]
