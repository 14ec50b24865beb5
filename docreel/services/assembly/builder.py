"""Assembly request builder.

Turns a committed Script snapshot into the renderer-facing AssemblyRequest:
one descriptor per eligible segment, in narrative order, plus the optional
background score. Pure: no network I/O and no state changes.

Field precedence per segment: committed edit > saved segment value >
configured default. Caption text always falls back to the narration text.
"""

from docreel.config.assembly import AspectRatio, AssemblyConfig, TransitionName
from docreel.core.exceptions import AssemblyIntegrityError, ValidationError
from docreel.core.logging import get_logger, short_id
from docreel.models.assembly import AssemblyRequest, SegmentDescriptor, SubtitleSettings
from docreel.models.edit import EMPTY_EDIT, SegmentEdit
from docreel.models.script import Script
from docreel.models.segment import Segment
from docreel.services.assembly.eligibility import (
    EligibleSegment,
    attached_score,
    collect_eligible,
    eligibility_fingerprint,
)
from docreel.services.editing.overlay import EditOverlay
from docreel.services.media.resolver import MediaSourceResolver

logger = get_logger(__name__)


def _clean(text: str | None) -> str | None:
    if text is None:
        return None
    stripped = text.strip()
    return stripped or None


class AssemblyRequestBuilder:
    """Build assembly requests from committed script state.

    Example:
        >>> builder = AssemblyRequestBuilder(MediaSourceResolver())
        >>> request = builder.build(script)
        >>> request.to_wire()["segments"][0]["sentenceId"]
    """

    def __init__(
        self,
        resolver: MediaSourceResolver,
        config: AssemblyConfig | None = None,
    ) -> None:
        """Initialize AssemblyRequestBuilder.

        Args:
            resolver: Media source resolver
            config: Assembly defaults
        """
        self.resolver = resolver
        self.config = config or AssemblyConfig()

    def build(
        self,
        script: Script,
        overlay: EditOverlay | None = None,
        aspect_ratio: AspectRatio | None = None,
    ) -> AssemblyRequest:
        """Build the request for every eligible segment.

        Only committed edits are used. When an overlay is given its committed
        layer replaces the script's committed edits; pending edits are ignored.

        Args:
            script: Committed script snapshot
            overlay: Edit overlay (committed layer only)
            aspect_ratio: Target aspect ratio (default from config)

        Returns:
            Assembly request

        Raises:
            ValidationError: If no segment is eligible
            AssemblyIntegrityError: If any eligible segment could not be described
        """
        if overlay is not None:
            script = script.with_committed_edits(overlay.committed)

        eligible, excluded = collect_eligible(script, self.resolver, self.config)
        if not eligible:
            raise ValidationError("No eligible segments to assemble").with_context(
                excluded=len(excluded)
            )

        descriptors: list[SegmentDescriptor] = []
        missing: list[str] = []
        for item in eligible:
            edit = script.committed_edits.get(item.segment.id, EMPTY_EDIT)
            descriptor = self._describe(item, edit)
            if descriptor is None:
                missing.append(item.segment.id)
            else:
                descriptors.append(descriptor)

        if missing or len(descriptors) != len(eligible):
            raise AssemblyIntegrityError(len(eligible), len(descriptors), missing)

        score = script.background_score
        score_source = attached_score(score, self.resolver, self.config.attach_unapproved_audio)
        music: dict[str, object] = {}
        if score is not None and score_source is not None:
            music = {
                "background_music_url": score_source.url,
                "background_music_payload": score_source.payload,
                "music_volume": (
                    score.volume if score.volume is not None else self.config.default_music_volume
                ),
                "music_trim_start": score.trim_start,
                "music_trim_end": score.trim_end,
            }

        request = AssemblyRequest(
            segments=descriptors,
            aspect_ratio=aspect_ratio or self.config.default_aspect_ratio,
            fingerprint=eligibility_fingerprint(script, self.resolver, self.config),
            **music,
        )
        logger.info(
            "Assembly request built",
            segment_count=len(descriptors),
            excluded=len(excluded),
            with_audio=sum(1 for d in descriptors if d.has_audio),
            with_music=bool(music),
        )
        return request

    # =========================================================================
    # Per-segment resolution
    # =========================================================================

    def segment_duration(self, segment: Segment) -> float:
        """Narration duration, else offset duration, else the configured default."""
        if segment.audio and segment.audio.duration:
            return segment.audio.duration
        offset = segment.offset_duration
        if offset:
            return offset
        return self.config.default_segment_duration

    def effective_transition(self, segment: Segment, edit: SegmentEdit) -> TransitionName:
        """Edit override, else saved transition, else the configured default."""
        return edit.transition or segment.visual.transition or self.config.default_transition

    def effective_caption_text(self, segment: Segment, edit: SegmentEdit) -> str | None:
        """Edit override, else saved caption text, else the narration text."""
        return (
            _clean(edit.caption_text)
            or _clean(segment.visual.caption_text)
            or _clean(segment.text)
        )

    def effective_subtitle_settings(self, segment: Segment, edit: SegmentEdit) -> SubtitleSettings:
        """Merge caption placement: edit > saved > defaults."""
        defaults = self.config.captions
        saved = segment.visual.caption
        override = edit.caption

        def pick(name: str, default: object) -> object:
            for source in (override, saved):
                if source is not None and getattr(source, name) is not None:
                    return getattr(source, name)
            return default

        return SubtitleSettings(
            y_position=pick("y_position", defaults.y_position),
            font_size=pick("font_size", defaults.font_size),
            zoom=pick("zoom", defaults.zoom),
            color=pick("color", None),
        )

    def effective_presentation_text(self, segment: Segment, edit: SegmentEdit) -> list[str] | None:
        """Non-blank bullet points (edit > saved); None when nothing is left."""
        source = (
            edit.presentation_text
            if edit.presentation_text is not None
            else segment.presentation_text
        )
        if not source:
            return None
        bullets = [b.strip() for b in source if b and b.strip()]
        return bullets or None

    def _describe(self, item: EligibleSegment, edit: SegmentEdit) -> SegmentDescriptor | None:
        segment = item.segment
        duration = self.segment_duration(segment)
        crop = edit.crop
        start = crop.start if crop and crop.start is not None else 0.0
        end = crop.end if crop and crop.end is not None else duration
        if end > duration:
            logger.info(
                "Crop end past clip end, clamped",
                segment_id=short_id(segment.id),
                end=end,
                duration=duration,
            )
            end = duration
        if end <= start:
            logger.warning(
                "Crop window outside clip, using full duration",
                segment_id=short_id(segment.id),
                start=start,
                end=end,
            )
            start, end = 0.0, duration

        try:
            return SegmentDescriptor(
                segment_id=segment.id,
                video_url=item.visual.url,
                video_payload=item.visual.payload,
                audio_url=item.audio.url if item.audio else None,
                audio_payload=item.audio.payload if item.audio else None,
                duration=duration,
                start_time=start,
                end_time=end,
                transition_type=self.effective_transition(segment, edit),
                subtitle_settings=self.effective_subtitle_settings(segment, edit),
                subtitle_text=self.effective_caption_text(segment, edit),
                presentation_text=self.effective_presentation_text(segment, edit),
            )
        except ValueError as e:
            logger.error(
                "Segment descriptor invalid",
                segment_id=short_id(segment.id),
                error=str(e),
            )
            return None


__all__ = ["AssemblyRequestBuilder"]
