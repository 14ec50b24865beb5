"""Assembly eligibility.

A segment is eligible iff its visual is approved AND resolves to a
transmittable source. Narration is attached opportunistically: approved
audio always, present-but-unapproved audio when configured to.

Everything here is a pure function of a committed Script snapshot; pending
edits are never consulted.
"""

import hashlib
import json
from dataclasses import dataclass

from docreel.config.assembly import AssemblyConfig
from docreel.core.logging import get_logger, short_id
from docreel.models.score import BackgroundScore
from docreel.models.script import Script
from docreel.models.segment import Segment
from docreel.models.status import ChannelStatus
from docreel.services.media.resolver import MediaSourceResolver, ResolvedSource

logger = get_logger(__name__)

# A score in these states is never mixed in
_SCORE_NOT_READY = frozenset(
    {ChannelStatus.PENDING, ChannelStatus.GENERATING, ChannelStatus.FAILED, ChannelStatus.REJECTED}
)


@dataclass(frozen=True)
class Exclusion:
    """Why a segment was left out of assembly."""

    segment_id: str
    reason: str


@dataclass(frozen=True)
class EligibleSegment:
    """An eligible segment with its resolved sources.

    Attributes:
        segment: The segment
        visual: Resolved visual source
        audio: Resolved narration source, if attached
    """

    segment: Segment
    visual: ResolvedSource
    audio: ResolvedSource | None = None


def exclusion_reason(segment: Segment, resolver: MediaSourceResolver) -> str | None:
    """Get the reason a segment is not eligible, or None if it is."""
    if segment.visual.status != ChannelStatus.APPROVED:
        return "visual_not_approved"
    if not resolver.can_resolve_visual(segment.visual):
        return "missing_source"
    return None


def attached_audio(
    segment: Segment,
    resolver: MediaSourceResolver,
    attach_unapproved: bool = True,
) -> ResolvedSource | None:
    """Resolve the narration to attach to an eligible segment.

    Approved narration always attaches. With ``attach_unapproved`` any
    narration that still holds resolvable media attaches, whatever its
    status (a rejected or regenerating take keeps playing until replaced).

    Args:
        segment: Eligible segment
        resolver: Media source resolver
        attach_unapproved: Attach present-but-unapproved narration too

    Returns:
        Resolved audio source, or None when nothing is attached
    """
    audio = segment.audio
    if audio is None:
        return None
    if audio.status != ChannelStatus.APPROVED and not attach_unapproved:
        return None
    return resolver.resolve_audio(audio)


def attached_score(
    score: BackgroundScore | None,
    resolver: MediaSourceResolver,
    attach_unapproved: bool = True,
) -> ResolvedSource | None:
    """Resolve the background score to mix in.

    Unlike narration, an unapproved score attaches only once COMPLETED.
    """
    if score is None:
        return None
    if score.status != ChannelStatus.APPROVED:
        if not attach_unapproved or score.status in _SCORE_NOT_READY:
            return None
    return resolver.resolve_score(score)


def collect_eligible(
    script: Script,
    resolver: MediaSourceResolver,
    config: AssemblyConfig | None = None,
    log_exclusions: bool = True,
) -> tuple[list[EligibleSegment], list[Exclusion]]:
    """Split a script into eligible segments and exclusions, in narrative order.

    Args:
        script: Committed script snapshot
        resolver: Media source resolver
        config: Assembly configuration
        log_exclusions: Log one line per excluded segment

    Returns:
        Tuple of (eligible segments, exclusions)
    """
    config = config or AssemblyConfig()
    eligible: list[EligibleSegment] = []
    excluded: list[Exclusion] = []

    for segment in script.segments:
        visual = resolver.try_resolve_visual(segment.visual)
        if segment.visual.status != ChannelStatus.APPROVED or visual is None:
            reason = exclusion_reason(segment, resolver) or "missing_source"
            excluded.append(Exclusion(segment.id, reason))
            if log_exclusions:
                logger.info(
                    "Segment excluded from assembly",
                    segment_id=short_id(segment.id),
                    reason=reason,
                )
            continue
        audio = attached_audio(segment, resolver, config.attach_unapproved_audio)
        eligible.append(EligibleSegment(segment=segment, visual=visual, audio=audio))

    return eligible, excluded


def eligible_segment_ids(
    script: Script,
    resolver: MediaSourceResolver,
    config: AssemblyConfig | None = None,
) -> list[str]:
    """Get eligible segment IDs in narrative order."""
    eligible, _ = collect_eligible(script, resolver, config, log_exclusions=False)
    return [item.segment.id for item in eligible]


def eligibility_fingerprint(
    script: Script,
    resolver: MediaSourceResolver,
    config: AssemblyConfig | None = None,
) -> str:
    """Content fingerprint of everything an assembly would be built from.

    Covers eligible IDs, their resolved sources, committed edits, segment
    captions and the background score. Two snapshots with equal fingerprints
    produce the same assembly request.

    Returns:
        Hex sha256 digest
    """
    config = config or AssemblyConfig()
    eligible, _ = collect_eligible(script, resolver, config, log_exclusions=False)
    parts: list[object] = []
    for item in eligible:
        seg = item.segment
        edit = script.committed_edits.get(seg.id)
        parts.append(
            {
                "id": seg.id,
                "text": seg.text,
                "visual": item.visual.identity,
                "audio": item.audio.identity if item.audio else None,
                "audio_duration": seg.audio.duration if seg.audio else None,
                "transition": seg.visual.transition,
                "caption_text": seg.visual.caption_text,
                "caption": seg.visual.caption.model_dump() if seg.visual.caption else None,
                "presentation": list(seg.presentation_text or ()),
                "offsets": [seg.start_time, seg.end_time],
                "edit": edit.model_dump(mode="json") if edit else None,
            }
        )
    score = script.background_score
    score_source = attached_score(score, resolver, config.attach_unapproved_audio)
    parts.append(
        {
            "score": score_source.identity if score_source else None,
            "volume": score.volume if score else None,
            "trim": [score.trim_start, score.trim_end] if score else None,
        }
    )
    raw = json.dumps(parts, sort_keys=True, default=str)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


__all__ = [
    "EligibleSegment",
    "Exclusion",
    "attached_audio",
    "attached_score",
    "collect_eligible",
    "eligibility_fingerprint",
    "eligible_segment_ids",
    "exclusion_reason",
]
