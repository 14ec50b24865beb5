"""Media source resolution.

Reduces every representation of a segment's media (inline payload, remote
URL, transient handle, image path that really points at a clip) to exactly
one transmittable source: an inline payload or a fetchable URL.

Visual priority:
1. Inline payload (video slot, or the image slot in static-image mode)
2. Fetchable remote video URL
3. Image reference that already looks like a video (promotion)
4. Image reference after extension / path substitution
5. Otherwise unresolvable; callers exclude the segment

Transient handles are never returned: they cannot leave the process.
"""

import hashlib
import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from docreel.config.media import MediaResolutionConfig
from docreel.core.exceptions import ResolutionError
from docreel.core.logging import get_logger, short_id
from docreel.models.media import MediaRef, url_scheme
from docreel.models.score import BackgroundScore
from docreel.models.segment import Audio, Visual
from docreel.models.status import GenerationMode

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedSource:
    """One transmittable media source.

    Attributes:
        payload: Inline base64 payload
        url: Fetchable URL
        origin: Which rule produced it ("payload", "url", "promoted", "substituted")
    """

    payload: str | None = None
    url: str | None = None
    origin: str = "payload"

    def __post_init__(self) -> None:
        if bool(self.payload) == bool(self.url):
            raise ValueError("ResolvedSource requires exactly one of payload or url")

    @property
    def is_inline(self) -> bool:
        """Check if the source is an inline payload."""
        return self.payload is not None

    @property
    def identity(self) -> str:
        """Stable short identity of the source (for fingerprints)."""
        raw = self.payload if self.payload is not None else self.url or ""
        kind = "p" if self.payload is not None else "u"
        return f"{kind}:{hashlib.sha256(raw.encode('utf-8')).hexdigest()[:16]}"


class MediaSourceResolver:
    """Resolve segment media into a single transmittable source.

    Example:
        >>> resolver = MediaSourceResolver()
        >>> source = resolver.resolve_visual(segment.visual, segment.id)
        >>> source.url or source.payload
    """

    def __init__(self, config: MediaResolutionConfig | None = None) -> None:
        """Initialize MediaSourceResolver.

        Args:
            config: Media resolution configuration
        """
        self.config = config or MediaResolutionConfig()
        image_exts = "|".join(re.escape(ext.lstrip(".")) for ext in self.config.image_extensions)
        self._image_ext_re = re.compile(rf"\.({image_exts})(\?.*)?$", re.IGNORECASE)

    # =========================================================================
    # Predicates
    # =========================================================================

    def is_fetchable(self, url: str | None) -> bool:
        """Check if an external service can fetch the URL."""
        return bool(url) and url_scheme(url) in self.config.fetchable_schemes

    def is_transient(self, url: str | None) -> bool:
        """Check if the URL only exists inside this process."""
        return bool(url) and url_scheme(url) in self.config.transient_schemes

    def looks_like_video(self, src: str | None, mime_type: str | None = None) -> bool:
        """Check if a reference looks like a playable video.

        Args:
            src: URL or path
            mime_type: Known MIME type, if any

        Returns:
            True for video MIME types, data:video URLs or known video extensions
        """
        if mime_type and mime_type.lower().startswith("video/"):
            return True
        if not src:
            return False
        lower = src.strip().lower()
        if lower.startswith("data:video"):
            return True
        path = urlsplit(lower).path or lower
        return any(path.endswith(ext) for ext in self.config.video_extensions)

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve_media(self, ref: MediaRef) -> ResolvedSource | None:
        """Resolve a plain media reference (payload beats fetchable URL).

        Args:
            ref: Media reference

        Returns:
            Resolved source, or None when only a transient handle (or nothing) exists
        """
        if ref.payload:
            return ResolvedSource(payload=ref.payload, origin="payload")
        if self.is_fetchable(ref.url):
            return ResolvedSource(url=ref.url, origin="url")
        return None

    def try_resolve_visual(self, visual: Visual) -> ResolvedSource | None:
        """Resolve a visual, returning None when no rule applies."""
        video = visual.video
        image = visual.image

        if video.payload:
            return ResolvedSource(payload=video.payload, origin="payload")
        image_is_media = visual.mode == GenerationMode.IMAGE or self.looks_like_video(
            None, image.mime_type
        )
        if image.payload and image_is_media:
            return ResolvedSource(payload=image.payload, origin="payload")

        if self.is_fetchable(video.url):
            return ResolvedSource(url=video.url, origin="url")

        if image.url and not self.is_transient(image.url):
            if self.is_fetchable(image.url) and self.looks_like_video(image.url, image.mime_type):
                return ResolvedSource(url=image.url, origin="promoted")
            for candidate in self.substitution_candidates(image.url):
                if self.is_fetchable(candidate) and self.looks_like_video(candidate):
                    return ResolvedSource(url=candidate, origin="substituted")

        return None

    def resolve_visual(self, visual: Visual, segment_id: str | None = None) -> ResolvedSource:
        """Resolve a visual into exactly one source.

        Args:
            visual: Visual channel
            segment_id: Owning segment ID (for errors and logs)

        Returns:
            Resolved source

        Raises:
            ResolutionError: If no rule yields a transmittable source
        """
        source = self.try_resolve_visual(visual)
        if source is None:
            has_transient = bool(visual.video.handle or visual.image.handle)
            reason = "transient_only" if has_transient else "missing_source"
            raise ResolutionError(segment_id, reason=reason)
        if source.origin in ("promoted", "substituted"):
            logger.debug(
                "Promoted image reference to video source",
                segment_id=short_id(segment_id),
                origin=source.origin,
                url=source.url,
            )
        return source

    def can_resolve_visual(self, visual: Visual) -> bool:
        """Check if a visual resolves to a transmittable source."""
        return self.try_resolve_visual(visual) is not None

    def resolve_audio(self, audio: Audio | None) -> ResolvedSource | None:
        """Resolve narration audio (payload beats URL; handles are local-only)."""
        if audio is None:
            return None
        return self.resolve_media(audio.media)

    def resolve_score(self, score: BackgroundScore | None) -> ResolvedSource | None:
        """Resolve the background score the same way as segment audio."""
        if score is None:
            return None
        return self.resolve_media(score.media)

    def substitution_candidates(self, url: str) -> list[str]:
        """Build image->video candidate URLs in priority order.

        A path substitution alone keeps the image extension and can never
        look like a video, so each one is combined with the extension swap.

        Args:
            url: Image URL

        Returns:
            Candidates that differ from the input (path substitutions with
            the extension swapped first, then the extension swap alone)
        """
        candidates = [
            self._swap_extension(url.replace(sub.find, sub.replace))
            for sub in self.config.path_substitutions
            if sub.find in url
        ]
        candidates.append(self._swap_extension(url))
        seen: set[str] = set()
        unique: list[str] = []
        for candidate in candidates:
            if candidate != url and candidate not in seen:
                seen.add(candidate)
                unique.append(candidate)
        return unique

    def _swap_extension(self, url: str) -> str:
        return self._image_ext_re.sub(
            lambda m: f"{self.config.substitute_extension}{m.group(2) or ''}", url
        )


__all__ = ["MediaSourceResolver", "ResolvedSource"]
