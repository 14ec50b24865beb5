"""Script session: the single holder of the current Script.

All shared state lives in one immutable Script snapshot. Every mutation
replaces the whole snapshot (copy-on-write), so a reader holding an older
snapshot always sees a consistent aggregate.

After each replacement the session:
- drops a preview artifact whose eligibility fingerprint no longer matches
- revokes transient handles the new snapshot no longer references
- notifies subscribers with (old, new)
"""

from collections.abc import Callable, Iterator

from docreel.config.assembly import AssemblyConfig
from docreel.core.logging import get_logger
from docreel.models.edit import SegmentEdit
from docreel.models.script import Script
from docreel.services.assembly.eligibility import eligibility_fingerprint, eligible_segment_ids
from docreel.services.editing.overlay import EditOverlay
from docreel.services.media.handles import HandleRegistry
from docreel.services.media.resolver import MediaSourceResolver

logger = get_logger(__name__)

Subscriber = Callable[[Script, Script], None]


def iter_handles(script: Script) -> Iterator[str]:
    """Yield every transient handle referenced by a script."""
    for segment in script.segments:
        visual = segment.visual
        for ref in (visual.video, visual.image, visual.thumbnail):
            if ref.handle:
                yield ref.handle
        if segment.audio and segment.audio.media.handle:
            yield segment.audio.media.handle
    if script.background_score and script.background_score.media.handle:
        yield script.background_score.media.handle
    if script.artifact and script.artifact.handle:
        yield script.artifact.handle


class ScriptSession:
    """Current script snapshot plus its edit overlay and handle registry.

    Example:
        >>> session = ScriptSession(script, HandleRegistry(), MediaSourceResolver())
        >>> session.update(lambda s: approval.approve(s, "s1", Channel.VISUAL))
        >>> session.stage_edit("s1", SegmentEdit(transition="slide"))
        >>> session.commit_edits()
        True
    """

    def __init__(
        self,
        script: Script,
        handles: HandleRegistry,
        resolver: MediaSourceResolver,
        config: AssemblyConfig | None = None,
    ) -> None:
        """Initialize ScriptSession.

        Args:
            script: Initial script snapshot
            handles: Transient handle registry
            resolver: Media source resolver
            config: Assembly configuration (eligibility rules)
        """
        self.handles = handles
        self.resolver = resolver
        self.config = config or AssemblyConfig()
        self._script = script
        self._overlay = EditOverlay(script.committed_edits)
        self._subscribers: list[Subscriber] = []

    @property
    def snapshot(self) -> Script:
        """Current script snapshot."""
        return self._script

    @property
    def overlay(self) -> EditOverlay:
        """Current edit overlay."""
        return self._overlay

    # =========================================================================
    # Derived state
    # =========================================================================

    def eligible_ids(self) -> list[str]:
        """Eligible segment IDs of the current snapshot."""
        return eligible_segment_ids(self._script, self.resolver, self.config)

    def fingerprint(self, script: Script | None = None) -> str:
        """Eligibility fingerprint of a snapshot (default: current)."""
        return eligibility_fingerprint(script or self._script, self.resolver, self.config)

    # =========================================================================
    # Mutation
    # =========================================================================

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change callback.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def update(self, fn: Callable[[Script], Script]) -> Script:
        """Replace the snapshot with fn(snapshot).

        Exceptions raised by fn propagate and leave the snapshot unchanged.

        Returns:
            The new snapshot
        """
        old = self._script
        new = fn(old)
        if new is old:
            return old

        if new.artifact is not None and new.artifact.is_preview:
            if new.artifact.fingerprint != self.fingerprint(new):
                logger.debug("Preview discarded after change")
                new = new.with_artifact(None)

        self._script = new
        self._release_handles(old, new)
        for callback in list(self._subscribers):
            try:
                callback(old, new)
            except Exception:
                logger.exception("Session subscriber failed", subscriber=repr(callback))
        return new

    def replace(self, script: Script) -> Script:
        """Load a different script, resetting the edit overlay."""
        self._overlay = EditOverlay(script.committed_edits)
        return self.update(lambda _: script)

    def stage_edit(self, segment_id: str, edit: SegmentEdit) -> None:
        """Stage a pending edit for a segment.

        Raises:
            ValidationError: If the segment does not exist or the edit
                conflicts with the edit already there
        """
        self._script.segment(segment_id)
        self._overlay = self._overlay.stage(segment_id, edit)

    def discard_edits(self, segment_id: str | None = None) -> None:
        """Drop pending edits for one segment or all segments."""
        self._overlay = self._overlay.discard(segment_id)

    def commit_edits(self, segment_id: str | None = None) -> bool:
        """Commit pending edits into the snapshot.

        Args:
            segment_id: Segment to commit (None commits all)

        Returns:
            True if the committed edits changed
        """
        overlay = (
            self._overlay.commit_all() if segment_id is None else self._overlay.commit(segment_id)
        )
        self._overlay = overlay
        if overlay.committed == self._script.committed_edits:
            return False
        self.update(lambda s: s.with_committed_edits(overlay.committed))
        return True

    def _release_handles(self, old: Script, new: Script) -> None:
        stale = set(iter_handles(old)) - set(iter_handles(new))
        for handle in stale:
            self.handles.revoke(handle)
        if stale:
            logger.debug("Released transient handles", count=len(stale))


__all__ = ["ScriptSession", "iter_handles"]
