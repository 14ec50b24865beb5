"""Two-layer edit overlay.

Committed edits are the saved layer; pending edits are staged on top.
The effective edit of a segment is committed merged with pending, field by
field: a field unset (None) in the pending layer never erases the committed
value. Nested caption settings and crop windows merge the same way.

The overlay is immutable; every operation returns a new overlay.
"""

from collections.abc import Mapping
from typing import TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from docreel.core.exceptions import ValidationError
from docreel.core.logging import get_logger, short_id
from docreel.models.edit import EMPTY_EDIT, CropWindow, SegmentEdit
from docreel.models.segment import CaptionSettings

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def _merge_model(base: M | None, override: M | None) -> M | None:
    """Merge two models field by field (override wins where set)."""
    if override is None:
        return base
    if base is None:
        return override
    update = {
        name: value
        for name in type(override).model_fields
        if (value := getattr(override, name)) is not None
    }
    merged = base.model_dump()
    merged.update(update)
    return type(base).model_validate(merged)


def merge_edits(
    base: SegmentEdit | None,
    override: SegmentEdit | None,
    segment_id: str | None = None,
) -> SegmentEdit:
    """Deep-merge two segment edits.

    Args:
        base: Lower layer
        override: Upper layer; its set fields win
        segment_id: Segment the edits belong to (error context)

    Returns:
        Merged edit (EMPTY_EDIT if both are absent)

    Raises:
        ValidationError: If the merged crop or caption is invalid, e.g. a
            new crop start past the committed crop end
    """
    base = base or EMPTY_EDIT
    if override is None or override.is_empty:
        return base
    try:
        crop: CropWindow | None = _merge_model(base.crop, override.crop)
        caption: CaptionSettings | None = _merge_model(base.caption, override.caption)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Conflicting edit: {e.errors()[0]['msg']}",
            segment_id=segment_id,
            context={"error_count": e.error_count()},
        ) from e
    return SegmentEdit(
        crop=crop,
        transition=override.transition if override.transition is not None else base.transition,
        caption_text=(
            override.caption_text if override.caption_text is not None else base.caption_text
        ),
        caption=caption,
        presentation_text=(
            override.presentation_text
            if override.presentation_text is not None
            else base.presentation_text
        ),
    )


class EditOverlay:
    """Committed and pending segment edits.

    Example:
        >>> overlay = EditOverlay()
        >>> overlay = overlay.stage("s1", SegmentEdit(transition="slide"))
        >>> overlay.effective("s1").transition
        'slide'
        >>> overlay = overlay.commit("s1")
        >>> overlay.has_uncommitted_changes()
        False
    """

    def __init__(
        self,
        committed: Mapping[str, SegmentEdit] | None = None,
        pending: Mapping[str, SegmentEdit] | None = None,
    ) -> None:
        """Initialize EditOverlay.

        Args:
            committed: Saved edits keyed by segment ID
            pending: Staged edits keyed by segment ID
        """
        self._committed: dict[str, SegmentEdit] = dict(committed or {})
        self._pending: dict[str, SegmentEdit] = {
            seg_id: edit for seg_id, edit in (pending or {}).items() if not edit.is_empty
        }

    @property
    def committed(self) -> dict[str, SegmentEdit]:
        """Copy of the committed layer."""
        return dict(self._committed)

    @property
    def pending(self) -> dict[str, SegmentEdit]:
        """Copy of the pending layer."""
        return dict(self._pending)

    def stage(self, segment_id: str, edit: SegmentEdit) -> "EditOverlay":
        """Stage an edit on top of any edit already pending for the segment.

        Raises:
            ValidationError: If the edit conflicts with the pending or
                committed layer; the overlay is left unchanged
        """
        staged = merge_edits(self._pending.get(segment_id), edit, segment_id)
        merge_edits(self._committed.get(segment_id), staged, segment_id)
        pending = {**self._pending, segment_id: staged}
        return EditOverlay(self._committed, pending)

    def discard(self, segment_id: str | None = None) -> "EditOverlay":
        """Drop pending edits for one segment, or all when segment_id is None."""
        if segment_id is None:
            return EditOverlay(self._committed)
        pending = {k: v for k, v in self._pending.items() if k != segment_id}
        return EditOverlay(self._committed, pending)

    def effective(self, segment_id: str) -> SegmentEdit:
        """Get committed merged with pending for a segment."""
        return merge_edits(
            self._committed.get(segment_id), self._pending.get(segment_id), segment_id
        )

    def commit(self, segment_id: str) -> "EditOverlay":
        """Fold one segment's pending edit into the committed layer."""
        if segment_id not in self._pending:
            return self
        committed = {**self._committed, segment_id: self.effective(segment_id)}
        pending = {k: v for k, v in self._pending.items() if k != segment_id}
        logger.debug("Edit committed", segment_id=short_id(segment_id))
        return EditOverlay(committed, pending)

    def commit_all(self) -> "EditOverlay":
        """Fold every pending edit into the committed layer."""
        if not self._pending:
            return self
        committed = dict(self._committed)
        for segment_id in self._pending:
            committed[segment_id] = self.effective(segment_id)
        logger.debug("Pending edits committed", count=len(self._pending))
        return EditOverlay(committed)

    def has_uncommitted_changes(self) -> bool:
        """Check if any pending edit differs from its committed counterpart."""
        return any(
            self.effective(seg_id) != self._committed.get(seg_id, EMPTY_EDIT)
            for seg_id in self._pending
        )

    def prune(self, segment_ids: set[str]) -> "EditOverlay":
        """Drop edits for segments that no longer exist."""
        return EditOverlay(
            {k: v for k, v in self._committed.items() if k in segment_ids},
            {k: v for k, v in self._pending.items() if k in segment_ids},
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EditOverlay):
            return NotImplemented
        return self._committed == other._committed and self._pending == other._pending

    def __repr__(self) -> str:
        return f"EditOverlay(committed={len(self._committed)}, pending={len(self._pending)})"


__all__ = ["EditOverlay", "merge_edits"]
