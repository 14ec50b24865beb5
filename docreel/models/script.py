"""Script aggregate.

The Script owns all segments, the background score, the committed segment
edits and the current assembled artifact. It is immutable: every update
returns a new Script (copy-on-write), so any snapshot a reader holds stays
internally consistent while newer snapshots are produced.
"""

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from types import MappingProxyType

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from docreel.core.exceptions import ValidationError
from docreel.models.artifact import AssembledArtifact
from docreel.models.edit import SegmentEdit
from docreel.models.score import BackgroundScore
from docreel.models.segment import Segment


class Script(BaseModel):
    """Narrated script split into segments.

    Attributes:
        id: Script identifier (assigned by storage)
        title: Display title
        script: Full script text
        version: Script revision number
        generated_at: When the script text was generated
        segments: Segments in narrative order
        background_score: Shared background music
        committed_edits: Saved per-segment edits keyed by segment ID
        artifact: Current assembled artifact
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    title: str | None = None
    script: str = ""
    version: int = Field(default=1, ge=1)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    segments: tuple[Segment, ...] = ()
    background_score: BackgroundScore | None = None
    committed_edits: Mapping[str, SegmentEdit] = Field(
        default_factory=lambda: MappingProxyType({})
    )
    artifact: AssembledArtifact | None = None

    @field_validator("segments", mode="before")
    @classmethod
    def coerce_segments(cls, v: object) -> object:
        """Accept lists for segments."""
        if isinstance(v, list):
            return tuple(v)
        return v

    @field_validator("committed_edits", mode="after")
    @classmethod
    def freeze_committed_edits(cls, v: Mapping[str, SegmentEdit]) -> Mapping[str, SegmentEdit]:
        """Store committed edits as a read-only mapping."""
        return MappingProxyType(dict(v))

    @field_serializer("committed_edits")
    def serialize_committed_edits(self, v: Mapping[str, SegmentEdit]) -> dict[str, SegmentEdit]:
        return dict(v)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "Script":
        """Ensure segment IDs are unique."""
        ids = [s.id for s in self.segments]
        if len(ids) != len(set(ids)):
            raise ValueError("segment ids must be unique")
        return self

    @property
    def segment_ids(self) -> list[str]:
        """Segment IDs in narrative order."""
        return [s.id for s in self.segments]

    def has_segment(self, segment_id: str) -> bool:
        """Check if a segment exists."""
        return any(s.id == segment_id for s in self.segments)

    def segment(self, segment_id: str) -> Segment:
        """Get a segment by ID.

        Raises:
            ValidationError: If the segment does not exist
        """
        for seg in self.segments:
            if seg.id == segment_id:
                return seg
        raise ValidationError(f"Unknown segment: {segment_id}", segment_id=segment_id)

    def update_segment(self, segment_id: str, fn: Callable[[Segment], Segment]) -> "Script":
        """Return a new Script with one segment replaced by fn(segment).

        Raises:
            ValidationError: If the segment does not exist
        """
        current = self.segment(segment_id)
        updated = fn(current)
        if updated.id != segment_id:
            raise ValidationError("Segment ID cannot change", segment_id=segment_id)
        segments = tuple(updated if s.id == segment_id else s for s in self.segments)
        return self.model_copy(update={"segments": segments})

    def with_committed_edits(self, edits: Mapping[str, SegmentEdit]) -> "Script":
        """Return a new Script with the committed edits replaced."""
        return self.model_copy(update={"committed_edits": MappingProxyType(dict(edits))})

    def with_artifact(self, artifact: AssembledArtifact | None) -> "Script":
        """Return a new Script with the artifact replaced."""
        return self.model_copy(update={"artifact": artifact})

    def with_background_score(self, score: BackgroundScore | None) -> "Script":
        """Return a new Script with the background score replaced."""
        return self.model_copy(update={"background_score": score})
