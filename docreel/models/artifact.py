"""Assembled artifact model.

States: absent -> previewed (non-durable) -> assembled (durable)
-> approved -> exported.
"""

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from docreel.config.assembly import AspectRatio
from docreel.models.media import decode_payload


class ArtifactState(str, enum.Enum):
    """Assembled artifact lifecycle state."""

    ABSENT = "absent"
    PREVIEWED = "previewed"  # Preview render, never persisted
    ASSEMBLED = "assembled"  # Durable render
    APPROVED = "approved"  # Approved for export
    EXPORTED = "exported"  # Downloaded or handed off at least once


class AssembledArtifact(BaseModel):
    """Result of a render.

    Attributes:
        state: Lifecycle state
        payload: Durable base64-encoded video
        handle: Transient handle for local playback
        duration: Duration in seconds
        aspect_ratio: Rendered aspect ratio
        segment_count: Number of segments rendered
        fingerprint: Eligibility fingerprint the render was built from
        exported_at: Time of the first export
    """

    model_config = ConfigDict(frozen=True)

    state: ArtifactState = ArtifactState.ASSEMBLED
    payload: str | None = None
    handle: str | None = None
    duration: float = Field(default=0.0, ge=0.0)
    aspect_ratio: AspectRatio = "16:9"
    segment_count: int = Field(default=0, ge=0)
    fingerprint: str | None = None
    exported_at: datetime | None = None

    @property
    def is_preview(self) -> bool:
        """Check if this is a preview-only render."""
        return self.state == ArtifactState.PREVIEWED

    @property
    def is_exported(self) -> bool:
        """Check if the artifact has been exported."""
        return self.state == ArtifactState.EXPORTED

    @property
    def is_durable(self) -> bool:
        """Check if the artifact holds a valid durable payload."""
        if self.is_preview or not self.payload:
            return False
        try:
            decode_payload(self.payload)
        except ValueError:
            return False
        return True
