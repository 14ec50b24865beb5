"""Segment data models.

A Segment is one narrative unit of the script. It owns exactly one Visual
and zero-or-one Audio. Approval flags are derived from channel status so
they can never drift out of sync with it.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from docreel.config.assembly import TransitionName
from docreel.models.media import EMPTY_MEDIA, MediaRef
from docreel.models.status import ChannelStatus, GenerationMode


class CaptionSettings(BaseModel):
    """Caption placement for a segment.

    Every field is optional; unset fields fall back to configured defaults.

    Attributes:
        y_position: Vertical position in pixels
        font_size: Font size in pixels
        zoom: Zoom level (0.5 - 2.0)
        color: Text color (hex)
    """

    model_config = ConfigDict(frozen=True)

    y_position: int | None = Field(default=None, ge=0, le=1920)
    font_size: int | None = Field(default=None, ge=8, le=200)
    zoom: float | None = Field(default=None, ge=0.5, le=2.0)
    color: str | None = None


class Visual(BaseModel):
    """Visual channel of a segment.

    Attributes:
        mode: Generation mode (synthesized clip or static image)
        video: Video media reference
        image: Image media reference (static-image mode, or a clip's still)
        thumbnail: Thumbnail reference
        transition: Transition to the next segment
        caption_text: Saved caption text
        caption: Saved caption placement
        status: Channel status
        uploaded: True if the user uploaded the clip instead of generating it
        prompt: Generation prompt, kept for reproducibility
        error: Last provider error message
    """

    model_config = ConfigDict(frozen=True)

    mode: GenerationMode = GenerationMode.CLIP
    video: MediaRef = EMPTY_MEDIA
    image: MediaRef = EMPTY_MEDIA
    thumbnail: MediaRef = EMPTY_MEDIA
    transition: TransitionName | None = None
    caption_text: str | None = None
    caption: CaptionSettings | None = None
    status: ChannelStatus = ChannelStatus.PENDING
    uploaded: bool = False
    prompt: str | None = None
    error: str | None = None

    @property
    def approved(self) -> bool:
        """Check if the visual is approved."""
        return self.status == ChannelStatus.APPROVED


class Audio(BaseModel):
    """Narration channel of a segment.

    Attributes:
        media: Audio media reference
        duration: Duration in seconds
        status: Channel status
        custom: True if user-supplied rather than generated
        voice_id: Voice identifier used for generation
        error: Last provider error message
    """

    model_config = ConfigDict(frozen=True)

    media: MediaRef = EMPTY_MEDIA
    duration: float | None = Field(default=None, ge=0.0)
    status: ChannelStatus = ChannelStatus.PENDING
    custom: bool = False
    voice_id: str | None = None
    error: str | None = None

    @property
    def approved(self) -> bool:
        """Check if the narration is approved."""
        return self.status == ChannelStatus.APPROVED


class Segment(BaseModel):
    """One narrative unit of a script.

    Attributes:
        id: Stable identifier
        text: Narration text
        start_time: Optional start offset in seconds
        end_time: Optional end offset in seconds
        visual: Visual channel
        audio: Optional narration channel
        presentation_text: Saved bullet points for slide-style rendering
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    text: str = ""
    start_time: float | None = Field(default=None, ge=0.0)
    end_time: float | None = Field(default=None, ge=0.0)
    visual: Visual = Field(default_factory=Visual)
    audio: Audio | None = None
    presentation_text: tuple[str, ...] | None = None

    @field_validator("presentation_text", mode="before")
    @classmethod
    def coerce_presentation_text(cls, v: object) -> object:
        """Accept lists for presentation text."""
        if isinstance(v, list):
            return tuple(v)
        return v

    @property
    def approved(self) -> bool:
        """Segment approval follows the visual channel."""
        return self.visual.approved

    @property
    def offset_duration(self) -> float | None:
        """Duration implied by start/end offsets, if both are set and ordered."""
        if self.start_time is None or self.end_time is None:
            return None
        if self.end_time <= self.start_time:
            return None
        return self.end_time - self.start_time
