"""Renderer-facing assembly request and response models.

Field names are snake_case in Python; the wire form uses the renderer's
camelCase names (`sentenceId`, `videoBase64`, `subtitleSettings`, ...).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from docreel.config.assembly import AspectRatio, TransitionName


class WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the renderer's JSON shape (unset fields omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class SubtitleSettings(WireModel):
    """Effective caption placement sent to the renderer."""

    y_position: int = Field(alias="yPosition")
    font_size: int = Field(alias="fontSize")
    zoom: float
    color: str | None = None


class SegmentDescriptor(WireModel):
    """One segment of an assembly request.

    Exactly one of video_url / video_payload is set. Audio fields are set
    only when narration was attached.
    """

    segment_id: str = Field(alias="sentenceId")
    video_url: str | None = Field(default=None, alias="videoUrl")
    video_payload: str | None = Field(default=None, alias="videoBase64")
    audio_url: str | None = Field(default=None, alias="audioUrl")
    audio_payload: str | None = Field(default=None, alias="audioBase64")
    duration: float
    start_time: float = Field(alias="startTime")
    end_time: float = Field(alias="endTime")
    transition_type: TransitionName = Field(alias="transitionType")
    subtitle_settings: SubtitleSettings = Field(alias="subtitleSettings")
    subtitle_text: str | None = Field(default=None, alias="subtitleText")
    presentation_text: list[str] | None = Field(default=None, alias="presentationText")

    @property
    def has_audio(self) -> bool:
        """Check if narration is attached."""
        return bool(self.audio_url or self.audio_payload)


class AssemblyRequest(WireModel):
    """Complete request for the external renderer.

    Attributes:
        segments: Segment descriptors in narrative order
        aspect_ratio: Target aspect ratio
        background_music_url: Background score URL
        background_music_payload: Background score inline payload
        music_volume: Background score volume
        music_trim_start: Background score trim start
        music_trim_end: Background score trim end
        fingerprint: Eligibility fingerprint the request was built from (not sent)
    """

    segments: list[SegmentDescriptor]
    aspect_ratio: AspectRatio = Field(alias="aspectRatio")
    background_music_url: str | None = Field(default=None, alias="backgroundMusicUrl")
    background_music_payload: str | None = Field(default=None, alias="backgroundMusicBase64")
    music_volume: float | None = Field(default=None, alias="musicVolume")
    music_trim_start: float | None = Field(default=None, alias="musicTrimStart")
    music_trim_end: float | None = Field(default=None, alias="musicTrimEnd")
    fingerprint: str = Field(default="", exclude=True)

    @property
    def segment_ids(self) -> list[str]:
        """Segment IDs in request order."""
        return [s.segment_id for s in self.segments]


class RenderResult(WireModel):
    """Renderer response payload.

    Attributes:
        video_payload: Encoded video (base64)
        video_url: Optional renderer-side URL
        duration: Duration in seconds
        aspect_ratio: Rendered aspect ratio
        segment_count: Segments rendered
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    video_payload: str = Field(alias="videoBase64")
    video_url: str | None = Field(default=None, alias="videoUrl")
    duration: float = 0.0
    aspect_ratio: AspectRatio | None = Field(default=None, alias="aspectRatio")
    segment_count: int | None = Field(default=None, alias="segmentCount")
