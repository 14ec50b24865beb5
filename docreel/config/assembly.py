"""Assembly, auto-assembly and export configuration models.

This module provides typed Pydantic configuration for:
- Caption defaults applied when a segment never set placement
- Assembly request defaults (transition, aspect ratio, music volume)
- Auto-assembly debounce
- Export filenames and payload checks
"""

from typing import Literal

from pydantic import BaseModel, Field

AspectRatio = Literal["16:9", "9:16"]
TransitionName = Literal["fade", "slide", "dissolve", "none"]


class CaptionDefaults(BaseModel):
    """Caption placement defaults.

    Attributes:
        font_size: Font size in pixels
        y_position: Vertical position in pixels (0-1080)
        zoom: Caption zoom level
    """

    font_size: int = Field(default=42, ge=8, le=200, description="Font size in pixels")
    y_position: int = Field(default=940, ge=0, le=1920, description="Y position in pixels")
    zoom: float = Field(default=1.0, ge=0.5, le=2.0, description="Caption zoom")


class AssemblyConfig(BaseModel):
    """Assembly request defaults.

    Attributes:
        default_transition: Transition used when no override exists
        default_aspect_ratio: Target aspect ratio
        default_segment_duration: Duration when neither audio nor offsets give one
        default_music_volume: Background score volume when unset
        attach_unapproved_audio: Attach present-but-unapproved narration
        captions: Caption placement defaults
    """

    default_transition: TransitionName = Field(default="fade")
    default_aspect_ratio: AspectRatio = Field(default="16:9")
    default_segment_duration: float = Field(default=6.0, gt=0.0, le=600.0)
    default_music_volume: float = Field(default=0.3, ge=0.0, le=1.0)
    attach_unapproved_audio: bool = Field(
        default=True, description="Auto-attach narration even when not approved"
    )
    captions: CaptionDefaults = Field(default_factory=CaptionDefaults)


class AutoAssemblyConfig(BaseModel):
    """Auto-assembly scheduling.

    Attributes:
        enabled: Whether auto-assembly is active
        debounce_seconds: Quiet period after the eligible count grows
    """

    enabled: bool = Field(default=True)
    debounce_seconds: float = Field(default=1.5, ge=0.0, le=60.0)


class ExportConfig(BaseModel):
    """Export configuration.

    Attributes:
        filename_prefix: Prefix for generated filenames
        extension: File extension (without dot)
        mime_type: MIME type of the exported payload
        min_payload_bytes: Smallest decoded payload accepted as a real render
    """

    filename_prefix: str = Field(default="final-video")
    extension: str = Field(default="mp4")
    mime_type: str = Field(default="video/mp4")
    min_payload_bytes: int = Field(default=1, ge=1)
