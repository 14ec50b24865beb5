"""Per-segment edit models.

A SegmentEdit carries optional overrides. Unset fields (None) never
overwrite anything when edits are merged.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from docreel.config.assembly import TransitionName
from docreel.models.segment import CaptionSettings


class CropWindow(BaseModel):
    """Crop window inside a segment clip, in seconds.

    Attributes:
        start: Crop start (None = clip start)
        end: Crop end (None = clip end)
    """

    model_config = ConfigDict(frozen=True)

    start: float | None = Field(default=None, ge=0.0)
    end: float | None = Field(default=None, ge=0.0)

    @model_validator(mode="after")
    def validate_order(self) -> "CropWindow":
        """Ensure end is after start when both are set."""
        if self.start is not None and self.end is not None and self.end <= self.start:
            raise ValueError("crop end must be greater than crop start")
        return self


class SegmentEdit(BaseModel):
    """User edit overrides for one segment.

    Attributes:
        crop: Crop window override
        transition: Transition override
        caption_text: Caption text override
        caption: Caption placement override
        presentation_text: Bullet-point override
    """

    model_config = ConfigDict(frozen=True)

    crop: CropWindow | None = None
    transition: TransitionName | None = None
    caption_text: str | None = None
    caption: CaptionSettings | None = None
    presentation_text: tuple[str, ...] | None = None

    @field_validator("presentation_text", mode="before")
    @classmethod
    def coerce_presentation_text(cls, v: object) -> object:
        """Accept lists for presentation text."""
        if isinstance(v, list):
            return tuple(v)
        return v

    @property
    def is_empty(self) -> bool:
        """Check if no override is set."""
        return all(getattr(self, name) is None for name in type(self).model_fields)


EMPTY_EDIT = SegmentEdit()
