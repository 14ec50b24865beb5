"""Background score model (one per script, shared by all segments)."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from docreel.models.media import EMPTY_MEDIA, MediaRef
from docreel.models.status import ChannelStatus, Provenance


class LicenseInfo(BaseModel):
    """Licensing metadata of a background score.

    Attributes:
        provider: Who issued the audio
        license_type: License name
        attribution: Required attribution text
        usage_rights: Free-text usage rights
    """

    model_config = ConfigDict(frozen=True)

    provider: Literal["stability", "custom"] = "custom"
    license_type: str | None = None
    attribution: str | None = None
    usage_rights: str | None = None


class BackgroundScore(BaseModel):
    """Shared background music for the whole script.

    Attributes:
        media: Audio media reference
        volume: Mix volume (0.0 - 1.0)
        trim_start: Trim window start in seconds
        trim_end: Trim window end in seconds
        duration: Source duration in seconds
        status: Channel status
        provenance: Generated or uploaded
        license: Licensing metadata
        prompt: Generation prompt
        seed: Generation seed
    """

    model_config = ConfigDict(frozen=True)

    media: MediaRef = EMPTY_MEDIA
    volume: float | None = Field(default=None, ge=0.0, le=1.0)
    trim_start: float | None = Field(default=None, ge=0.0)
    trim_end: float | None = Field(default=None, ge=0.0)
    duration: float | None = Field(default=None, ge=0.0)
    status: ChannelStatus = ChannelStatus.PENDING
    provenance: Provenance = Provenance.GENERATED
    license: LicenseInfo | None = None
    prompt: str | None = None
    seed: int | None = None

    @model_validator(mode="after")
    def validate_trim_window(self) -> "BackgroundScore":
        """Ensure the trim window is ordered."""
        if (
            self.trim_start is not None
            and self.trim_end is not None
            and self.trim_end <= self.trim_start
        ):
            raise ValueError("trim_end must be greater than trim_start")
        return self

    @property
    def approved(self) -> bool:
        """Check if the score is approved."""
        return self.status == ChannelStatus.APPROVED
