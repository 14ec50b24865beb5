"""Distribution hand-off models.

A distribution request forwards the exported video to a separate review
and upload queue instead of downloading it locally.
"""

from datetime import datetime
from typing import Literal

from pydantic import Field

from docreel.models.assembly import WireModel

Platform = Literal["youtube", "x"]
DistributionStatus = Literal[
    "pending", "approved", "rejected", "uploading", "completed", "failed"
]


class YouTubeSettings(WireModel):
    """YouTube upload options."""

    privacy: Literal["public", "private", "unlisted"] = "private"
    category_id: str | None = Field(default=None, alias="categoryId")


class XSettings(WireModel):
    """X (Twitter) post options."""

    scheduled_at: datetime | None = Field(default=None, alias="scheduledAt")
    reply_settings: str | None = Field(default=None, alias="replySettings")
    request_reason: str | None = Field(default=None, alias="requestReason")


class DistributionRequest(WireModel):
    """Request body for a new distribution hand-off.

    Attributes:
        script_id: Script (session) the video belongs to
        video_url: Video as a ``data:video/mp4;base64,...`` URL or fetchable URL
        title: Post title
        description: Post description
        tags: Post tags
        thumbnail_url: Optional thumbnail
        platforms: Target platforms
        youtube_settings: YouTube options
        x_settings: X options
    """

    script_id: str = Field(alias="thesisSessionId")
    video_url: str = Field(alias="videoUrl")
    title: str = Field(min_length=1)
    description: str | None = None
    tags: list[str] | None = None
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")
    platforms: list[Platform] = Field(min_length=1)
    youtube_settings: YouTubeSettings | None = Field(default=None, alias="youtubeSettings")
    x_settings: XSettings | None = Field(default=None, alias="xSettings")


class DistributionRecord(WireModel):
    """Distribution request as stored by the service."""

    id: str
    status: DistributionStatus = "pending"
    title: str | None = None
    platforms: list[Platform] = Field(default_factory=list)
    error_message: str | None = Field(default=None, alias="errorMessage")
    created_at: datetime | None = Field(default=None, alias="createdAt")


__all__ = [
    "DistributionRecord",
    "DistributionRequest",
    "DistributionStatus",
    "Platform",
    "XSettings",
    "YouTubeSettings",
]
