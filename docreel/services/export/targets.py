"""Export targets.

- LocalDownloadTarget: writes the video into the export directory
- DistributionTarget: forwards the same durable payload to the
  distribution service instead of downloading it
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Protocol

from docreel.core.exceptions import ValidationError
from docreel.core.logging import get_logger
from docreel.infrastructure.distribution import DistributionClient
from docreel.models.distribution import DistributionRequest, Platform, YouTubeSettings
from docreel.models.media import encode_payload
from docreel.models.script import Script

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExportResult:
    """A prepared export.

    Attributes:
        filename: Generated filename
        data: Decoded video bytes
        mime_type: MIME type of the video
        created_at: When the export was prepared
        location: Where the target delivered it (path or request ID)
    """

    filename: str
    data: bytes
    mime_type: str
    created_at: datetime
    location: str | None = None

    @property
    def size_bytes(self) -> int:
        """Size of the video in bytes."""
        return len(self.data)


class ExportTarget(Protocol):
    """Destination of an export."""

    name: str

    async def deliver(self, result: ExportResult, script: Script) -> str:
        """Deliver the video and return where it went."""
        ...


class LocalDownloadTarget:
    """Write exports into a local directory."""

    name = "download"

    def __init__(self, export_dir: str | Path) -> None:
        """Initialize LocalDownloadTarget.

        Args:
            export_dir: Directory for exported files (created on demand)
        """
        self.export_dir = Path(export_dir)

    async def deliver(self, result: ExportResult, script: Script) -> str:
        """Write the video file.

        Returns:
            Absolute path of the written file
        """
        path = self.export_dir / result.filename
        await asyncio.to_thread(self._write, path, result.data)
        logger.info("Export written", path=str(path), size_bytes=result.size_bytes)
        return str(path.resolve())

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


@dataclass
class DistributionTarget:
    """Hand the video off to the distribution queue.

    Attributes:
        client: Distribution service client
        platforms: Target platforms
        title: Post title (default: script title)
        description: Post description
        tags: Post tags
        privacy: YouTube privacy setting
    """

    client: DistributionClient
    platforms: list[Platform] = field(default_factory=lambda: ["youtube"])
    title: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    privacy: str = "private"
    name: str = "distribution"

    async def deliver(self, result: ExportResult, script: Script) -> str:
        """Create a distribution request carrying the video.

        Returns:
            ID of the distribution request

        Raises:
            ValidationError: If the script was never saved or has no title
        """
        if not script.id:
            raise ValidationError("Script must be saved before distribution")
        title = self.title or script.title
        if not title:
            raise ValidationError("Distribution requires a title")

        payload = await asyncio.to_thread(encode_payload, result.data)
        request = DistributionRequest(
            script_id=script.id,
            video_url=f"data:{result.mime_type};base64,{payload}",
            title=title,
            description=self.description,
            tags=self.tags,
            platforms=self.platforms,
            youtube_settings=(
                YouTubeSettings(privacy=self.privacy) if "youtube" in self.platforms else None
            ),
        )
        record = await self.client.create_request(request)
        return record.id


__all__ = [
    "DistributionTarget",
    "ExportResult",
    "ExportTarget",
    "LocalDownloadTarget",
]
