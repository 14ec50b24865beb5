"""Unit tests for export targets."""

import base64
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from docreel.core.exceptions import ValidationError
from docreel.infrastructure.distribution import DistributionClient
from docreel.models.distribution import DistributionRecord
from docreel.services.export import DistributionTarget, ExportResult, LocalDownloadTarget


@pytest.fixture
def result(video_bytes):
    """Prepared export."""
    return ExportResult(
        filename="final-video-1735689600000.mp4",
        data=video_bytes,
        mime_type="video/mp4",
        created_at=datetime(2025, 1, 1, tzinfo=UTC),
    )


@pytest.fixture
def client():
    """Mock distribution client."""
    mock = MagicMock(spec=DistributionClient)
    mock.create_request = AsyncMock(return_value=DistributionRecord(id="dist-42"))
    return mock


class TestLocalDownloadTarget:
    """Tests for LocalDownloadTarget."""

    @pytest.mark.asyncio
    async def test_writes_file(self, tmp_path, result, abc_script, video_bytes):
        """Test the file is written and its absolute path returned."""
        target = LocalDownloadTarget(tmp_path / "nested" / "outputs")

        location = await target.deliver(result, abc_script)

        path = Path(location)
        assert path.is_absolute()
        assert path.name == "final-video-1735689600000.mp4"
        assert path.read_bytes() == video_bytes

    @pytest.mark.asyncio
    async def test_overwrites_same_name(self, tmp_path, result, abc_script):
        """Test delivering twice keeps one file."""
        target = LocalDownloadTarget(tmp_path)

        await target.deliver(result, abc_script)
        await target.deliver(result, abc_script)

        assert [p.name for p in tmp_path.iterdir()] == [result.filename]


class TestDistributionTarget:
    """Tests for DistributionTarget."""

    @pytest.mark.asyncio
    async def test_creates_request(self, client, result, abc_script, video_bytes):
        """Test the video is sent inline as a data URL."""
        target = DistributionTarget(client, tags=["science"])

        location = await target.deliver(result, abc_script)

        assert location == "dist-42"
        request = client.create_request.call_args.args[0]
        assert request.script_id == "script-1"
        assert request.title == "Deep Sea Vents"
        assert request.platforms == ["youtube"]
        assert request.youtube_settings.privacy == "private"
        prefix = "data:video/mp4;base64,"
        assert request.video_url.startswith(prefix)
        assert base64.b64decode(request.video_url[len(prefix) :]) == video_bytes

    @pytest.mark.asyncio
    async def test_title_override(self, client, result, abc_script):
        """Test an explicit title wins over the script title."""
        target = DistributionTarget(client, title="Vents", platforms=["x"])

        await target.deliver(result, abc_script)

        request = client.create_request.call_args.args[0]
        assert request.title == "Vents"
        assert request.youtube_settings is None

    @pytest.mark.asyncio
    async def test_requires_saved_script(self, client, result, abc_script):
        """Test unsaved scripts cannot be distributed."""
        with pytest.raises(ValidationError, match="saved"):
            await DistributionTarget(client).deliver(
                result, abc_script.model_copy(update={"id": None})
            )

        client.create_request.assert_not_called()

    @pytest.mark.asyncio
    async def test_requires_title(self, client, result, abc_script):
        """Test a title is required."""
        with pytest.raises(ValidationError, match="title"):
            await DistributionTarget(client).deliver(
                result, abc_script.model_copy(update={"title": None})
            )
