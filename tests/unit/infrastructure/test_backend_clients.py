"""Unit tests for renderer, storage and distribution clients."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from docreel.core.exceptions import CodecError, ExternalAPIError
from docreel.infrastructure.distribution import FALLBACK_HINT, DistributionClient
from docreel.infrastructure.http_client import HTTPClient
from docreel.infrastructure.renderer import RenderServiceClient
from docreel.infrastructure.storage import ScriptStorageClient
from docreel.models.assembly import AssemblyRequest, SegmentDescriptor, SubtitleSettings
from docreel.models.distribution import DistributionRequest
from docreel.models.durable import DurableScript


@pytest.fixture
def mock_http():
    """HTTPClient double with an AsyncMock request_json."""
    client = MagicMock(spec=HTTPClient)
    client.request_json = AsyncMock()
    return client


@pytest.fixture
def request_body():
    """Minimal assembly request."""
    return AssemblyRequest(
        segments=[
            SegmentDescriptor(
                segment_id="seg-a",
                video_url="https://cdn.example.com/a.mp4",
                duration=5.0,
                start_time=0.0,
                end_time=5.0,
                transition_type="fade",
                subtitle_settings=SubtitleSettings(y_position=940, font_size=42, zoom=1.0),
            )
        ],
        aspect_ratio="16:9",
        fingerprint="fp",
    )


class TestRenderServiceClient:
    """Tests for RenderServiceClient."""

    @pytest.mark.asyncio
    async def test_assemble_posts_wire_body(self, request_body):
        """Test the camelCase body reaches /video/assemble."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "data": {"videoBase64": "AAAA", "duration": 5.0, "segmentCount": 1},
                },
            )

        http_client = HTTPClient(
            "https://api.example.com/api/v1", transport=httpx.MockTransport(handler)
        )
        renderer = RenderServiceClient(http_client)

        result = await renderer.assemble(request_body)

        assert seen["path"] == "/api/v1/video/assemble"
        assert seen["body"]["segments"][0]["sentenceId"] == "seg-a"
        assert "fingerprint" not in seen["body"]
        assert result.video_payload == "AAAA"
        assert result.segment_count == 1

    @pytest.mark.asyncio
    async def test_preview_path(self, mock_http, request_body):
        """Test previews use /video/preview."""
        mock_http.request_json.return_value = {"success": True, "data": {"videoBase64": "AAAA"}}

        await RenderServiceClient(mock_http, timeout=30.0).preview(request_body)

        args, kwargs = mock_http.request_json.call_args
        assert args[:3] == ("renderer", "POST", "/video/preview")
        assert kwargs["timeout"] == 30.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"success": False, "message": "no segments"},
            {"success": True, "data": {}},
            {"success": True},
            ["not", "a", "dict"],
        ],
    )
    async def test_bad_envelopes(self, mock_http, request_body, body):
        """Test failed or empty envelopes raise ExternalAPIError."""
        mock_http.request_json.return_value = body

        with pytest.raises(ExternalAPIError):
            await RenderServiceClient(mock_http).assemble(request_body)


class TestScriptStorageClient:
    """Tests for ScriptStorageClient."""

    @pytest.fixture
    def document(self):
        """Durable document."""
        return DurableScript(title="Vents", script={"segments": []})

    @pytest.mark.asyncio
    async def test_save(self, mock_http, document):
        """Test save posts the document and returns the new ID."""
        mock_http.request_json.return_value = {"success": True, "data": {"id": "abc"}}

        script_id = await ScriptStorageClient(mock_http).save(document)

        assert script_id == "abc"
        kwargs = mock_http.request_json.call_args[1]
        assert kwargs["json"]["title"] == "Vents"
        assert kwargs["json"]["data"]["formatVersion"] == 1

    @pytest.mark.asyncio
    async def test_save_without_id(self, mock_http, document):
        """Test a response without ID raises."""
        mock_http.request_json.return_value = {"success": True, "data": {}}

        with pytest.raises(ExternalAPIError):
            await ScriptStorageClient(mock_http).save(document)

    @pytest.mark.asyncio
    async def test_update(self, mock_http, document):
        """Test update uses PUT on the script path."""
        mock_http.request_json.return_value = {"success": True, "data": {"id": "abc"}}

        await ScriptStorageClient(mock_http).update("abc", document, title="Renamed")

        args, kwargs = mock_http.request_json.call_args
        assert args[1:3] == ("PUT", "/scripts/abc")
        assert kwargs["json"]["title"] == "Renamed"

    @pytest.mark.asyncio
    async def test_load(self, mock_http, document):
        """Test load returns the stored document."""
        mock_http.request_json.return_value = {
            "success": True,
            "data": {"id": "abc", "data": document.to_document()},
        }

        loaded = await ScriptStorageClient(mock_http).load("abc")

        assert loaded == document

    @pytest.mark.asyncio
    async def test_load_malformed(self, mock_http):
        """Test a malformed stored document raises CodecError."""
        mock_http.request_json.return_value = {
            "success": True,
            "data": {"id": "abc", "data": {"script": "oops"}},
        }

        with pytest.raises(CodecError):
            await ScriptStorageClient(mock_http).load("abc")

    @pytest.mark.asyncio
    async def test_load_missing_document(self, mock_http):
        """Test a record without data raises CodecError."""
        mock_http.request_json.return_value = {"success": True, "data": {"id": "abc"}}

        with pytest.raises(CodecError):
            await ScriptStorageClient(mock_http).load("abc")

    @pytest.mark.asyncio
    async def test_list_scripts(self, mock_http):
        """Test listing parses summaries."""
        mock_http.request_json.return_value = {
            "success": True,
            "data": [{"id": "a", "title": "One", "createdAt": "2026-01-01T00:00:00Z"}],
        }

        summaries = await ScriptStorageClient(mock_http).list_scripts()

        assert [s.id for s in summaries] == ["a"]
        assert summaries[0].created_at.year == 2026

    @pytest.mark.asyncio
    async def test_delete(self, mock_http):
        """Test delete path."""
        mock_http.request_json.return_value = None

        await ScriptStorageClient(mock_http).delete("abc")

        assert mock_http.request_json.call_args[0][1:3] == ("DELETE", "/scripts/abc")


class TestDistributionClient:
    """Tests for DistributionClient."""

    @pytest.fixture
    def distribution_request(self):
        """Distribution request."""
        return DistributionRequest(
            script_id="script-1",
            video_url="data:video/mp4;base64,AAAA",
            title="Vents",
            platforms=["youtube"],
        )

    @pytest.mark.asyncio
    async def test_create_request(self, mock_http, distribution_request):
        """Test create posts the wire form and passes the fallback hint."""
        mock_http.request_json.return_value = {
            "success": True,
            "data": {"id": "r1", "status": "pending", "platforms": ["youtube"]},
        }

        record = await DistributionClient(mock_http).create_request(distribution_request)

        assert record.id == "r1"
        kwargs = mock_http.request_json.call_args[1]
        assert kwargs["json"]["thesisSessionId"] == "script-1"
        assert kwargs["fallback_hint"] == FALLBACK_HINT

    @pytest.mark.asyncio
    async def test_failed_envelope(self, mock_http):
        """Test a failed envelope raises with the fallback hint."""
        mock_http.request_json.return_value = {"success": False, "message": "quota", "data": None}

        with pytest.raises(ExternalAPIError) as exc_info:
            await DistributionClient(mock_http).get_request("r1")

        assert exc_info.value.fallback_hint == FALLBACK_HINT

    @pytest.mark.asyncio
    async def test_list_requests_filters(self, mock_http):
        """Test only set filters are sent."""
        mock_http.request_json.return_value = {"success": True, "data": []}

        await DistributionClient(mock_http).list_requests(status="pending")

        assert mock_http.request_json.call_args[1]["params"] == {"status": "pending"}

    @pytest.mark.asyncio
    async def test_delete_request(self, mock_http):
        """Test delete path."""
        await DistributionClient(mock_http).delete_request("r1")

        assert mock_http.request_json.call_args[0][1:3] == (
            "DELETE",
            "/distribution/requests/r1",
        )
