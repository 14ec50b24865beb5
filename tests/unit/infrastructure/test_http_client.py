"""Unit tests for HTTP client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from docreel.core.exceptions import ExternalAPIError, RateLimitError
from docreel.infrastructure.http_client import HTTPClient

BASE_URL = "https://api.example.com/api/v1"


def make_client(handler, token: str | None = "secret") -> HTTPClient:
    """Build an HTTPClient backed by a mock transport."""
    return HTTPClient(BASE_URL, token=token, transport=httpx.MockTransport(handler))


class TestHTTPClientInit:
    """Tests for HTTPClient initialization."""

    @patch("docreel.infrastructure.http_client.httpx.AsyncClient")
    def test_init_sets_auth_header(self, mock_async_client):
        """Test the bearer token is sent with every request."""
        HTTPClient(BASE_URL, token="secret")

        call_kwargs = mock_async_client.call_args[1]
        assert call_kwargs["headers"]["Authorization"] == "Bearer secret"
        assert call_kwargs["follow_redirects"] is True

    @patch("docreel.infrastructure.http_client.httpx.AsyncClient")
    def test_init_without_token(self, mock_async_client):
        """Test no Authorization header without a token."""
        HTTPClient(BASE_URL)

        assert "Authorization" not in mock_async_client.call_args[1]["headers"]

    @patch("docreel.infrastructure.http_client.httpx.AsyncClient")
    def test_base_url_trailing_slash(self, mock_async_client):
        """Test the base URL is stored without a trailing slash."""
        assert HTTPClient(f"{BASE_URL}/").base_url == BASE_URL


class TestHTTPClientRequests:
    """Tests for HTTPClient request methods."""

    @pytest.fixture
    def mock_client(self):
        """Create HTTPClient with mocked internal client."""
        with patch("docreel.infrastructure.http_client.httpx.AsyncClient") as mock:
            mock_instance = MagicMock()
            mock_instance.get = AsyncMock()
            mock_instance.post = AsyncMock()
            mock_instance.aclose = AsyncMock()
            mock.return_value = mock_instance

            client = HTTPClient(BASE_URL)
            yield client, mock_instance

    @pytest.mark.asyncio
    async def test_get_request(self, mock_client):
        """Test GET request passthrough."""
        client, mock_instance = mock_client

        await client.get("/scripts", params={"limit": 10})

        mock_instance.get.assert_called_once_with("/scripts", params={"limit": 10})

    @pytest.mark.asyncio
    async def test_close(self, mock_client):
        """Test close releases the connection pool."""
        client, mock_instance = mock_client

        await client.close()

        mock_instance.aclose.assert_called_once()


class TestRequestJson:
    """Tests for request_json error mapping."""

    @pytest.mark.asyncio
    async def test_success(self):
        """Test JSON body is decoded and the path is joined to the base URL."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"success": True, "data": {"id": "1"}})

        client = make_client(handler)
        body = await client.request_json("storage", "GET", "/scripts/1")

        assert body == {"success": True, "data": {"id": "1"}}
        assert seen["url"] == f"{BASE_URL}/scripts/1"
        assert seen["auth"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_empty_body(self):
        """Test empty responses return None."""
        client = make_client(lambda request: httpx.Response(204))
        assert await client.request_json("storage", "DELETE", "/scripts/1") is None

    @pytest.mark.asyncio
    async def test_http_error_uses_envelope_message(self):
        """Test the envelope message is surfaced."""
        client = make_client(
            lambda request: httpx.Response(
                500, json={"success": False, "message": "ffmpeg crashed"}
            )
        )

        with pytest.raises(ExternalAPIError) as exc_info:
            await client.request_json(
                "renderer", "POST", "/video/assemble", fallback_hint="try again"
            )

        error = exc_info.value
        assert error.status_code == 500
        assert "ffmpeg crashed" in str(error)
        assert error.fallback_hint == "try again"
        assert error.endpoint == "/video/assemble"

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        """Test 429 maps to RateLimitError with retry-after."""
        client = make_client(
            lambda request: httpx.Response(429, headers={"Retry-After": "12"})
        )

        with pytest.raises(RateLimitError) as exc_info:
            await client.request_json("renderer", "POST", "/video/preview")

        assert exc_info.value.retry_after == 12

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Test connection failures map to ExternalAPIError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(ExternalAPIError) as exc_info:
            await client.request_json("storage", "GET", "/scripts")

        assert exc_info.value.status_code is None
        assert "connection refused" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        """Test a non-JSON body raises ExternalAPIError."""
        client = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(ExternalAPIError, match="invalid JSON"):
            await client.request_json("storage", "GET", "/scripts")
