"""HTTP client for the backend API.

This module provides a managed httpx.AsyncClient shared by the renderer,
script storage and distribution clients. It owns the base URL, bearer
authentication and the mapping of HTTP failures onto provider errors.
"""

from typing import Any

import httpx

from docreel.core.exceptions import ExternalAPIError, RateLimitError
from docreel.core.logging import get_logger

logger = get_logger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Prefer the API envelope's message over the HTTP reason phrase."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return response.reason_phrase or "request failed"


def _retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("retry-after")
    if value and value.isdigit():
        return int(value)
    return None


class HTTPClient:
    """Managed HTTP client with connection reuse.

    Designed for DI injection. Create once at startup, inject where needed,
    close at shutdown.

    Example:
        >>> http_client = HTTPClient("http://localhost:3001/api/v1", token="...")
        >>> data = await http_client.request_json("renderer", "POST", "/video/assemble", json=body)
        >>> await http_client.close()
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        max_connections: int = 20,
        max_keepalive_connections: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize HTTP client.

        Args:
            base_url: API base URL (ends with /api/v1)
            token: Bearer token sent with every request
            timeout: Default request timeout in seconds
            max_connections: Maximum number of connections
            max_keepalive_connections: Maximum keepalive connections
            transport: Custom transport (tests use httpx.MockTransport)
        """
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_keepalive_connections,
            ),
            follow_redirects=True,
            transport=transport,
        )
        logger.info(
            "HTTP client initialized",
            base_url=self.base_url,
            timeout=timeout,
            authenticated=bool(token),
        )

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send GET request."""
        return await self._client.get(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send POST request."""
        return await self._client.post(url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send PUT request."""
        return await self._client.put(url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send DELETE request."""
        return await self._client.delete(url, **kwargs)

    async def request_json(
        self,
        service: str,
        method: str,
        url: str,
        fallback_hint: str | None = None,
        **kwargs: Any,
    ) -> Any:
        """Send a request and decode the JSON body.

        Args:
            service: Service name used in errors and logs
            method: HTTP method
            url: Path relative to the base URL
            fallback_hint: Manual fallback suggested when the call fails
            **kwargs: Passed through to httpx

        Returns:
            Decoded JSON body (None for empty responses)

        Raises:
            RateLimitError: On HTTP 429
            ExternalAPIError: On any other HTTP or transport failure
        """
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(
                "Backend API error",
                service=service,
                endpoint=url,
                status_code=status,
            )
            if status == 429:
                raise RateLimitError(service, retry_after=_retry_after(e.response)) from e
            raise ExternalAPIError(
                service,
                _error_message(e.response),
                status_code=status,
                endpoint=url,
                response_body=e.response.text,
                fallback_hint=fallback_hint,
            ) from e
        except httpx.HTTPError as e:
            logger.error("Backend request failed", service=service, endpoint=url, error=str(e))
            raise ExternalAPIError(
                service,
                str(e) or type(e).__name__,
                endpoint=url,
                fallback_hint=fallback_hint,
            ) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ExternalAPIError(
                service,
                "invalid JSON response",
                status_code=response.status_code,
                endpoint=url,
                response_body=response.text,
            ) from e

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()
        logger.info("HTTP client closed")


__all__ = ["HTTPClient"]
