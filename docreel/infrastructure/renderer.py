"""Renderer service client.

The renderer stitches segment clips, narration, captions and background
music into one video. Two call shapes share the same request body:
- assemble: full-quality render, becomes the durable artifact
- preview: faster render, never persisted

Responses use the envelope ``{success, message, data}`` where data carries
``videoBase64``, ``duration``, ``aspectRatio`` and ``segmentCount``.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from docreel.core.exceptions import ExternalAPIError
from docreel.core.logging import get_logger
from docreel.infrastructure.http_client import HTTPClient
from docreel.models.assembly import AssemblyRequest, RenderResult

logger = get_logger(__name__)

SERVICE_NAME = "renderer"


class RenderServiceClient:
    """Client for the video assembly endpoints.

    Example:
        >>> renderer = RenderServiceClient(http_client)
        >>> result = await renderer.assemble(request)
        >>> result.duration
        18.0
    """

    ASSEMBLE_PATH = "/video/assemble"
    PREVIEW_PATH = "/video/preview"

    def __init__(self, http_client: HTTPClient, timeout: float = 600.0) -> None:
        """Initialize RenderServiceClient.

        Args:
            http_client: Shared backend HTTP client
            timeout: Render timeout in seconds (renders are slow)
        """
        self.http_client = http_client
        self.timeout = timeout

    async def assemble(self, request: AssemblyRequest) -> RenderResult:
        """Render the final video.

        Raises:
            ExternalAPIError: If the renderer fails or returns no video
            RateLimitError: If the renderer rate limits the caller
        """
        return await self._render(self.ASSEMBLE_PATH, request)

    async def preview(self, request: AssemblyRequest) -> RenderResult:
        """Render a quick preview.

        Raises:
            ExternalAPIError: If the renderer fails or returns no video
            RateLimitError: If the renderer rate limits the caller
        """
        return await self._render(self.PREVIEW_PATH, request)

    async def _render(self, path: str, request: AssemblyRequest) -> RenderResult:
        logger.info(
            "Render requested",
            endpoint=path,
            segment_count=len(request.segments),
            aspect_ratio=request.aspect_ratio,
        )
        body = await self.http_client.request_json(
            SERVICE_NAME,
            "POST",
            path,
            json=request.to_wire(),
            timeout=self.timeout,
        )
        result = self._parse(path, body)
        logger.info(
            "Render completed",
            endpoint=path,
            duration=result.duration,
            segment_count=result.segment_count,
        )
        return result

    def _parse(self, path: str, body: Any) -> RenderResult:
        if not isinstance(body, dict):
            raise ExternalAPIError(SERVICE_NAME, "unexpected response shape", endpoint=path)
        if body.get("success") is False:
            raise ExternalAPIError(
                SERVICE_NAME,
                body.get("message") or "render failed",
                endpoint=path,
            )
        data = body.get("data")
        if not isinstance(data, dict) or not data.get("videoBase64"):
            raise ExternalAPIError(SERVICE_NAME, "response carries no video", endpoint=path)
        try:
            return RenderResult.model_validate(data)
        except PydanticValidationError as e:
            raise ExternalAPIError(
                SERVICE_NAME, f"invalid render result: {e.error_count()} errors", endpoint=path
            ) from e


__all__ = ["RenderServiceClient"]
