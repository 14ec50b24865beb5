"""Distribution service client.

Creates and tracks distribution requests at ``/distribution/requests``.
"""

from typing import Any

from docreel.core.exceptions import ExternalAPIError
from docreel.core.logging import get_logger
from docreel.infrastructure.http_client import HTTPClient
from docreel.models.distribution import DistributionRecord, DistributionRequest

logger = get_logger(__name__)

SERVICE_NAME = "distribution"
FALLBACK_HINT = "download the video and upload it manually"


class DistributionClient:
    """Client for the distribution request queue.

    Example:
        >>> client = DistributionClient(http_client)
        >>> record = await client.create_request(request)
        >>> record.status
        'pending'
    """

    BASE_PATH = "/distribution/requests"

    def __init__(self, http_client: HTTPClient, timeout: float = 60.0) -> None:
        """Initialize DistributionClient.

        Args:
            http_client: Shared backend HTTP client
            timeout: Request timeout in seconds
        """
        self.http_client = http_client
        self.timeout = timeout

    async def create_request(self, request: DistributionRequest) -> DistributionRecord:
        """Submit a distribution request."""
        body = await self.http_client.request_json(
            SERVICE_NAME,
            "POST",
            self.BASE_PATH,
            fallback_hint=FALLBACK_HINT,
            json=request.to_wire(),
            timeout=self.timeout,
        )
        record = DistributionRecord.model_validate(self._data(body, self.BASE_PATH))
        logger.info(
            "Distribution request created",
            request_id=record.id,
            platforms=record.platforms,
        )
        return record

    async def get_request(self, request_id: str) -> DistributionRecord:
        """Fetch one distribution request."""
        path = f"{self.BASE_PATH}/{request_id}"
        body = await self.http_client.request_json(SERVICE_NAME, "GET", path, timeout=self.timeout)
        return DistributionRecord.model_validate(self._data(body, path))

    async def list_requests(
        self,
        status: str | None = None,
        platform: str | None = None,
    ) -> list[DistributionRecord]:
        """List distribution requests, optionally filtered."""
        params = {k: v for k, v in {"status": status, "platform": platform}.items() if v}
        body = await self.http_client.request_json(
            SERVICE_NAME, "GET", self.BASE_PATH, params=params, timeout=self.timeout
        )
        data = self._data(body, self.BASE_PATH)
        if not isinstance(data, list):
            raise ExternalAPIError(SERVICE_NAME, "expected a list", endpoint=self.BASE_PATH)
        return [DistributionRecord.model_validate(item) for item in data]

    async def delete_request(self, request_id: str) -> None:
        """Withdraw a distribution request."""
        await self.http_client.request_json(
            SERVICE_NAME, "DELETE", f"{self.BASE_PATH}/{request_id}", timeout=self.timeout
        )

    def _data(self, body: Any, path: str) -> Any:
        if not isinstance(body, dict) or "data" not in body:
            raise ExternalAPIError(SERVICE_NAME, "unexpected response shape", endpoint=path)
        if body.get("success") is False:
            raise ExternalAPIError(
                SERVICE_NAME,
                body.get("message") or "request failed",
                endpoint=path,
                fallback_hint=FALLBACK_HINT,
            )
        return body["data"]


__all__ = ["DistributionClient"]
