"""Script storage client.

Saves and loads DurableScript documents through the backend ``/scripts``
endpoints. Only encoded (handle-free) documents ever reach this client.
"""

from datetime import datetime
from typing import Any

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from docreel.core.exceptions import CodecError, ExternalAPIError
from docreel.core.logging import get_logger
from docreel.infrastructure.http_client import HTTPClient
from docreel.models.assembly import WireModel
from docreel.models.durable import DurableScript

logger = get_logger(__name__)

SERVICE_NAME = "script_storage"


class StoredScriptSummary(WireModel):
    """Listing entry for a stored script."""

    id: str
    title: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


def _unwrap(body: Any, path: str) -> Any:
    if not isinstance(body, dict) or "data" not in body:
        raise ExternalAPIError(SERVICE_NAME, "unexpected response shape", endpoint=path)
    if body.get("success") is False:
        raise ExternalAPIError(
            SERVICE_NAME, body.get("message") or "request failed", endpoint=path
        )
    return body["data"]


class ScriptStorageClient:
    """CRUD client for stored scripts.

    Example:
        >>> storage = ScriptStorageClient(http_client)
        >>> script_id = await storage.save(await codec.encode(script))
        >>> durable = await storage.load(script_id)
    """

    BASE_PATH = "/scripts"

    def __init__(self, http_client: HTTPClient, timeout: float = 60.0) -> None:
        """Initialize ScriptStorageClient.

        Args:
            http_client: Shared backend HTTP client
            timeout: Request timeout in seconds
        """
        self.http_client = http_client
        self.timeout = timeout

    async def save(self, document: DurableScript, title: str | None = None) -> str:
        """Store a new script.

        Returns:
            ID assigned by storage
        """
        body = await self.http_client.request_json(
            SERVICE_NAME,
            "POST",
            self.BASE_PATH,
            json={"title": title or document.title, "data": document.to_document()},
            timeout=self.timeout,
        )
        data = _unwrap(body, self.BASE_PATH)
        script_id = data.get("id") if isinstance(data, dict) else None
        if not script_id:
            raise ExternalAPIError(SERVICE_NAME, "response carries no id", endpoint=self.BASE_PATH)
        logger.info("Script saved", script_id=script_id)
        return str(script_id)

    async def update(
        self,
        script_id: str,
        document: DurableScript,
        title: str | None = None,
    ) -> None:
        """Replace a stored script."""
        path = f"{self.BASE_PATH}/{script_id}"
        await self.http_client.request_json(
            SERVICE_NAME,
            "PUT",
            path,
            json={"title": title or document.title, "data": document.to_document()},
            timeout=self.timeout,
        )
        logger.info("Script updated", script_id=script_id)

    async def load(self, script_id: str) -> DurableScript:
        """Fetch a stored script document.

        Raises:
            CodecError: If the stored document is malformed
            ExternalAPIError: If the request fails
        """
        path = f"{self.BASE_PATH}/{script_id}"
        body = await self.http_client.request_json(
            SERVICE_NAME, "GET", path, timeout=self.timeout
        )
        data = _unwrap(body, path)
        document = data.get("data") if isinstance(data, dict) else None
        if not isinstance(document, dict):
            raise CodecError(f"Stored script {script_id} has no document", field="data")
        try:
            return DurableScript.model_validate(document)
        except PydanticValidationError as e:
            raise CodecError(
                f"Stored script {script_id} is malformed: {e.error_count()} errors",
                field="data",
            ) from e

    async def list_scripts(self) -> list[StoredScriptSummary]:
        """List stored scripts (newest first as returned by storage)."""
        body = await self.http_client.request_json(
            SERVICE_NAME, "GET", self.BASE_PATH, timeout=self.timeout
        )
        data = _unwrap(body, self.BASE_PATH)
        if not isinstance(data, list):
            raise ExternalAPIError(SERVICE_NAME, "expected a list", endpoint=self.BASE_PATH)
        return [StoredScriptSummary.model_validate(item) for item in data]

    async def delete(self, script_id: str) -> None:
        """Delete a stored script."""
        await self.http_client.request_json(
            SERVICE_NAME, "DELETE", f"{self.BASE_PATH}/{script_id}", timeout=self.timeout
        )
        logger.info("Script deleted", script_id=script_id)


__all__ = ["ScriptStorageClient", "StoredScriptSummary"]
