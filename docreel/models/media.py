"""Media reference model.

A MediaRef holds up to three representations of the same asset:
- payload: inline base64 bytes (durable, safe to persist and transmit)
- url: remote reference (durable only when the scheme is fetchable)
- handle: transient in-process reference, valid for the current run only

Authority order is payload > url > handle. `data:` URLs are normalized
into `payload` and `blob:` URLs into `handle` at construction time.
"""

import base64
import binascii
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, model_validator

TRANSIENT_HANDLE_SCHEME = "blob"


def url_scheme(url: str | None) -> str:
    """Return the lowercase scheme of a URL ('' when absent)."""
    if not url:
        return ""
    return urlsplit(url.strip()).scheme.lower()


def split_data_url(url: str) -> tuple[str | None, str]:
    """Split a data URL into (mime_type, base64 data).

    Args:
        url: URL of the form ``data:<mime>;base64,<data>``

    Returns:
        Tuple of MIME type (None if missing) and the data part
    """
    header, _, data = url.partition(",")
    mime = header[len("data:") :].split(";", 1)[0] or None
    return mime, data


def decode_payload(payload: str) -> bytes:
    """Strictly decode a base64 payload.

    Raises:
        ValueError: If the payload is empty or not valid base64
    """
    if not payload:
        raise ValueError("empty payload")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 payload: {e}") from e


def encode_payload(data: bytes) -> str:
    """Encode raw bytes as a base64 payload."""
    return base64.b64encode(data).decode("ascii")


class MediaRef(BaseModel):
    """Reference to one media asset.

    Attributes:
        url: Remote URL
        payload: Inline base64-encoded bytes
        handle: Transient in-process handle (``blob:`` reference)
        mime_type: MIME type of the asset, when known
    """

    model_config = ConfigDict(frozen=True)

    url: str | None = None
    payload: str | None = None
    handle: str | None = None
    mime_type: str | None = None

    @model_validator(mode="before")
    @classmethod
    def normalize_representations(cls, data: Any) -> Any:
        """Move data: URLs into payload and blob: URLs into handle."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        url = data.get("url")
        if isinstance(url, str):
            url = url.strip() or None
            data["url"] = url
        if url and url_scheme(url) == "data":
            mime, inline = split_data_url(url)
            if not data.get("payload"):
                data["payload"] = inline
            if not data.get("mime_type") and mime:
                data["mime_type"] = mime
            data["url"] = None
        elif url and url_scheme(url) == TRANSIENT_HANDLE_SCHEME:
            if not data.get("handle"):
                data["handle"] = url
            data["url"] = None
        for key in ("payload", "handle"):
            if data.get(key) == "":
                data[key] = None
        return data

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str | None = None) -> "MediaRef":
        """Create a durable reference from raw bytes."""
        return cls(payload=encode_payload(data), mime_type=mime_type)

    @property
    def is_empty(self) -> bool:
        """Check if no representation is present."""
        return not (self.url or self.payload or self.handle)

    @property
    def scheme(self) -> str:
        """Scheme of the URL representation."""
        return url_scheme(self.url)

    def without_handle(self) -> "MediaRef":
        """Return a copy with the transient handle removed."""
        return self.model_copy(update={"handle": None})

    def to_bytes(self) -> bytes:
        """Decode the inline payload.

        Raises:
            ValueError: If there is no valid payload
        """
        return decode_payload(self.payload or "")


EMPTY_MEDIA = MediaRef()

__all__ = [
    "EMPTY_MEDIA",
    "MediaRef",
    "TRANSIENT_HANDLE_SCHEME",
    "decode_payload",
    "encode_payload",
    "split_data_url",
    "url_scheme",
]
