"""Transient media handle registry.

Handles are in-process references (``blob:docreel/<uuid>``) to raw bytes
used for local playback. They are never persisted and never sent to an
external service.

Revocation is deferred while a consumer still holds the handle. When media
is replaced, the snapshot holding the new handle is installed first, then
the old handle is revoked.
"""

import uuid
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from docreel.core.logging import get_logger

logger = get_logger(__name__)

HANDLE_PREFIX = "blob:docreel/"


@dataclass
class _HandleEntry:
    data: bytes
    mime_type: str | None
    consumers: set[str] = field(default_factory=set)
    revoke_requested: bool = False


class HandleRegistry:
    """Registry of transient media handles.

    Example:
        >>> registry = HandleRegistry()
        >>> handle = registry.create(b"...", "video/mp4")
        >>> with registry.borrow(handle, "player") as data:
        ...     play(data)
        >>> registry.revoke(handle)
        True
    """

    def __init__(self) -> None:
        self._entries: dict[str, _HandleEntry] = {}

    def create(self, data: bytes, mime_type: str | None = None) -> str:
        """Register bytes and return a new handle."""
        handle = f"{HANDLE_PREFIX}{uuid.uuid4()}"
        self._entries[handle] = _HandleEntry(data=data, mime_type=mime_type)
        return handle

    def __contains__(self, handle: object) -> bool:
        return isinstance(handle, str) and handle in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, handle: str) -> bytes | None:
        """Get the bytes behind a handle (None if unknown or revoked)."""
        entry = self._entries.get(handle)
        return entry.data if entry else None

    def mime_type(self, handle: str) -> str | None:
        """Get the MIME type recorded for a handle."""
        entry = self._entries.get(handle)
        return entry.mime_type if entry else None

    def consumers(self, handle: str) -> frozenset[str]:
        """Get the consumers currently holding a handle."""
        entry = self._entries.get(handle)
        return frozenset(entry.consumers) if entry else frozenset()

    def acquire(self, handle: str, consumer: str) -> None:
        """Mark a consumer as reading the handle.

        Raises:
            KeyError: If the handle is unknown or already revoked
        """
        entry = self._entries.get(handle)
        if entry is None or entry.revoke_requested:
            raise KeyError(handle)
        entry.consumers.add(consumer)

    def release(self, handle: str, consumer: str) -> None:
        """Release a consumer; completes a deferred revocation if it was the last."""
        entry = self._entries.get(handle)
        if entry is None:
            return
        entry.consumers.discard(consumer)
        if entry.revoke_requested and not entry.consumers:
            del self._entries[handle]
            logger.debug("Deferred handle revocation completed", handle=handle)

    @contextmanager
    def borrow(self, handle: str, consumer: str) -> Iterator[bytes]:
        """Hold a handle for the duration of a block and yield its bytes.

        Raises:
            KeyError: If the handle is unknown or already revoked
        """
        self.acquire(handle, consumer)
        try:
            yield self._entries[handle].data
        finally:
            self.release(handle, consumer)

    @contextmanager
    def hold(self, handles: Iterable[str], consumer: str) -> Iterator[frozenset[str]]:
        """Hold several handles for the duration of a block.

        Handles that are unknown or already revoked are skipped; the block
        receives the set that was actually acquired.

        Args:
            handles: Handles to hold (duplicates allowed)
            consumer: Consumer name, unique per concurrent reader
        """
        held: list[str] = []
        try:
            for handle in dict.fromkeys(handles):
                try:
                    self.acquire(handle, consumer)
                except KeyError:
                    continue
                held.append(handle)
            yield frozenset(held)
        finally:
            for handle in held:
                self.release(handle, consumer)

    def revoke(self, handle: str) -> bool:
        """Revoke a handle.

        Returns:
            True if revoked now, False if deferred (consumers active) or unknown
        """
        entry = self._entries.get(handle)
        if entry is None:
            return False
        if entry.consumers:
            entry.revoke_requested = True
            logger.debug(
                "Handle revocation deferred",
                handle=handle,
                consumers=sorted(entry.consumers),
            )
            return False
        del self._entries[handle]
        return True

    def clear(self) -> None:
        """Drop every handle that has no active consumer."""
        for handle in list(self._entries):
            self.revoke(handle)


__all__ = ["HANDLE_PREFIX", "HandleRegistry"]
