"""Media source resolution and transient handles."""

from docreel.services.media.handles import HANDLE_PREFIX, HandleRegistry
from docreel.services.media.resolver import MediaSourceResolver, ResolvedSource

__all__ = [
    "HANDLE_PREFIX",
    "HandleRegistry",
    "MediaSourceResolver",
    "ResolvedSource",
]
