"""Infrastructure layer components.

This module provides the backend API clients: the shared HTTP client,
the renderer, script storage and the distribution queue.
"""

from docreel.infrastructure.distribution import DistributionClient
from docreel.infrastructure.http_client import HTTPClient
from docreel.infrastructure.renderer import RenderServiceClient
from docreel.infrastructure.storage import ScriptStorageClient

__all__ = [
    "DistributionClient",
    "HTTPClient",
    "RenderServiceClient",
    "ScriptStorageClient",
]
