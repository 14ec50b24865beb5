"""Fixtures for assembly tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from docreel.infrastructure.renderer import RenderServiceClient
from docreel.models.assembly import RenderResult
from docreel.services.assembly.builder import AssemblyRequestBuilder
from docreel.services.assembly.coordinator import AssemblyCoordinator
from docreel.services.session import ScriptSession


@pytest.fixture
def render_result(video_payload) -> RenderResult:
    """Successful renderer response."""
    return RenderResult(video_payload=video_payload, duration=4.5, segment_count=1)


@pytest.fixture
def renderer(render_result) -> MagicMock:
    """Mock renderer answering both endpoints."""
    mock = MagicMock(spec=RenderServiceClient)
    mock.assemble = AsyncMock(return_value=render_result)
    mock.preview = AsyncMock(return_value=render_result)
    return mock


@pytest.fixture
def session(abc_script, handles, resolver) -> ScriptSession:
    """Session over the A/B/C script."""
    return ScriptSession(abc_script, handles, resolver)


@pytest.fixture
def coordinator(session, resolver, renderer) -> AssemblyCoordinator:
    """Coordinator wired to the mock renderer."""
    return AssemblyCoordinator(session, AssemblyRequestBuilder(resolver), renderer)
