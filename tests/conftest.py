"""Pytest configuration and fixtures.

This module provides common fixtures used across all tests.
"""

import base64
from collections.abc import Callable

import pytest

from docreel.core.logging import setup_logging
from docreel.models.media import MediaRef
from docreel.models.script import Script
from docreel.models.segment import Audio, Segment, Visual
from docreel.models.status import ChannelStatus
from docreel.services.media.handles import HandleRegistry
from docreel.services.media.resolver import MediaSourceResolver

# Setup logging for tests
setup_logging()

VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42fake-video-bytes"
AUDIO_BYTES = b"ID3\x03\x00fake-audio-bytes"


@pytest.fixture
def video_bytes() -> bytes:
    """Raw bytes of a small fake video."""
    return VIDEO_BYTES


@pytest.fixture
def video_payload() -> str:
    """Base64 payload of a small fake video."""
    return base64.b64encode(VIDEO_BYTES).decode("ascii")


@pytest.fixture
def audio_payload() -> str:
    """Base64 payload of a small fake narration clip."""
    return base64.b64encode(AUDIO_BYTES).decode("ascii")


@pytest.fixture
def resolver() -> MediaSourceResolver:
    """Media source resolver with default configuration."""
    return MediaSourceResolver()


@pytest.fixture
def handles() -> HandleRegistry:
    """Empty transient handle registry."""
    return HandleRegistry()


@pytest.fixture
def make_segment() -> Callable[..., Segment]:
    """Factory for segments.

    Returns:
        Function building a Segment from a few common knobs
    """

    def _make(
        segment_id: str,
        text: str = "Narration text.",
        visual_status: ChannelStatus = ChannelStatus.COMPLETED,
        video_url: str | None = None,
        video_payload: str | None = None,
        audio_status: ChannelStatus | None = None,
        audio_url: str | None = None,
        audio_duration: float | None = None,
        **visual_fields: object,
    ) -> Segment:
        visual = Visual(
            status=visual_status,
            video=MediaRef(url=video_url, payload=video_payload),
            **visual_fields,
        )
        audio = None
        if audio_status is not None:
            audio = Audio(
                status=audio_status,
                media=MediaRef(url=audio_url),
                duration=audio_duration,
            )
        return Segment(id=segment_id, text=text, visual=visual, audio=audio)

    return _make


@pytest.fixture
def abc_script(make_segment) -> Script:
    """Three segments: A approved with a URL, B completed with a URL, C approved with no source."""
    return Script(
        id="script-1",
        title="Deep Sea Vents",
        segments=[
            make_segment(
                "seg-a",
                text="Hydrothermal vents host entire ecosystems.",
                visual_status=ChannelStatus.APPROVED,
                video_url="https://cdn.example.com/video/a.mp4",
                audio_status=ChannelStatus.COMPLETED,
                audio_url="https://cdn.example.com/audio/a.mp3",
                audio_duration=4.5,
            ),
            make_segment(
                "seg-b",
                text="Tube worms grow two meters long.",
                visual_status=ChannelStatus.COMPLETED,
                video_url="https://cdn.example.com/video/b.mp4",
            ),
            make_segment(
                "seg-c",
                text="Chemosynthesis replaces sunlight.",
                visual_status=ChannelStatus.APPROVED,
            ),
        ],
    )
