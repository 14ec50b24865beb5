"""Domain models."""

from docreel.models.artifact import ArtifactState, AssembledArtifact
from docreel.models.assembly import (
    AssemblyRequest,
    RenderResult,
    SegmentDescriptor,
    SubtitleSettings,
)
from docreel.models.distribution import DistributionRecord, DistributionRequest
from docreel.models.durable import DurableScript
from docreel.models.edit import EMPTY_EDIT, CropWindow, SegmentEdit
from docreel.models.media import EMPTY_MEDIA, MediaRef
from docreel.models.score import BackgroundScore, LicenseInfo
from docreel.models.script import Script
from docreel.models.segment import Audio, CaptionSettings, Segment, Visual
from docreel.models.status import Channel, ChannelStatus, GenerationMode, Provenance

__all__ = [
    "ArtifactState",
    "AssembledArtifact",
    "AssemblyRequest",
    "Audio",
    "BackgroundScore",
    "CaptionSettings",
    "Channel",
    "ChannelStatus",
    "CropWindow",
    "DistributionRecord",
    "DistributionRequest",
    "DurableScript",
    "EMPTY_EDIT",
    "EMPTY_MEDIA",
    "GenerationMode",
    "LicenseInfo",
    "MediaRef",
    "Provenance",
    "RenderResult",
    "Script",
    "Segment",
    "SegmentDescriptor",
    "SegmentEdit",
    "SubtitleSettings",
    "Visual",
]
