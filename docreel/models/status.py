"""Status and classification enums shared by the domain models."""

from enum import Enum


class ChannelStatus(str, Enum):
    """Lifecycle status of a media channel (visual, audio, background score)."""

    PENDING = "pending"  # Nothing generated yet
    GENERATING = "generating"  # Provider call in flight
    COMPLETED = "completed"  # Media available, awaiting review
    FAILED = "failed"  # Provider call failed
    APPROVED = "approved"  # Accepted by the user
    REJECTED = "rejected"  # Declined by the user


class Channel(str, Enum):
    """Media channels of a segment."""

    VISUAL = "visual"
    AUDIO = "audio"


class GenerationMode(str, Enum):
    """How a visual was produced."""

    CLIP = "clip"  # Synthesized video clip
    IMAGE = "image"  # Static image rendered as a still


class Provenance(str, Enum):
    """Where a background score came from."""

    GENERATED = "generated"
    UPLOADED = "uploaded"
