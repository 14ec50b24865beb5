"""Component configuration models."""

from pydantic import BaseModel, Field

from docreel.config.assembly import (
    AspectRatio,
    AssemblyConfig,
    AutoAssemblyConfig,
    CaptionDefaults,
    ExportConfig,
    TransitionName,
)
from docreel.config.media import MediaResolutionConfig, PathSubstitution


class DocReelConfig(BaseModel):
    """Complete component configuration.

    Attributes:
        media: Media source resolution settings
        assembly: Assembly request defaults
        auto_assembly: Auto-assembly scheduling
        export: Export settings
    """

    media: MediaResolutionConfig = Field(default_factory=MediaResolutionConfig)
    assembly: AssemblyConfig = Field(default_factory=AssemblyConfig)
    auto_assembly: AutoAssemblyConfig = Field(default_factory=AutoAssemblyConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)


__all__ = [
    "AspectRatio",
    "AssemblyConfig",
    "AutoAssemblyConfig",
    "CaptionDefaults",
    "DocReelConfig",
    "ExportConfig",
    "MediaResolutionConfig",
    "PathSubstitution",
    "TransitionName",
]
