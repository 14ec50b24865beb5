"""Media resolution configuration.

Controls which references count as fetchable, which are transient, and which
path patterns look like playable video.
"""

from pydantic import BaseModel, Field, field_validator

from docreel.config.validators import normalize_schemes, normalize_string_list


class PathSubstitution(BaseModel):
    """Image-to-video path segment substitution.

    Attributes:
        find: Path segment to look for (e.g., "/images/")
        replace: Replacement segment (e.g., "/video/")
    """

    find: str
    replace: str


class MediaResolutionConfig(BaseModel):
    """Media source resolution configuration.

    Attributes:
        fetchable_schemes: URL schemes an external service can fetch
        transient_schemes: Schemes that only exist inside the current process
        video_extensions: File extensions treated as playable video
        image_extensions: File extensions eligible for extension substitution
        substitute_extension: Extension used when swapping image for video
        path_substitutions: Ordered image->video path segment replacements
    """

    fetchable_schemes: list[str] = Field(default_factory=lambda: ["http", "https"])
    transient_schemes: list[str] = Field(default_factory=lambda: ["blob"])
    video_extensions: list[str] = Field(
        default_factory=lambda: [".mp4", ".webm", ".mov", ".m4v"],
        description="Extensions treated as video",
    )
    image_extensions: list[str] = Field(
        default_factory=lambda: [".png", ".jpg", ".jpeg", ".webp"],
        description="Extensions eligible for video substitution",
    )
    substitute_extension: str = Field(default=".mp4")
    path_substitutions: list[PathSubstitution] = Field(
        default_factory=lambda: [
            PathSubstitution(find="/image/", replace="/video/"),
            PathSubstitution(find="/images/", replace="/video/"),
            PathSubstitution(find="/thumbnails/", replace="/videos/"),
        ]
    )

    @field_validator("fetchable_schemes", "transient_schemes")
    @classmethod
    def normalize_scheme_list(cls, v: list[str]) -> list[str]:
        """Normalize scheme names."""
        return normalize_schemes(v)

    @field_validator("video_extensions", "image_extensions")
    @classmethod
    def normalize_extension_list(cls, v: list[str]) -> list[str]:
        """Normalize extensions to lowercase with a leading dot."""
        return normalize_string_list(v, prefix=".")

    @field_validator("substitute_extension")
    @classmethod
    def normalize_substitute_extension(cls, v: str) -> str:
        """Ensure the substitute extension has a leading dot."""
        v = v.strip().lower()
        return v if v.startswith(".") else f".{v}"
