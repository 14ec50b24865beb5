"""Storage document of a Script."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from docreel.core.exceptions import CodecError

FORMAT_VERSION = 1


class DurableScript(BaseModel):
    """Storage form of a Script: JSON-safe, handle-free.

    Attributes:
        format_version: Document format version
        title: Display title (duplicated for storage listings)
        script: Script document
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    format_version: int = Field(default=FORMAT_VERSION, ge=1, alias="formatVersion")
    title: str | None = None
    script: dict[str, Any]

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored JSON shape."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        """Serialize to a JSON string."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "DurableScript":
        """Parse a JSON document.

        Raises:
            CodecError: If the document is not valid JSON or has the wrong shape
        """
        try:
            return cls.model_validate_json(raw)
        except PydanticValidationError as e:
            raise CodecError(f"Invalid script document: {e.error_count()} errors") from e


__all__ = ["DurableScript", "FORMAT_VERSION"]
