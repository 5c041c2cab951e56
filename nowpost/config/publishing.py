"""Publishing layout configuration."""

from __future__ import annotations

from pydantic import Field, field_validator

from nowpost.config.base import BaseConfig


class PublishingConfig(BaseConfig):
    """Repository layout used when publishing a post."""

    content_dir: str = Field("docs", description="Repository directory that receives uploaded images")
    document_path: str = Field("now/index.html", description="Repository path of the Now page document")
    image_extension: str = Field("jpg", min_length=1, description="Extension appended to generated image names")
    require_marker: bool = Field(
        False,
        description="Fail before committing when the document has no 'Update:' entry to insert above",
    )

    @field_validator("content_dir", "document_path")
    @classmethod
    def _normalise_path(cls, value: str) -> str:
        cleaned = value.strip().strip("/")
        if not cleaned:
            raise ValueError("Repository paths must not be empty.")
        return cleaned

    @field_validator("image_extension")
    @classmethod
    def _strip_dot(cls, value: str) -> str:
        return value.lstrip(".")


__all__ = ["PublishingConfig"]
