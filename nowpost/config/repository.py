"""Target repository configuration."""

from __future__ import annotations

from pydantic import Field, field_validator

from nowpost.config.base import BaseConfig


class RepositoryConfig(BaseConfig):
    """Where the Now page lives and how to reach its API."""

    owner: str = Field("OutFoxD", min_length=1, description="Repository owner (user or organisation)")
    name: str = Field("Project-Portfolio", min_length=1, description="Repository name")
    api_base_url: str = Field(
        "https://api.github.com",
        description="Base URL of the GitHub REST API",
    )
    branch: str | None = Field(
        None,
        description="Branch to read and commit to; the repository default branch when unset",
    )
    timeout: float | None = Field(
        None,
        gt=0,
        description="Request timeout in seconds; no timeout when unset",
    )

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


__all__ = ["RepositoryConfig"]
