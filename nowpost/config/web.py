"""Posting console configuration models."""

from __future__ import annotations

from pydantic import Field, field_validator, model_validator

from nowpost.config.base import BaseConfig
from nowpost.config.utils import resolve_env_reference


class WebAuthConfig(BaseConfig):
    """Shared-secret header check in front of the posting API."""

    enabled: bool = Field(False, description="Require the console token header on API calls.")
    header_name: str = Field(
        "X-Console-Token",
        min_length=1,
        description="Header carrying the console token.",
    )
    token: str | None = Field(
        default=None,
        description="Console token or 'env:VAR_NAME' reference.",
    )

    @field_validator("token")
    @classmethod
    def _strip_token(cls, token: str | None) -> str | None:
        if token is None:
            return None
        stripped = token.strip()
        return stripped or None

    @model_validator(mode="after")
    def _ensure_token_when_enabled(self) -> "WebAuthConfig":
        if self.enabled and not self.token:
            raise ValueError("A console token must be provided when web auth is enabled.")
        return self

    def resolved_token(self) -> str:
        return resolve_env_reference(self.token) or ""


class WebUIConfig(BaseConfig):
    """Settings for the FastAPI posting console."""

    enabled: bool = Field(True, description="Serve the HTML posting form at /console.")
    title: str = Field("Now Page", min_length=1, description="Heading shown on the posting form.")
    max_image_bytes: int = Field(
        10 * 1024 * 1024,
        gt=0,
        description="Largest accepted base64 image payload, in bytes of encoded text.",
    )
    auth: WebAuthConfig | None = Field(default=None, description="Optional header token check.")


__all__ = ["WebAuthConfig", "WebUIConfig"]
