"""Application-level configuration models."""

from __future__ import annotations

from pydantic import Field, field_validator

from nowpost.config.base import BaseConfig
from nowpost.config.publishing import PublishingConfig
from nowpost.config.repository import RepositoryConfig
from nowpost.config.session import SessionConfig
from nowpost.config.web import WebUIConfig

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class AppConfig(BaseConfig):
    """Top-level runtime configuration for the entire application."""

    logging_level: str = Field("INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")
    repository: RepositoryConfig = Field(
        default_factory=RepositoryConfig,
        description="Repository hosting the Now page",
    )
    publishing: PublishingConfig = Field(
        default_factory=PublishingConfig,
        description="Image directory and document layout",
    )
    session: SessionConfig = Field(
        default_factory=SessionConfig,
        description="Credential storage settings",
    )
    web: WebUIConfig | None = Field(None, description="Posting console configuration")

    @field_validator("logging_level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown logging level '{value}'")
        return level


__all__ = ["AppConfig"]
