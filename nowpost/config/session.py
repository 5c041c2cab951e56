"""Credential storage configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator

from nowpost.config.base import BaseConfig


class SessionConfig(BaseConfig):
    """Where the verified access token is kept between runs."""

    store: Literal["file", "memory"] = Field("file", description="Credential store backend")
    credential_path: Path | None = Field(
        Path("~/.config/nowpost/token"),
        description="Token file used by the 'file' store",
    )
    token: str | None = Field(
        None,
        description="Token or 'env:VAR_NAME' reference used when the store holds nothing",
    )

    @model_validator(mode="after")
    def _validate_store(self) -> "SessionConfig":
        if self.store == "file" and self.credential_path is None:
            raise ValueError("File credential store requires 'credential_path'.")
        return self


__all__ = ["SessionConfig"]
