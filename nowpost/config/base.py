"""Base configuration model and TOML loader."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

ConfigT = TypeVar("ConfigT", bound="BaseConfig")


class BaseConfig(BaseModel):
    """Common settings shared by every configuration model."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


def load_config(model: type[ConfigT], path: Path) -> ConfigT:
    """Load ``path`` as TOML and validate it against ``model``.

    Raises :class:`FileNotFoundError` when the file is missing and
    :class:`ValueError` when the file is not valid TOML.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc

    return model.model_validate(data)


__all__ = ["BaseConfig", "load_config"]
