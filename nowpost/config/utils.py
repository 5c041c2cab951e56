"""Helper utilities for configuration handling."""

from __future__ import annotations

import os

_ENV_PREFIX = "env:"


def resolve_env_reference(value: str | None, *, required: bool = True) -> str | None:
    """Resolve ``"env:VAR_NAME"`` references to the variable's value.

    Plain strings and ``None`` pass through unchanged. A reference to a missing
    or empty variable raises :class:`EnvironmentError` when ``required`` is
    true, and yields ``None`` otherwise.
    """

    if value is None or not value.startswith(_ENV_PREFIX):
        return value

    var_name = value[len(_ENV_PREFIX):]
    resolved = os.getenv(var_name)
    if resolved:
        return resolved.strip()
    if required:
        raise EnvironmentError(f"Environment variable '{var_name}' is not set or empty")
    return None


def mask_secret(value: str | None, *, visible: int = 4) -> str:
    """Return a display-safe form of a token, keeping only its last characters."""

    if not value:
        return "<unset>"
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * 8 + value[-visible:]


__all__ = ["mask_secret", "resolve_env_reference"]
