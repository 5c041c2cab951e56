"""Configuration namespace for nowpost."""

from __future__ import annotations

from .app import AppConfig
from .base import BaseConfig, load_config
from .publishing import PublishingConfig
from .repository import RepositoryConfig
from .session import SessionConfig
from .utils import resolve_env_reference
from .web import WebAuthConfig, WebUIConfig

__all__ = [
    "BaseConfig",
    "AppConfig",
    "load_config",
    "PublishingConfig",
    "RepositoryConfig",
    "SessionConfig",
    "WebAuthConfig",
    "WebUIConfig",
    "resolve_env_reference",
]
