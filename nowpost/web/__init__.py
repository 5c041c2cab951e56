"""Web console for posting to the Now page."""

from .app import create_app

__all__ = ["create_app"]
