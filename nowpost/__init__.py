"""Publish photo updates to a static "Now page" kept in a GitHub repository."""

__version__ = "0.1.0"

__all__: list[str] = ["__version__"]
