"""Credential stores backing the session context."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path

from loguru import logger

from nowpost.config.session import SessionConfig


class CredentialStore(ABC):
    """Persistence for a single access token."""

    @abstractmethod
    def load(self) -> str | None:
        """Return the stored token, or ``None`` when nothing is stored."""

    @abstractmethod
    def save(self, credential: str) -> None:
        """Persist ``credential``, replacing any previous value."""

    @abstractmethod
    def delete(self) -> None:
        """Forget the stored token. Deleting an empty store is not an error."""


class MemoryCredentialStore(CredentialStore):
    """Keeps the token for the lifetime of the process only."""

    def __init__(self, credential: str | None = None) -> None:
        self._credential = credential

    def load(self) -> str | None:
        return self._credential

    def save(self, credential: str) -> None:
        self._credential = credential

    def delete(self) -> None:
        self._credential = None


class FileCredentialStore(CredentialStore):
    """Stores the token in a single owner-only file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> str | None:
        if not self.path.exists():
            return None
        value = self.path.read_text(encoding="utf-8").strip()
        return value or None

    def save(self, credential: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(credential)
        os.chmod(self.path, 0o600)
        logger.debug("Credential written to {}", self.path)

    def delete(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        logger.debug("Credential file {} removed", self.path)


def create_store(config: SessionConfig) -> CredentialStore:
    """Instantiate the configured credential store."""

    if config.store == "memory":
        return MemoryCredentialStore()
    if config.credential_path is None:  # validated by SessionConfig
        raise ValueError("File credential store requires a path.")
    return FileCredentialStore(config.credential_path)


__all__ = [
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "create_store",
]
