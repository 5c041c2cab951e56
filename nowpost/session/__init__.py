"""Credential session management."""

from .context import SessionContext
from .store import CredentialStore, FileCredentialStore, MemoryCredentialStore, create_store

__all__ = [
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "SessionContext",
    "create_store",
]
