"""Process-scoped session holding the verified access token."""

from __future__ import annotations

from loguru import logger

from nowpost.config.session import SessionConfig
from nowpost.config.utils import resolve_env_reference
from nowpost.github.errors import NotLoggedInError
from nowpost.publishing.verifier import CredentialVerifier

from .store import CredentialStore


class SessionContext:
    """Credential lifecycle: load on start, verify on login, clear on logout."""

    def __init__(
        self,
        store: CredentialStore,
        verifier: CredentialVerifier,
        *,
        fallback_token: str | None = None,
    ) -> None:
        self.store = store
        self.verifier = verifier
        self.fallback_token = fallback_token
        self._credential: str | None = None

    @classmethod
    def from_config(
        cls,
        config: SessionConfig,
        store: CredentialStore,
        verifier: CredentialVerifier,
    ) -> "SessionContext":
        return cls(store, verifier, fallback_token=resolve_env_reference(config.token, required=False))

    @property
    def credential(self) -> str | None:
        return self._credential

    @property
    def logged_in(self) -> bool:
        return self._credential is not None

    def load(self) -> str | None:
        """Read the stored token; a failing store counts as logged out."""
        try:
            stored = self.store.load()
        except OSError as exc:
            logger.error("Failed to load credential: {}", exc)
            stored = None
        self._credential = stored or self.fallback_token
        if self._credential is None:
            logger.debug("No stored credential; login required")
        return self._credential

    def login(self, token: str) -> str:
        """Verify ``token`` and persist it as the session credential."""
        candidate = token.strip()
        if not candidate:
            raise ValueError("Please enter a token")

        self.verifier.require_valid(candidate)
        self.store.save(candidate)
        self._credential = candidate
        logger.info("Logged in to {}", self.verifier.client.config.full_name)
        return candidate

    def logout(self) -> None:
        self.store.delete()
        self._credential = None
        logger.info("Logged out")

    def require_credential(self) -> str:
        if self._credential is None:
            raise NotLoggedInError("Not logged in; run 'nowpost login' first")
        return self._credential


__all__ = ["SessionContext"]
