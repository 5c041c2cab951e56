"""Access token verification against the target repository."""

from __future__ import annotations

from loguru import logger

from nowpost.github.client import GitHubContentsClient
from nowpost.github.errors import CredentialInvalid


class CredentialVerifier:
    """Checks that a token can read the Now page repository.

    Only read access is confirmed; write scopes are discovered by the first
    commit. Transport failures propagate as ``TransportFailure``.
    """

    def __init__(self, client: GitHubContentsClient) -> None:
        self.client = client

    def verify(self, credential: str) -> bool:
        response = self.client.get_repository(credential)
        if not response.ok:
            logger.info(
                "Token rejected for {} (HTTP {})",
                self.client.config.full_name,
                response.status_code,
            )
            return False

        try:
            permissions = response.json().get("permissions") or {}
        except (ValueError, AttributeError):
            permissions = {}
        if permissions:
            logger.debug("Token permissions on {}: push={}", self.client.config.full_name, permissions.get("push"))
        return True

    def require_valid(self, credential: str) -> None:
        if not self.verify(credential):
            raise CredentialInvalid("Invalid token or no access to repository")


__all__ = ["CredentialVerifier"]
