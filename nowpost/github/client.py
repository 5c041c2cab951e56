"""Minimal GitHub contents API client."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests
from loguru import logger

from nowpost import __version__
from nowpost.config.repository import RepositoryConfig

from .errors import TransportFailure


@dataclass(frozen=True)
class RepositoryFile:
    """Decoded file content together with its version token."""

    path: str
    content: str
    sha: str


class GitHubContentsClient:
    """Thin wrapper over the three repository endpoints the publisher needs.

    HTTP error statuses are returned to the caller untouched; only transport
    problems raise (as :class:`TransportFailure`). No retries are attempted.
    """

    ACCEPT = "application/vnd.github.v3+json"

    def __init__(
        self,
        config: RepositoryConfig | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or RepositoryConfig()
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": self.ACCEPT,
                "User-Agent": f"nowpost/{__version__}",
            }
        )

    @property
    def repo_url(self) -> str:
        return f"{self.config.api_base_url}/repos/{self.config.owner}/{self.config.name}"

    def contents_url(self, path: str) -> str:
        return f"{self.repo_url}/contents/{quote(path.strip('/'))}"

    def get_repository(self, credential: str) -> requests.Response:
        """``GET`` the repository metadata."""
        return self._request("GET", self.repo_url, credential)

    def get_contents(self, credential: str, path: str) -> requests.Response:
        """``GET`` a file's content and sha."""
        params = {"ref": self.config.branch} if self.config.branch else None
        return self._request("GET", self.contents_url(path), credential, params=params)

    def put_contents(
        self,
        credential: str,
        path: str,
        *,
        content_base64: str,
        message: str,
        sha: str | None = None,
    ) -> requests.Response:
        """``PUT`` a file. Supplying ``sha`` turns the create into a guarded update."""
        payload: dict[str, Any] = {"message": message, "content": content_base64}
        if sha is not None:
            payload["sha"] = sha
        if self.config.branch:
            payload["branch"] = self.config.branch
        return self._request("PUT", self.contents_url(path), credential, json=payload)

    def _request(self, method: str, url: str, credential: str, **kwargs: Any) -> requests.Response:
        headers = {"Authorization": f"Bearer {credential}"}
        logger.debug("{} {}", method, url)
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                timeout=self.config.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            logger.error("Request to {} failed before a response arrived: {}", url, exc)
            raise TransportFailure(f"Could not reach {self.config.api_base_url}: {exc}") from exc
        logger.debug("{} {} -> {}", method, url, response.status_code)
        return response


def error_message(response: requests.Response, fallback: str) -> str:
    """Return the ``message`` field of an error body, or ``fallback``."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return fallback


def decode_content(encoded: str) -> str:
    """Decode the newline-wrapped base64 ``content`` field of a contents response."""
    return base64.b64decode(encoded.replace("\n", "")).decode("utf-8")


def encode_content(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


__all__ = [
    "GitHubContentsClient",
    "RepositoryFile",
    "decode_content",
    "encode_content",
    "error_message",
]
