"""In-memory stand-in for the GitHub contents API used across tests."""

from __future__ import annotations

import base64
import hashlib
import json
import sys
import textwrap
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable

import requests
from loguru import logger

VALID_TOKEN = "ghp_valid_token_0001"


@contextmanager
def logger_to_stderr(level: str = "INFO"):
    """Temporarily route Loguru output to stderr for assertion."""

    handler_id = logger.add(sys.stderr, level=level)
    try:
        yield
    finally:
        logger.remove(handler_id)


def make_response(status_code: int, body: Any = None, *, raw: bytes | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    if raw is not None:
        response._content = raw
    else:
        response._content = json.dumps(body if body is not None else {}).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    response.encoding = "utf-8"
    return response


def encode_text(text: str) -> str:
    """Base64 in the newline-wrapped layout GitHub returns."""
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return "\n".join(textwrap.wrap(encoded, 60)) + "\n"


def decode_text(encoded: str) -> str:
    return base64.b64decode(encoded.replace("\n", "")).decode("utf-8")


@dataclass
class Call:
    method: str
    path: str | None
    headers: dict[str, str]
    json: dict[str, Any] | None
    params: dict[str, str] | None


@dataclass
class FakeRepository:
    """Plays the role of ``requests.Session`` for :class:`GitHubContentsClient`."""

    base_url: str = "https://api.github.com"
    owner: str = "OutFoxD"
    name: str = "Project-Portfolio"
    valid_tokens: set[str] = field(default_factory=lambda: {VALID_TOKEN})
    files: dict[str, dict[str, str]] = field(default_factory=dict)
    fail_with: Exception | None = None
    before_put: Callable[["FakeRepository", str], None] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    calls: list[Call] = field(default_factory=list)

    @property
    def repo_url(self) -> str:
        return f"{self.base_url}/repos/{self.owner}/{self.name}"

    def add_file(self, path: str, text: str) -> str:
        sha = hashlib.sha1(text.encode("utf-8")).hexdigest()
        self.files[path] = {"content": encode_text(text), "sha": sha}
        return sha

    def text(self, path: str) -> str:
        return decode_text(self.files[path]["content"])

    def sha(self, path: str) -> str:
        return self.files[path]["sha"]

    def puts(self) -> list[Call]:
        return [call for call in self.calls if call.method == "PUT"]

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> requests.Response:
        headers = headers or {}
        path = url.split("/contents/", 1)[1] if "/contents/" in url else None
        self.calls.append(Call(method=method, path=path, headers=headers, json=json, params=params))

        if self.fail_with is not None:
            raise self.fail_with

        token = headers.get("Authorization", "").removeprefix("Bearer ")
        if token not in self.valid_tokens:
            return make_response(401, {"message": "Bad credentials"})

        if url == self.repo_url and method == "GET":
            return make_response(
                200,
                {"full_name": f"{self.owner}/{self.name}", "permissions": {"pull": True, "push": True}},
            )
        if path is None:
            return make_response(404, {"message": "Not Found"})
        if method == "GET":
            return self._get(path)
        if method == "PUT":
            return self._put(path, json or {})
        return make_response(405, {"message": "Method Not Allowed"})

    def _get(self, path: str) -> requests.Response:
        stored = self.files.get(path)
        if stored is None:
            return make_response(404, {"message": "Not Found"})
        return make_response(200, {"path": path, "encoding": "base64", **stored})

    def _put(self, path: str, payload: dict[str, Any]) -> requests.Response:
        if self.before_put is not None:
            self.before_put(self, path)

        existing = self.files.get(path)
        supplied_sha = payload.get("sha")
        if existing is not None and supplied_sha is None:
            return make_response(422, {"message": 'Invalid request.\n\n"sha" wasn\'t supplied.'})
        if existing is not None and supplied_sha != existing["sha"]:
            return make_response(409, {"message": f"{path} does not match {supplied_sha}"})

        content = payload["content"]
        sha = hashlib.sha1(content.encode("ascii")).hexdigest()
        self.files[path] = {"content": content, "sha": sha}
        status = 201 if existing is None else 200
        return make_response(
            status,
            {
                "content": {"path": path, "sha": sha},
                "commit": {"sha": f"commit-{sha[:7]}", "message": payload.get("message")},
            },
        )
