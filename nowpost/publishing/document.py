"""Read-modify-write update of the Now page document."""

from __future__ import annotations

import binascii
import posixpath
import re
from dataclasses import dataclass
from datetime import date as date_type
from typing import Any

from jinja2 import BaseLoader, Environment
from loguru import logger

from nowpost.config.publishing import PublishingConfig
from nowpost.github.client import (
    GitHubContentsClient,
    RepositoryFile,
    decode_content,
    encode_content,
    error_message,
)
from nowpost.github.errors import FetchError, MarkerNotFoundError, UpdateError

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)

_UPDATE_MARKER = re.compile(r'<div class="date">Update:', re.IGNORECASE)

_ENTRY_TEMPLATE = """<div class="date">Update: {{ date }}</div>
<img src="{{ image_src }}" style="max-width:100%;border-radius:8px;margin:4px 0 8px 0">
<ul>
  <li>{{ caption | escape_html }}</li>
</ul>

"""


@dataclass(frozen=True)
class Entry:
    """One dated photo update as it appears on the Now page."""

    date: str
    image_src: str
    caption: str


@dataclass(frozen=True)
class DocumentUpdate:
    """Outcome of a committed document update."""

    path: str
    base_sha: str
    content: str
    inserted: bool
    commit: dict[str, Any]


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` as named entities. Nothing else is touched."""
    for char, entity in _HTML_ESCAPES:
        text = text.replace(char, entity)
    return text


def format_entry_date(day: date_type) -> str:
    """Format a calendar date as ``January 05, 2024`` independent of locale."""
    return f"{MONTH_NAMES[day.month - 1]} {day.day:02d}, {day.year}"


class EntryRenderer:
    """Render :class:`Entry` objects into the HTML fragment used by the page."""

    def __init__(self, template: str | None = None) -> None:
        env = Environment(loader=BaseLoader(), autoescape=False, keep_trailing_newline=True)
        env.filters["escape_html"] = escape_html
        self._template = env.from_string(template or _ENTRY_TEMPLATE)

    def render(self, entry: Entry) -> str:
        return self._template.render(date=entry.date, image_src=entry.image_src, caption=entry.caption)


def render_entry(entry: Entry) -> str:
    return EntryRenderer().render(entry)


def insert_entry(document: str, fragment: str) -> tuple[str, bool]:
    """Insert ``fragment`` before the first ``Update:`` date marker.

    Returns the new text and whether a marker was found. Without a marker the
    document comes back unchanged.
    """
    match = _UPDATE_MARKER.search(document)
    if match is None:
        return document, False
    return document[: match.start()] + fragment + document[match.start():], True


class DocumentUpdater:
    """Prepends a new entry to the Now page with a sha-guarded commit."""

    def __init__(
        self,
        client: GitHubContentsClient,
        config: PublishingConfig | None = None,
        *,
        renderer: EntryRenderer | None = None,
    ) -> None:
        self.client = client
        self.config = config or PublishingConfig()
        self.renderer = renderer or EntryRenderer()

    @property
    def document_name(self) -> str:
        return posixpath.basename(self.config.document_path)

    def image_src(self, image_filename: str) -> str:
        """Path of an uploaded image relative to the document's directory."""
        image_path = f"{self.config.content_dir}/{image_filename}"
        start = posixpath.dirname(self.config.document_path) or "."
        return posixpath.relpath(image_path, start)

    def fetch(self, credential: str) -> RepositoryFile:
        path = self.config.document_path
        response = self.client.get_contents(credential, path)
        if not response.ok:
            logger.error("Fetching {} failed (HTTP {})", path, response.status_code)
            raise FetchError(f"Failed to fetch {self.document_name}", status_code=response.status_code)

        payload = response.json()
        # Files over 1 MB and directories come back without inline base64 content.
        if (
            not isinstance(payload, dict)
            or payload.get("encoding") != "base64"
            or not payload.get("content")
            or not payload.get("sha")
        ):
            logger.error("Contents response for {} carried no inline base64 content", path)
            raise FetchError(
                f"Failed to fetch {self.document_name}: content not returned inline",
                status_code=response.status_code,
            )

        try:
            content = decode_content(payload["content"])
        except (binascii.Error, UnicodeDecodeError) as exc:
            logger.error("Could not decode {}: {}", path, exc)
            raise FetchError(
                f"Failed to fetch {self.document_name}: content could not be decoded as UTF-8",
                status_code=response.status_code,
            ) from exc
        return RepositoryFile(path=path, content=content, sha=payload["sha"])

    def render_entry(self, image_filename: str, caption: str, date: str) -> str:
        entry = Entry(date=date, image_src=self.image_src(image_filename), caption=caption)
        return self.renderer.render(entry)

    def build(self, current: str, image_filename: str, caption: str, date: str) -> tuple[str, bool]:
        """Return the updated document text and whether the entry was inserted."""
        return insert_entry(current, self.render_entry(image_filename, caption, date))

    def update(self, credential: str, image_filename: str, caption: str, date: str) -> DocumentUpdate:
        document = self.fetch(credential)
        updated, inserted = self.build(document.content, image_filename, caption, date)
        if not inserted:
            if self.config.require_marker:
                raise MarkerNotFoundError(
                    f"No 'Update:' entry found in {self.document_name}; nothing to insert above"
                )
            logger.warning("No 'Update:' marker in {}; committing it unchanged", document.path)

        response = self.client.put_contents(
            credential,
            document.path,
            content_base64=encode_content(updated),
            message=f"New post: {date}",
            sha=document.sha,
        )
        if not response.ok:
            message = error_message(response, f"Failed to update {self.document_name}")
            logger.error("Commit of {} rejected (HTTP {}): {}", document.path, response.status_code, message)
            raise UpdateError(message, status_code=response.status_code)

        logger.info("Committed new entry for {} to {}", date, document.path)
        return DocumentUpdate(
            path=document.path,
            base_sha=document.sha,
            content=updated,
            inserted=inserted,
            commit=response.json(),
        )


__all__ = [
    "DocumentUpdate",
    "DocumentUpdater",
    "Entry",
    "EntryRenderer",
    "MONTH_NAMES",
    "escape_html",
    "format_entry_date",
    "insert_entry",
    "render_entry",
]
