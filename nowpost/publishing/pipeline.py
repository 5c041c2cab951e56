"""Sequential post pipeline: upload the image, then prepend the entry."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Any

from loguru import logger

from nowpost.config.app import AppConfig
from nowpost.github.client import GitHubContentsClient
from nowpost.github.errors import DraftError, PostInProgressError

from .document import DocumentUpdate, DocumentUpdater, format_entry_date
from .images import ImagePublisher, generate_image_filename


@dataclass(frozen=True)
class PostDraft:
    """Form state handed from image capture to submission."""

    image_base64: str | None
    caption: str
    source: str | None = None

    def validate(self) -> "PostDraft":
        """Return a cleaned copy, raising :class:`DraftError` when incomplete."""
        if not self.image_base64:
            raise DraftError("Please select or take a photo")
        caption = self.caption.strip()
        if not caption:
            raise DraftError("Please add some text")
        return PostDraft(image_base64=self.image_base64, caption=caption, source=self.source)


@dataclass(frozen=True)
class PostResult:
    """Outcome of a published post."""

    filename: str
    date: str
    image_commit: dict[str, Any]
    document: DocumentUpdate

    @property
    def inserted(self) -> bool:
        return self.document.inserted


class PostPipeline:
    """Runs one post at a time through the image publisher and document updater.

    A second call while a post is running fails with
    :class:`PostInProgressError` rather than waiting. Failures propagate
    unchanged; an image uploaded before a failed document update stays in
    the repository.
    """

    def __init__(self, images: ImagePublisher, documents: DocumentUpdater) -> None:
        self.images = images
        self.documents = documents
        self._in_flight = Lock()

    @classmethod
    def from_config(cls, config: AppConfig, client: GitHubContentsClient | None = None) -> "PostPipeline":
        client = client or GitHubContentsClient(config.repository)
        return cls(
            ImagePublisher(client, config.publishing),
            DocumentUpdater(client, config.publishing),
        )

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    def prepare(self, draft: PostDraft, now: datetime | None = None) -> tuple[PostDraft, str, str]:
        """Validate the draft and derive ``(draft, filename, date)`` from one instant."""
        cleaned = draft.validate()
        instant = now or datetime.now(timezone.utc)
        filename = generate_image_filename(instant, extension=self.images.config.image_extension)
        local_day = instant.astimezone().date() if instant.tzinfo is not None else instant.date()
        return cleaned, filename, format_entry_date(local_day)

    def post(self, credential: str, draft: PostDraft, *, now: datetime | None = None) -> PostResult:
        cleaned, filename, date = self.prepare(draft, now)

        if not self._in_flight.acquire(blocking=False):
            raise PostInProgressError("A post is already in progress")
        try:
            logger.info("Publishing post {} ({})", filename, cleaned.source or "unknown source")
            image_commit = self.images.publish(credential, cleaned.image_base64 or "", filename)
            document = self.documents.update(credential, filename, cleaned.caption, date)
        finally:
            self._in_flight.release()

        logger.success("Posted {} to the Now page", filename)
        return PostResult(filename=filename, date=date, image_commit=image_commit, document=document)


__all__ = ["PostDraft", "PostPipeline", "PostResult"]
