"""Image upload into the repository content directory."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from loguru import logger

from nowpost.config.publishing import PublishingConfig
from nowpost.github.client import GitHubContentsClient, error_message
from nowpost.github.errors import UploadError


def generate_image_filename(now: datetime | None = None, *, extension: str = "jpg") -> str:
    """Return ``<YYYYMMDDTHHMMSS>.<extension>`` for the given instant, in UTC.

    Two calls within the same second yield the same name.
    """
    instant = now or datetime.now(timezone.utc)
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc)
    return f"{instant.strftime('%Y%m%dT%H%M%S')}.{extension}"


class ImagePublisher:
    """Creates image files under the configured content directory."""

    def __init__(self, client: GitHubContentsClient, config: PublishingConfig | None = None) -> None:
        self.client = client
        self.config = config or PublishingConfig()

    def image_path(self, filename: str) -> str:
        return f"{self.config.content_dir}/{filename}"

    def publish(self, credential: str, image_base64: str, filename: str) -> dict[str, Any]:
        """Commit ``image_base64`` as a new file and return the commit metadata."""
        path = self.image_path(filename)
        response = self.client.put_contents(
            credential,
            path,
            content_base64=image_base64,
            message=f"Add image: {filename}",
        )
        if not response.ok:
            message = error_message(response, "Failed to upload image")
            logger.error("Image upload to {} rejected (HTTP {}): {}", path, response.status_code, message)
            raise UploadError(message, status_code=response.status_code)

        logger.info("Uploaded image {}", path)
        return response.json()


__all__ = ["ImagePublisher", "generate_image_filename"]
