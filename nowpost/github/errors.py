"""Exception hierarchy for publishing failures."""

from __future__ import annotations


class PublishError(RuntimeError):
    """Base class for every failure surfaced by the publishing pipeline."""


class TransportFailure(PublishError):
    """The repository API could not be reached (DNS, connection, timeout)."""


class CredentialInvalid(PublishError):
    """The access token was rejected by the repository metadata endpoint."""


class StoreRejected(PublishError):
    """The repository API answered with a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UploadError(StoreRejected):
    """The image commit was rejected."""


class FetchError(StoreRejected):
    """The Now page document could not be fetched."""


class UpdateError(StoreRejected):
    """The document commit was rejected, usually because its sha went stale."""


class MarkerNotFoundError(PublishError):
    """The document holds no ``Update:`` entry to insert the new one above."""


class DraftError(PublishError):
    """The post draft is incomplete."""


class PostInProgressError(PublishError):
    """Another post is still running on the same pipeline."""


class NotLoggedInError(PublishError):
    """No verified credential is available for the session."""


__all__ = [
    "PublishError",
    "TransportFailure",
    "CredentialInvalid",
    "StoreRejected",
    "UploadError",
    "FetchError",
    "UpdateError",
    "MarkerNotFoundError",
    "DraftError",
    "PostInProgressError",
    "NotLoggedInError",
]
