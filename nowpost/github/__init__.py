"""GitHub repository access for nowpost."""

from .client import (
    GitHubContentsClient,
    RepositoryFile,
    decode_content,
    encode_content,
    error_message,
)
from .errors import (
    CredentialInvalid,
    DraftError,
    FetchError,
    MarkerNotFoundError,
    NotLoggedInError,
    PostInProgressError,
    PublishError,
    StoreRejected,
    TransportFailure,
    UpdateError,
    UploadError,
)

__all__ = [
    "GitHubContentsClient",
    "RepositoryFile",
    "decode_content",
    "encode_content",
    "error_message",
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
