"""Publishing pipeline for the Now page."""

from .document import (
    DocumentUpdate,
    DocumentUpdater,
    Entry,
    EntryRenderer,
    escape_html,
    format_entry_date,
    insert_entry,
    render_entry,
)
from .images import ImagePublisher, generate_image_filename
from .pipeline import PostDraft, PostPipeline, PostResult
from .verifier import CredentialVerifier

__all__ = [
    "CredentialVerifier",
    "DocumentUpdate",
    "DocumentUpdater",
    "Entry",
    "EntryRenderer",
    "ImagePublisher",
    "PostDraft",
    "PostPipeline",
    "PostResult",
    "escape_html",
    "format_entry_date",
    "generate_image_filename",
    "insert_entry",
    "render_entry",
]
