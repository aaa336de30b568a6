"""Stamping feature exceptions."""
from __future__ import annotations


class StampingError(Exception):
    """Base exception for the stamping feature."""


class InputError(StampingError):
    """A precondition for the requested action is missing (no document, no marks)."""


class ExportInProgressError(InputError):
    """Raised when the session is edited while an export is running."""


class EmptyContentError(StampingError):
    """Attempted to commit a mark without drawn, typed or uploaded content."""


class EmptyStrokeError(EmptyContentError):
    """Nothing was drawn on the capture canvas."""


class EmptyTextError(EmptyContentError):
    """The typed text is empty or whitespace only."""


class UnsupportedImageError(StampingError):
    """Uploaded bytes are not a decodable raster image."""


class PageRangeError(StampingError):
    """A placed mark references a page the current document does not have."""

    def __init__(self, page: int, page_count: int) -> None:
        super().__init__(f"Page {page} is outside the document (1..{page_count}).")
        self.page = page
        self.page_count = page_count


class CodecError(StampingError):
    """The document codec failed to load or save a document."""


class MarkNotFoundError(StampingError, KeyError):
    """No placed mark with the given id exists."""

    def __init__(self, mark_id: str) -> None:
        super().__init__(mark_id)
        self.mark_id = mark_id

    def __str__(self) -> str:
        return f"No placed mark with id {self.mark_id!r}."
