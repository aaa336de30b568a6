from .errors import (
    CodecError,
    EmptyContentError,
    EmptyStrokeError,
    EmptyTextError,
    ExportInProgressError,
    InputError,
    MarkNotFoundError,
    PageRangeError,
    StampingError,
    UnsupportedImageError,
)

__all__ = [
    "CodecError",
    "EmptyContentError",
    "EmptyStrokeError",
    "EmptyTextError",
    "ExportInProgressError",
    "InputError",
    "MarkNotFoundError",
    "PageRangeError",
    "StampingError",
    "UnsupportedImageError",
]
