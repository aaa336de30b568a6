from .export_result import ExportResult
from .mark import Mark
from .mark_enums import MarkSource, PageOverflowPolicy
from .page_geometry import PageGeometry
from .placed_mark import PlacedMark
from .stroke_path import StrokePath

__all__ = [
    "ExportResult",
    "Mark",
    "MarkSource",
    "PageGeometry",
    "PageOverflowPolicy",
    "PlacedMark",
    "StrokePath",
]
