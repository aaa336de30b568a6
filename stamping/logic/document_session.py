from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..models.page_geometry import PageGeometry
from .coordinate_translator import render_height_for
from .document_codec import DocumentCodec
from .placement_model import PlacementModel

logger = logging.getLogger(__name__)


@dataclass
class DocumentSession:
    """
    A loaded document and the marks placed on it.

    original_bytes is never modified; export reads it and produces new bytes.
    """
    original_bytes: bytes = field(repr=False)
    pages: List[PageGeometry]
    placements: PlacementModel
    source_name: Optional[str] = None

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def geometry(self, page: int) -> PageGeometry:
        """Geometry of a 1-based page."""
        return self.pages[page - 1]

    @classmethod
    def open(cls, data: bytes, *, codec: DocumentCodec, render_width: float,
             placements: PlacementModel, source_name: Optional[str] = None) -> "DocumentSession":
        """
        Decode ``data`` once to read the visible page boxes and rotations;
        raises CodecError for unreadable input.
        """
        data = bytes(data)
        handle = codec.load(data)
        pages: List[PageGeometry] = []
        for i in range(codec.page_count(handle)):
            w, h = codec.get_page_size(handle, i)
            ox, oy = codec.get_page_origin(handle, i)
            rotation = codec.get_page_rotation(handle, i)
            # the preview shows the page turned, so its height follows the displayed box
            shown_w, shown_h = (h, w) if rotation in (90, 270) else (w, h)
            pages.append(PageGeometry(
                native_width=w,
                native_height=h,
                render_width=float(render_width),
                render_height=render_height_for(shown_w, shown_h, render_width),
                origin_x=ox,
                origin_y=oy,
                rotation=rotation,
            ))
        logger.info(f"Opened document {source_name or '<bytes>'}: {len(pages)} page(s)")
        return cls(original_bytes=data, pages=pages, placements=placements, source_name=source_name)
