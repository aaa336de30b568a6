"""
PdfiumPageRenderer – rasterize PDF pages for the on-screen preview.

Reports page count and native page sizes, which feed the coordinate
translation, and renders a page scaled to a fixed width.
"""
from __future__ import annotations
import logging
from typing import Optional, Tuple

import pypdfium2 as pdfium
from PIL import Image

from ..exceptions.errors import CodecError

logger = logging.getLogger(__name__)


class PdfiumPageRenderer:
    """Page renderer backed by pypdfium2. Page indexes are 1-based."""

    def __init__(self) -> None:
        self._pdf: Optional[pdfium.PdfDocument] = None

    def open(self, data: bytes) -> None:
        self.close()
        try:
            self._pdf = pdfium.PdfDocument(data)
        except pdfium.PdfiumError as e:
            raise CodecError(f"Cannot render document: {e}") from e

    def close(self) -> None:
        if self._pdf is not None:
            self._pdf.close()
            self._pdf = None

    def _doc(self) -> pdfium.PdfDocument:
        if self._pdf is None:
            raise RuntimeError("No document opened in renderer.")
        return self._pdf

    @property
    def page_count(self) -> int:
        return len(self._doc())

    def page_size(self, page: int) -> Tuple[float, float]:
        """Displayed size: pdfium applies the CropBox and /Rotate."""
        w, h = self._doc()[page - 1].get_size()
        return float(w), float(h)

    def render(self, page: int, width: int) -> Image.Image:
        """Render ``page`` so that the bitmap is ``width`` pixels wide."""
        pg = self._doc()[page - 1]
        pw, _ = pg.get_size()
        scale = float(width) / float(pw)
        pil = pg.render(scale=scale).to_pil()
        logger.debug(f"Rendered page {page} at scale {scale:.3f} -> {pil.size}")
        return pil.convert("RGBA")
