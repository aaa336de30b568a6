"""
===============================================================================
PdfDocumentCodec – load a PDF, collect image draws per page, save a new PDF
-------------------------------------------------------------------------------
Implementation
    - pypdf reads the original and clones it into the writer; pages keep their
      order, content, annotations and metadata.
    - reportlab renders one overlay page per stamped page holding every image
      drawn there; the overlay is merged on top of the writer page.
    - Page size and origin come from the CropBox, the box viewers show.
      Draws on rotated pages carry the page rotation so marks read upright.
===============================================================================
"""
from __future__ import annotations
import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Protocol, Tuple

from PIL import Image, UnidentifiedImageError
from pypdf import PdfReader, PdfWriter, Transformation
from pypdf.errors import PyPdfError
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..exceptions.errors import CodecError, UnsupportedImageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageRef:
    index: int


@dataclass
class _ImageDraw:
    image_ref: ImageRef
    x: float
    y: float
    width: float
    height: float
    rotation: int = 0


@dataclass
class PdfHandle:
    """Decoded document plus the pending image draws, keyed by 0-based page index."""
    reader: PdfReader
    images: List[Image.Image] = field(default_factory=list)
    draws: Dict[int, List[_ImageDraw]] = field(default_factory=dict)


class DocumentCodec(Protocol):
    def load(self, data: bytes) -> PdfHandle: ...
    def page_count(self, handle: PdfHandle) -> int: ...
    def get_page_size(self, handle: PdfHandle, index: int) -> Tuple[float, float]: ...
    def get_page_origin(self, handle: PdfHandle, index: int) -> Tuple[float, float]: ...
    def get_page_rotation(self, handle: PdfHandle, index: int) -> int: ...
    def embed_raster_image(self, handle: PdfHandle, data: bytes) -> ImageRef: ...
    def draw_image(self, handle: PdfHandle, page_index: int, image_ref: ImageRef,
                   x: float, y: float, width: float, height: float, rotation: int = 0) -> None: ...
    def save(self, handle: PdfHandle) -> bytes: ...


class PdfDocumentCodec:
    """pypdf/reportlab implementation of :class:`DocumentCodec`."""

    def load(self, data: bytes) -> PdfHandle:
        if not data:
            raise CodecError("Document is empty.")
        try:
            reader = PdfReader(io.BytesIO(data))
            if reader.is_encrypted:
                raise CodecError("Encrypted documents are not supported.")
            # touch the page tree so structural errors surface here
            if len(reader.pages) == 0:
                raise CodecError("Document has no pages.")
        except CodecError:
            raise
        except (PyPdfError, ValueError, KeyError, OSError) as e:
            raise CodecError(f"Cannot read document: {e}") from e
        return PdfHandle(reader=reader)

    def page_count(self, handle: PdfHandle) -> int:
        return len(handle.reader.pages)

    def get_page_size(self, handle: PdfHandle, index: int) -> Tuple[float, float]:
        box = handle.reader.pages[index].cropbox
        return float(box.width), float(box.height)

    def get_page_origin(self, handle: PdfHandle, index: int) -> Tuple[float, float]:
        box = handle.reader.pages[index].cropbox
        return float(box.left), float(box.bottom)

    def get_page_rotation(self, handle: PdfHandle, index: int) -> int:
        """Clockwise /Rotate of the page, normalised to 0, 90, 180 or 270."""
        rotate = int(handle.reader.pages[index].rotation)
        return ((rotate + 45) // 90 * 90) % 360

    def embed_raster_image(self, handle: PdfHandle, data: bytes) -> ImageRef:
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise UnsupportedImageError(f"Cannot embed image: {e}") from e
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA")
        handle.images.append(img)
        return ImageRef(index=len(handle.images) - 1)

    def draw_image(self, handle: PdfHandle, page_index: int, image_ref: ImageRef,
                   x: float, y: float, width: float, height: float, rotation: int = 0) -> None:
        if not 0 <= page_index < len(handle.reader.pages):
            raise IndexError(f"page index {page_index} out of range")
        handle.draws.setdefault(page_index, []).append(
            _ImageDraw(image_ref=image_ref, x=x, y=y, width=width, height=height,
                       rotation=rotation % 360)
        )

    # ---- helpers ---- #
    @staticmethod
    def _make_overlay(handle: PdfHandle, left: float, bottom: float, width: float, height: float,
                      draws: List[_ImageDraw]) -> bytes:
        """
        Overlay page the size of the target MediaBox. Content is shifted by the
        box origin, so the page has to be merged back with the opposite shift.
        """
        buf = io.BytesIO()
        c = canvas.Canvas(buf, pagesize=(width, height))
        c.translate(-left, -bottom)
        for d in draws:
            img = ImageReader(handle.images[d.image_ref.index])
            if d.rotation:
                c.saveState()
                c.translate(d.x, d.y)
                c.rotate(d.rotation)
                c.drawImage(img, 0, 0, width=d.width, height=d.height, mask="auto")
                c.restoreState()
            else:
                c.drawImage(img, d.x, d.y, width=d.width, height=d.height, mask="auto")
        c.showPage()
        c.save()
        return buf.getvalue()

    def save(self, handle: PdfHandle) -> bytes:
        """Merge one overlay per stamped page and serialize into a fresh buffer."""
        try:
            writer = PdfWriter(clone_from=handle.reader)
            for i, page in enumerate(writer.pages):
                draws = handle.draws.get(i)
                if not draws:
                    continue
                box = page.mediabox
                left, bottom = float(box.left), float(box.bottom)
                overlay_pdf = self._make_overlay(handle, left, bottom,
                                                 float(box.width), float(box.height), draws)
                # merging clips the overlay to its own box; the shift puts that box onto the MediaBox
                page.merge_transformed_page(PdfReader(io.BytesIO(overlay_pdf)).pages[0],
                                            Transformation().translate(left, bottom))
            out = io.BytesIO()
            writer.write(out)
        except (PyPdfError, ValueError, KeyError, OSError) as e:
            raise CodecError(f"Cannot write document: {e}") from e
        return out.getvalue()
