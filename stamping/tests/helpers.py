"""Builders for test documents, images and an isolated configuration."""
from __future__ import annotations

import io
import struct
import zlib
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import Image
from pypdf import PdfReader, PdfWriter
from pypdf.generic import RectangleObject
from reportlab.pdfgen import canvas

from core.config.config_service import ConfigService
from stamping.logic.document_codec import ImageRef, PdfDocumentCodec, PdfHandle

_NOWHERE = Path(__file__).resolve().parent / "__no_such_config__.ini"


def make_pdf(pages: int = 2, size: Tuple[float, float] = (612, 792)) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=size)
    c.setTitle("Test document")
    for i in range(pages):
        c.setFont("Helvetica", 14)
        c.drawString(72, size[1] - 72, f"Page {i + 1} body text")
        c.showPage()
    c.save()
    return buf.getvalue()


def make_png(size: Tuple[int, int] = (60, 30), color=(200, 0, 0, 255)) -> bytes:
    img = Image.new("RGBA", size, color)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def reshape_pdf(data: bytes, *, rotate: int = 0, mediabox: Optional[Sequence[float]] = None,
                cropbox: Optional[Sequence[float]] = None) -> bytes:
    """Copy of ``data`` with every page rotated and/or given new page boxes."""
    writer = PdfWriter(clone_from=PdfReader(io.BytesIO(data)))
    for page in writer.pages:
        if mediabox is not None:
            page.mediabox = RectangleObject(mediabox)
        page.cropbox = RectangleObject(cropbox if cropbox is not None else page.mediabox)
        if rotate:
            page.rotate(rotate)
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


def _png_chunk(tag: bytes, body: bytes) -> bytes:
    crc = zlib.crc32(tag + body) & 0xFFFFFFFF
    return struct.pack(">I", len(body)) + tag + body + struct.pack(">I", crc)


def make_oversized_png(width: int = 40000, height: int = 40000) -> bytes:
    """Valid PNG header declaring a huge grayscale canvas, followed by a stub of pixel data."""
    header = struct.pack(">IIBBBBB", width, height, 8, 0, 0, 0, 0)
    return (b"\x89PNG\r\n\x1a\n" + _png_chunk(b"IHDR", header)
            + _png_chunk(b"IDAT", zlib.compress(b"\x00" * 16)) + _png_chunk(b"IEND", b""))


def make_config(environ: Optional[Dict[str, str]] = None) -> ConfigService:
    return ConfigService(defaults_ini=_NOWHERE, user_ini=_NOWHERE, environ=environ or {})


def image_xobjects(page) -> List[str]:
    res = page.get("/Resources")
    if res is None:
        return []
    xobjs = res.get_object().get("/XObject")
    if xobjs is None:
        return []
    xobjs = xobjs.get_object()
    return [str(name) for name, obj in xobjs.items() if obj.get_object().get("/Subtype") == "/Image"]


def page_texts(data: bytes) -> List[str]:
    return [p.extract_text() for p in PdfReader(io.BytesIO(data)).pages]


class RecordingCodec(PdfDocumentCodec):
    """Real codec that also records every draw_image call."""

    def __init__(self) -> None:
        self.draws: List[Tuple[int, float, float, float, float]] = []
        self.rotations: List[int] = []

    def draw_image(self, handle: PdfHandle, page_index: int, image_ref: ImageRef,
                   x: float, y: float, width: float, height: float, rotation: int = 0) -> None:
        self.draws.append((page_index, x, y, width, height))
        self.rotations.append(rotation)
        super().draw_image(handle, page_index, image_ref, x, y, width, height, rotation)
