# stamping/logic/mark_producer.py
from __future__ import annotations
import io
import logging
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from core.config.config_service import CanvasConfig, PlacementConfig, TextConfig
from ..exceptions.errors import EmptyStrokeError, EmptyTextError, UnsupportedImageError
from ..models.mark import Mark
from ..models.mark_enums import MarkSource
from ..models.stroke_path import StrokePath

logger = logging.getLogger(__name__)

# Looked up by file name in the system font directories when no font is configured.
_SCRIPT_FONT_CANDIDATES = (
    "DancingScript-Regular.ttf",
    "Pacifico-Regular.ttf",
    "segoesc.ttf",
    "Brush Script.ttf",
    "URWChanceryL-MediItal.ttf",
    "Z003-MediumItalic.otf",
)


def _hex_to_rgb(hexstr: str) -> Tuple[int, int, int]:
    """
    Convert hex color (#RRGGBB or #RGB) into an RGB tuple for PIL.
    """
    s = (hexstr or "#000000").strip()
    if not s.startswith("#"):
        s = "#" + s
    if len(s) == 4:
        r = int(s[1] * 2, 16); g = int(s[2] * 2, 16); b = int(s[3] * 2, 16)
    else:
        r = int(s[1:3], 16); g = int(s[3:5], 16); b = int(s[5:7], 16)
    return (r, g, b)


def _to_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class MarkProducer:
    """
    Turns the three input modalities into a raster Mark.

    Every mark gets the same display footprint (PlacementConfig.mark_width x
    mark_height) independent of its pixel size. With ``preserve_aspect`` the
    width is kept and the height follows the raster's aspect ratio.
    """

    def __init__(self, *, canvas: Optional[CanvasConfig] = None,
                 text: Optional[TextConfig] = None,
                 placement: Optional[PlacementConfig] = None) -> None:
        self._canvas = canvas or CanvasConfig()
        self._text = text or TextConfig()
        self._placement = placement or PlacementConfig()

    # -------- Footprint ------------------------------------------------------
    def _display_size(self, natural_w: int, natural_h: int) -> Tuple[float, float]:
        w = float(self._placement.mark_width)
        h = float(self._placement.mark_height)
        if self._placement.preserve_aspect and natural_w > 0:
            h = w * (natural_h / natural_w)
        return w, h

    def _make_mark(self, source: MarkSource, data: bytes, size: Tuple[int, int]) -> Mark:
        dw, dh = self._display_size(*size)
        return Mark(source=source, image_bytes=data, natural_width=size[0], natural_height=size[1],
                    display_width=dw, display_height=dh)

    # -------- Canvas strokes -> PNG -----------------------------------------
    def produce_from_stroke(self, stroke_path: StrokePath) -> Mark:
        """Rasterize freehand strokes onto a transparent canvas."""
        if stroke_path.is_empty():
            raise EmptyStrokeError("Nothing was drawn.")

        w, h = self._canvas.width, self._canvas.height
        r, g, b = _hex_to_rgb(self._canvas.stroke_color)
        img = Image.new("RGBA", (w, h), (0, 0, 0, 0))
        drw = ImageDraw.Draw(img)
        for poly in stroke_path.strokes:
            if len(poly) >= 2:
                drw.line(poly, fill=(r, g, b, 255), width=max(1, int(self._canvas.stroke_width)),
                         joint="curve")
        logger.debug(f"Rasterized {stroke_path.segment_count} stroke segments onto {w}x{h} canvas")
        return self._make_mark(MarkSource.DRAW, _to_png(img), (w, h))

    # -------- Typed text -> PNG ---------------------------------------------
    def _load_font(self, font: Optional[str], size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
        candidates = [font] if font else []
        if self._text.font_path:
            candidates.append(self._text.font_path)
        candidates.extend(_SCRIPT_FONT_CANDIDATES)
        for name in candidates:
            try:
                return ImageFont.truetype(name, size)
            except OSError:
                continue
        logger.warning(f"No script font found (tried {candidates}); using Pillow default font")
        return ImageFont.load_default(size=size)

    def produce_from_text(self, text: str, font: Optional[str] = None, size: Optional[int] = None) -> Mark:
        """Render text left-aligned, vertically centered, with a script font."""
        if not text or not text.strip():
            raise EmptyTextError("Typed text is empty.")

        text = text.strip()
        w, h = self._canvas.width, self._canvas.height
        fnt = self._load_font(font, int(size or self._text.font_size))
        r, g, b = _hex_to_rgb(self._text.color)

        img = Image.new("RGBA", (w, h), (0, 0, 0, 0))
        drw = ImageDraw.Draw(img)
        left, top, right, bottom = drw.textbbox((0, 0), text, font=fnt)
        y = (h - (bottom - top)) / 2 - top
        drw.text((self._text.margin, y), text, font=fnt, fill=(r, g, b, 255))
        return self._make_mark(MarkSource.TYPE, _to_png(img), (w, h))

    # -------- Uploaded image ------------------------------------------------
    def produce_from_upload(self, image_bytes: bytes) -> Mark:
        """Wrap uploaded raster bytes as they are, after checking they decode."""
        if not image_bytes:
            raise UnsupportedImageError("Uploaded file is empty.")
        try:
            with Image.open(io.BytesIO(image_bytes)) as im:
                im.verify()
            # verify() leaves the image unusable; reopen to decode the pixels
            with Image.open(io.BytesIO(image_bytes)) as im:
                im.load()
                size = im.size
                fmt = im.format
        except (UnidentifiedImageError, Image.DecompressionBombError,
                OSError, ValueError, SyntaxError) as e:
            raise UnsupportedImageError(f"Uploaded file is not a supported image: {e}") from e

        logger.debug(f"Accepted uploaded {fmt} image {size[0]}x{size[1]}")
        return self._make_mark(MarkSource.UPLOAD, bytes(image_bytes), size)
