"""Tests for turning strokes, text and uploads into marks."""
from __future__ import annotations

import io

import pytest
from PIL import Image

from core.config.config_service import CanvasConfig, PlacementConfig
from stamping.exceptions.errors import (
    EmptyContentError,
    EmptyStrokeError,
    EmptyTextError,
    UnsupportedImageError,
)
from stamping.logic.mark_producer import MarkProducer, _hex_to_rgb
from stamping.models.mark_enums import MarkSource
from stamping.models.stroke_path import StrokePath
from stamping.tests.helpers import make_oversized_png, make_png


def _open(data: bytes) -> Image.Image:
    im = Image.open(io.BytesIO(data))
    im.load()
    return im


def test_hex_to_rgb_short_and_long() -> None:
    assert _hex_to_rgb("#000") == (0, 0, 0)
    assert _hex_to_rgb("ff8000") == (255, 128, 0)


def test_stroke_is_rasterized_on_transparent_canvas() -> None:
    path = StrokePath()
    path.begin(10, 10)
    path.extend(100, 50)
    path.extend(200, 20)

    mark = MarkProducer().produce_from_stroke(path)

    assert mark.source is MarkSource.DRAW
    assert (mark.natural_width, mark.natural_height) == (300, 150)
    assert (mark.display_width, mark.display_height) == (150.0, 75.0)
    img = _open(mark.image_bytes)
    assert img.format == "PNG"
    assert img.mode == "RGBA"
    assert img.getpixel((0, 149))[3] == 0
    assert img.getchannel("A").getbbox() is not None


def test_empty_capture_is_rejected() -> None:
    producer = MarkProducer()
    with pytest.raises(EmptyStrokeError):
        producer.produce_from_stroke(StrokePath())

    single_click = StrokePath()
    single_click.begin(5, 5)
    with pytest.raises(EmptyContentError):
        producer.produce_from_stroke(single_click)


def test_canvas_size_comes_from_config() -> None:
    path = StrokePath()
    path.begin(0, 0)
    path.extend(10, 10)
    mark = MarkProducer(canvas=CanvasConfig(width=120, height=40)).produce_from_stroke(path)
    assert _open(mark.image_bytes).size == (120, 40)


def test_text_is_rendered() -> None:
    mark = MarkProducer().produce_from_text("Jane Doe")
    assert mark.source is MarkSource.TYPE
    img = _open(mark.image_bytes)
    assert img.size == (300, 150)
    bbox = img.getchannel("A").getbbox()
    assert bbox is not None
    # left aligned with a small margin
    assert bbox[0] < 60


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_text_is_rejected(text: str) -> None:
    with pytest.raises(EmptyTextError):
        MarkProducer().produce_from_text(text)


def test_upload_keeps_bytes_unchanged() -> None:
    data = make_png((64, 20))
    mark = MarkProducer().produce_from_upload(data)
    assert mark.source is MarkSource.UPLOAD
    assert mark.image_bytes == data
    assert (mark.natural_width, mark.natural_height) == (64, 20)
    assert (mark.display_width, mark.display_height) == (150.0, 75.0)


@pytest.mark.parametrize("data", [b"", b"not an image", b"\x89PNG\r\n\x1a\n" + b"\x00" * 16])
def test_upload_rejects_undecodable_bytes(data: bytes) -> None:
    with pytest.raises(UnsupportedImageError):
        MarkProducer().produce_from_upload(data)


def test_upload_rejects_decompression_bombs() -> None:
    with pytest.raises(UnsupportedImageError):
        MarkProducer().produce_from_upload(make_oversized_png())


def test_preserve_aspect_derives_height_from_raster() -> None:
    producer = MarkProducer(placement=PlacementConfig(preserve_aspect=True))
    mark = producer.produce_from_upload(make_png((100, 25)))
    assert (mark.display_width, mark.display_height) == (150.0, 37.5)
