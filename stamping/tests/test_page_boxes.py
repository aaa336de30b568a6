"""
Exports on pages whose visible box is not a plain (0, 0, w, h) MediaBox:
rotated pages, moved MediaBox origins and CropBoxes. The stamped output is
rendered again and checked where the preview showed the mark.
"""
from __future__ import annotations

from typing import Tuple

import pytest

from stamping.logic.compositor import Compositor
from stamping.logic.document_codec import PdfDocumentCodec
from stamping.logic.document_session import DocumentSession
from stamping.logic.page_renderer import PdfiumPageRenderer
from stamping.logic.placement_model import PlacementModel
from stamping.tests.helpers import RecordingCodec, make_pdf, make_png, reshape_pdf

RENDER_W = 400
BLUE = (0, 0, 255, 255)

PAGE_SHAPES = {
    "plain": {},
    "rotate-90": {"rotate": 90},
    "rotate-180": {"rotate": 180},
    "rotate-270": {"rotate": 270},
    "moved-mediabox": {"mediabox": (100, 100, 712, 892)},
    "cropbox": {"cropbox": (50, 60, 562, 752)},
    "rotate-90-moved-mediabox": {"rotate": 90, "mediabox": (-50, 30, 562, 822)},
}


def _open(shape: dict, codec=None) -> DocumentSession:
    data = reshape_pdf(make_pdf(1), **shape)
    return DocumentSession.open(data, codec=codec or PdfDocumentCodec(), render_width=RENDER_W,
                                placements=PlacementModel())


def _render(data: bytes):
    renderer = PdfiumPageRenderer()
    renderer.open(data)
    try:
        return renderer.render(1, RENDER_W)
    finally:
        renderer.close()


def _is_blue(pixel: Tuple[int, ...]) -> bool:
    r, g, b = pixel[:3]
    return b > 200 and r < 80 and g < 80


@pytest.mark.parametrize("shape", PAGE_SHAPES.values(), ids=PAGE_SHAPES.keys())
def test_geometry_matches_rendered_preview(shape: dict) -> None:
    session = _open(shape)
    geom = session.geometry(1)
    preview = _render(session.original_bytes)
    assert preview.size[0] == pytest.approx(geom.render_width, abs=1)
    assert preview.size[1] == pytest.approx(geom.render_height, abs=1)


@pytest.mark.parametrize("shape", PAGE_SHAPES.values(), ids=PAGE_SHAPES.keys())
def test_marks_land_where_the_preview_shows_them(shape: dict) -> None:
    session = _open(shape)
    geom = session.geometry(1)
    session.placements.insert(make_png((60, 30), BLUE), page=1, x=0, y=0, width=150, height=75)
    session.placements.insert(make_png((60, 30), BLUE), page=1,
                              x=geom.render_width - 150, y=geom.render_height - 75,
                              width=150, height=75)

    out = _render(Compositor().export(session))
    w, h = out.size

    assert _is_blue(out.getpixel((20, 20)))
    assert _is_blue(out.getpixel((w - 20, h - 20)))
    # just outside the top-left mark
    assert not _is_blue(out.getpixel((170, 20)))
    assert not _is_blue(out.getpixel((20, 95)))


def test_rotated_page_geometry() -> None:
    geom = _open({"rotate": 90}).geometry(1)
    assert (geom.native_width, geom.native_height, geom.rotation) == (612.0, 792.0, 90)
    assert (geom.display_width, geom.display_height) == (792.0, 612.0)
    assert geom.render_height == pytest.approx(RENDER_W * 612 / 792)


def test_moved_mediabox_origin_reaches_the_draw_call() -> None:
    codec = RecordingCodec()
    session = _open({"mediabox": (100, 100, 712, 892)}, codec=codec)
    session.placements.insert(make_png(), page=1, x=0, y=0, width=150, height=75)

    Compositor(codec).export(session)

    _, x, y, w, h = codec.draws[0]
    assert (x, w, h) == pytest.approx((100.0, 229.5, 114.75))
    assert y == pytest.approx(100 + 792 - 114.75)
    assert codec.rotations == [0]


def test_rotation_is_passed_to_the_codec() -> None:
    codec = RecordingCodec()
    session = _open({"rotate": 270}, codec=codec)
    session.placements.insert(make_png(), page=1)
    Compositor(codec).export(session)
    assert codec.rotations == [270]
