"""Tests for the pypdfium2 page renderer."""
from __future__ import annotations

import pytest

from stamping.exceptions.errors import CodecError
from stamping.logic.page_renderer import PdfiumPageRenderer
from stamping.tests.helpers import make_pdf


def test_reports_pages_and_native_size() -> None:
    renderer = PdfiumPageRenderer()
    renderer.open(make_pdf(3, size=(595, 842)))
    try:
        assert renderer.page_count == 3
        assert renderer.page_size(2) == pytest.approx((595.0, 842.0))
    finally:
        renderer.close()


def test_render_scales_to_requested_width() -> None:
    renderer = PdfiumPageRenderer()
    renderer.open(make_pdf(1))
    img = renderer.render(1, 306)
    renderer.close()
    assert img.mode == "RGBA"
    assert abs(img.size[0] - 306) <= 1
    assert abs(img.size[1] - 396) <= 1


def test_unreadable_bytes() -> None:
    with pytest.raises(CodecError):
        PdfiumPageRenderer().open(b"not a pdf")


def test_use_before_open() -> None:
    with pytest.raises(RuntimeError):
        PdfiumPageRenderer().page_count
