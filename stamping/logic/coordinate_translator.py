"""
Conversion between UI space and PDF document space.

UI space:       origin top-left, y grows downwards, page scaled to the render size.
Document space: origin bottom-left, y grows upwards, PDF points of the page box.

All call sites go through these helpers; nothing else flips the y axis.
"""
from __future__ import annotations
from typing import Tuple

from ..models.page_geometry import PageGeometry
from ..models.placed_mark import PlacedMark


def render_height_for(native_width: float, native_height: float, render_width: float) -> float:
    """Height of a page rendered at ``render_width`` with its aspect ratio kept."""
    return float(render_width) * float(native_height) / float(native_width)


def scale_size(
    ui_width: float,
    ui_height: float,
    page_native_width: float,
    page_native_height: float,
    page_render_width: float,
    page_render_height: float,
) -> Tuple[float, float]:
    sx = page_native_width / page_render_width
    sy = page_native_height / page_render_height
    return ui_width * sx, ui_height * sy


def to_document_space(
    ui_x: float,
    ui_y: float,
    ui_width: float,
    ui_height: float,
    page_native_width: float,
    page_native_height: float,
    page_render_width: float,
    page_render_height: float,
) -> Tuple[float, float]:
    """
    Lower-left corner in document space of a box whose top-left corner is at
    (ui_x, ui_y) in UI space.
    """
    sx = page_native_width / page_render_width
    sy = page_native_height / page_render_height
    doc_x = ui_x * sx
    doc_y = page_native_height - ui_y * sy - ui_height * sy
    return doc_x, doc_y


def to_ui_space(
    doc_x: float,
    doc_y: float,
    doc_width: float,
    doc_height: float,
    page_native_width: float,
    page_native_height: float,
    page_render_width: float,
    page_render_height: float,
) -> Tuple[float, float]:
    """Inverse of :func:`to_document_space`; doc_height is in document units."""
    sx = page_native_width / page_render_width
    sy = page_native_height / page_render_height
    ui_x = doc_x / sx
    ui_y = (page_native_height - doc_y - doc_height) / sy
    return ui_x, ui_y


def _rotate_anchor(dx: float, dy: float, geometry: PageGeometry) -> Tuple[float, float]:
    """
    Map a point of the displayed page onto unrotated user space.

    The displayed page is the user space box turned clockwise by the page
    rotation, so the inverse turn is applied here.
    """
    w, h = geometry.native_width, geometry.native_height
    if geometry.rotation == 90:
        return w - dy, dx
    if geometry.rotation == 180:
        return w - dx, h - dy
    if geometry.rotation == 270:
        return dy, h - dx
    return dx, dy


def to_document_rect(mark: PlacedMark, geometry: PageGeometry) -> Tuple[float, float, float, float]:
    """
    (x, y, width, height) of a placed mark in document space, page box origin
    included.

    On a rotated page (x, y) is where the mark's displayed lower-left corner
    lands; the image is drawn turned counter-clockwise by ``geometry.rotation``
    around that point so it reads upright in a viewer.
    """
    args = (geometry.display_width, geometry.display_height,
            geometry.render_width, geometry.render_height)
    dx, dy = to_document_space(mark.x, mark.y, mark.width, mark.height, *args)
    w, h = scale_size(mark.width, mark.height, *args)
    x, y = _rotate_anchor(dx, dy, geometry)
    return x + geometry.origin_x, y + geometry.origin_y, w, h


def clamp_to_page(
    x: float,
    y: float,
    width: float,
    height: float,
    page_render_width: float,
    page_render_height: float,
) -> Tuple[float, float]:
    """Keep a UI-space box inside the rendered page; oversized boxes stick to the top-left."""
    x = max(0.0, min(float(x), page_render_width - width))
    y = max(0.0, min(float(y), page_render_height - height))
    return x, y
