from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class PageGeometry:
    """
    Visible page box (the CropBox) in PDF points, origin bottom-left, together
    with the size the page is rendered at in the UI preview.

    native_width/native_height are measured in unrotated user space;
    ``rotation`` is the page's /Rotate (0, 90, 180 or 270, clockwise) and the
    display_* properties give the size as the page is shown.
    """
    native_width: float
    native_height: float
    render_width: float
    render_height: float
    origin_x: float = 0.0
    origin_y: float = 0.0
    rotation: int = 0

    @property
    def display_width(self) -> float:
        return self.native_height if self.rotation in (90, 270) else self.native_width

    @property
    def display_height(self) -> float:
        return self.native_width if self.rotation in (90, 270) else self.native_height

    @property
    def scale(self) -> float:
        """Document points per UI unit along x."""
        return self.display_width / self.render_width
