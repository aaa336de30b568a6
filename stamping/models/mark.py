from __future__ import annotations
from dataclasses import dataclass

from .mark_enums import MarkSource


@dataclass(frozen=True)
class Mark:
    """
    Raster mark produced from a stroke capture, typed text or an upload.

    natural_* is the pixel size of the raster, display_* the footprint the
    mark gets when it is placed (UI units).
    """
    source: MarkSource
    image_bytes: bytes
    natural_width: int
    natural_height: int
    display_width: float = 150.0
    display_height: float = 75.0

    def __repr__(self) -> str:
        return (f"Mark(source={self.source.value}, {self.natural_width}x{self.natural_height}px, "
                f"display={self.display_width}x{self.display_height}, {len(self.image_bytes)} bytes)")
