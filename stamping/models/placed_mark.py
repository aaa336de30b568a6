from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from .mark_enums import MarkSource


@dataclass
class PlacedMark:
    """
    A mark bound to a page. x/y is the top-left corner and width/height the
    footprint, both in UI space (origin top-left, y down, render width).
    Pages are 1-based.
    """
    id: str
    image: bytes = field(repr=False)
    page: int = 1
    x: float = 100.0
    y: float = 100.0
    width: float = 150.0
    height: float = 75.0
    source: Optional[MarkSource] = None
