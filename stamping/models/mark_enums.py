# stamping/models/mark_enums.py
from __future__ import annotations
from enum import Enum


class MarkSource(str, Enum):
    """Input modality a mark was produced from (doubles as the selected tool)."""
    DRAW = "draw"
    TYPE = "type"
    UPLOAD = "upload"


class PageOverflowPolicy(str, Enum):
    """What export does with a mark whose page no longer exists."""
    REJECT = "reject"
    CLAMP = "clamp"
