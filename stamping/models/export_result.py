from __future__ import annotations
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExportResult:
    data: bytes = field(repr=False)
    filename: str
    page_count: int
    mark_count: int
