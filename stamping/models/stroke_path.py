from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple

Point = Tuple[float, float]


@dataclass
class StrokePath:
    """Freehand strokes in canvas pixels; one inner list per pointer press."""
    strokes: List[List[Point]] = field(default_factory=list)

    def begin(self, x: float, y: float) -> None:
        self.strokes.append([(float(x), float(y))])

    def extend(self, x: float, y: float) -> None:
        if not self.strokes:
            self.begin(x, y)
            return
        self.strokes[-1].append((float(x), float(y)))

    def clear(self) -> None:
        self.strokes.clear()

    @property
    def segment_count(self) -> int:
        return sum(max(0, len(s) - 1) for s in self.strokes)

    def is_empty(self) -> bool:
        return self.segment_count == 0
