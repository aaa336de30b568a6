from __future__ import annotations
import copy
import logging
import uuid
from typing import Dict, Iterator, List, Optional, Union

from ..exceptions.errors import MarkNotFoundError
from ..models.mark import Mark
from ..models.placed_mark import PlacedMark

logger = logging.getLogger(__name__)


class PlacementModel:
    """
    Ordered collection of placed marks.

    Records live in an insertion-ordered dict keyed by id, so position updates
    during a drag are a single lookup. Unknown ids raise MarkNotFoundError in
    every method that takes one.
    """

    def __init__(self, *, default_x: float = 100.0, default_y: float = 100.0,
                 default_width: float = 150.0, default_height: float = 75.0) -> None:
        self._records: Dict[str, PlacedMark] = {}
        self._default_x = float(default_x)
        self._default_y = float(default_y)
        self._default_width = float(default_width)
        self._default_height = float(default_height)

    # ------------------------------------------------------------------ #
    def insert(
        self,
        mark: Union[Mark, bytes],
        page: int = 1,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> str:
        """Append a new record and return its id."""
        if isinstance(mark, Mark):
            image, source = mark.image_bytes, mark.source
            w = mark.display_width if width is None else width
            h = mark.display_height if height is None else height
        else:
            image, source = bytes(mark), None
            w = self._default_width if width is None else width
            h = self._default_height if height is None else height

        mark_id = uuid.uuid4().hex
        while mark_id in self._records:  # pragma: no cover
            mark_id = uuid.uuid4().hex

        self._records[mark_id] = PlacedMark(
            id=mark_id,
            image=image,
            page=int(page),
            x=float(self._default_x if x is None else x),
            y=float(self._default_y if y is None else y),
            width=float(w),
            height=float(h),
            source=source,
        )
        logger.debug(f"Inserted mark {mark_id} on page {page}")
        return mark_id

    def get(self, mark_id: str) -> PlacedMark:
        try:
            return self._records[mark_id]
        except KeyError:
            raise MarkNotFoundError(mark_id) from None

    def update_position(self, mark_id: str, x: float, y: float) -> None:
        rec = self.get(mark_id)
        rec.x = float(x)
        rec.y = float(y)

    def retarget(self, mark_id: str, page: int) -> None:
        self.get(mark_id).page = int(page)

    def remove(self, mark_id: str) -> None:
        if self._records.pop(mark_id, None) is None:
            raise MarkNotFoundError(mark_id)
        logger.debug(f"Removed mark {mark_id}")

    # ------------------------------------------------------------------ #
    def list_for_page(self, page: int) -> List[PlacedMark]:
        return [r for r in self._records.values() if r.page == page]

    def snapshot(self) -> List[PlacedMark]:
        """Independent copies of all records, insertion order."""
        return [copy.copy(r) for r in self._records.values()]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PlacedMark]:
        return iter(list(self._records.values()))

    def __contains__(self, mark_id: object) -> bool:
        return mark_id in self._records
