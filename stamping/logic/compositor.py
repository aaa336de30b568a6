# stamping/logic/compositor.py
from __future__ import annotations
import hashlib
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from ..exceptions.errors import PageRangeError
from ..models.mark_enums import PageOverflowPolicy
from ..models.placed_mark import PlacedMark
from .coordinate_translator import to_document_rect
from .document_codec import DocumentCodec, PdfDocumentCodec
from .document_session import DocumentSession

logger = logging.getLogger(__name__)


class Compositor:
    """
    Burns placed marks into a copy of the session's document.

    The session is only read. Any failure propagates and no bytes are
    returned, so callers never see a partially stamped document.
    """

    def __init__(self, codec: Optional[DocumentCodec] = None, *,
                 page_overflow: PageOverflowPolicy = PageOverflowPolicy.REJECT) -> None:
        self._codec = codec or PdfDocumentCodec()
        self._page_overflow = PageOverflowPolicy(page_overflow)

    def _resolve_page(self, page: int, page_count: int) -> int:
        if page < 1:
            raise PageRangeError(page, page_count)
        if page > page_count:
            if self._page_overflow == PageOverflowPolicy.CLAMP:
                logger.warning(f"Mark on page {page} clamped to last page {page_count}")
                return page_count
            raise PageRangeError(page, page_count)
        return page

    def export(self, session: DocumentSession, marks: Optional[Sequence[PlacedMark]] = None) -> bytes:
        """
        Return new document bytes with every mark drawn on its page.

        ``marks`` defaults to a snapshot of the session's placements; with no
        marks the document is re-serialized unchanged.
        """
        marks = list(session.placements.snapshot() if marks is None else marks)
        handle = self._codec.load(session.original_bytes)
        page_count = self._codec.page_count(handle)

        audit_marks: List[dict] = []
        for mark in marks:
            page = self._resolve_page(mark.page, page_count)
            geom = session.geometry(page)
            x, y, w, h = to_document_rect(mark, geom)
            ref = self._codec.embed_raster_image(handle, mark.image)
            self._codec.draw_image(handle, page - 1, ref, x, y, w, h, rotation=geom.rotation)
            audit_marks.append({
                "id": mark.id, "page": page,
                "x": round(x, 2), "y": round(y, 2), "width": round(w, 2), "height": round(h, 2),
                "rotation": geom.rotation,
                "image_sha256": hashlib.sha256(mark.image).hexdigest(),
            })

        data = self._codec.save(handle)
        self._audit({
            "source_name": session.source_name,
            "page_count": page_count,
            "mark_count": len(marks),
            "marks": audit_marks,
            "output_sha256": hashlib.sha256(data).hexdigest(),
        })
        return data

    def export_to_file(self, session: DocumentSession, path: str | os.PathLike) -> Path:
        """Export and write atomically: the target only appears once complete."""
        target = Path(path)
        data = self.export(session)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.stem}_", suffix=".part", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return target

    @staticmethod
    def _audit(payload: dict) -> None:
        """One JSON audit line per completed export."""
        payload["ts_utc"] = datetime.now(timezone.utc).isoformat()
        logger.info("export %s", json.dumps(payload, ensure_ascii=False))
