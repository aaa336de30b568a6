# stamping/logic/stamping_service.py
from __future__ import annotations
import io
import logging
import threading
from typing import Callable, List, Optional

from PIL import Image, ImageEnhance

from core.config.config_service import ConfigService, get_config_service

from ..exceptions.errors import ExportInProgressError, InputError, PageRangeError
from ..models.export_result import ExportResult
from ..models.mark import Mark
from ..models.mark_enums import MarkSource, PageOverflowPolicy
from ..models.placed_mark import PlacedMark
from ..models.stroke_path import StrokePath
from .compositor import Compositor
from .coordinate_translator import clamp_to_page
from .document_codec import DocumentCodec, PdfDocumentCodec
from .document_session import DocumentSession
from .mark_producer import MarkProducer
from .naming_strategy import DefaultSuffixStrategy, NamingContext, NamingStrategy
from .page_renderer import PdfiumPageRenderer
from .placement_model import PlacementModel

logger = logging.getLogger(__name__)


class StampingService:
    """
    Core stamping flow (no UI). Every method maps to one user action of the
    shell: load, pick a tool, draw, commit, place, drag, export.

    Commit methods return the id of the new placed mark and placement takes
    that id explicitly. Edits are rejected with ExportInProgressError while an
    asynchronous export is running.
    """

    # -------- Construction ---------------------------------------------------
    def __init__(self, *, config: Optional[ConfigService] = None,
                 codec: Optional[DocumentCodec] = None,
                 renderer: Optional[PdfiumPageRenderer] = None,
                 naming: Optional[NamingStrategy] = None) -> None:
        self._cfg = config or get_config_service()
        self._codec = codec or PdfDocumentCodec()
        self._renderer = renderer
        self._renderer_ready = False
        self._producer = MarkProducer(canvas=self._cfg.canvas, text=self._cfg.text,
                                      placement=self._cfg.placement)
        self._compositor = Compositor(self._codec,
                                      page_overflow=PageOverflowPolicy(self._cfg.placement.page_overflow))
        self._naming = naming or DefaultSuffixStrategy(self._cfg.export.suffix,
                                                       self._cfg.export.default_filename)

        self._session: Optional[DocumentSession] = None
        self._tool = MarkSource.DRAW
        self._strokes = StrokePath()

        self._export_lock = threading.Lock()
        self._exporting = False

    # -------- Internal helpers ----------------------------------------------
    def _guard_edit(self) -> None:
        with self._export_lock:
            if self._exporting:
                raise ExportInProgressError("An export is running; wait for it to finish.")

    def _require_session(self) -> DocumentSession:
        if self._session is None:
            raise InputError("No document loaded.")
        return self._session

    def _new_placements(self) -> PlacementModel:
        p = self._cfg.placement
        return PlacementModel(default_x=p.default_x, default_y=p.default_y,
                              default_width=p.mark_width, default_height=p.mark_height)

    def _insert(self, mark: Mark) -> str:
        session = self._require_session()
        mark_id = session.placements.insert(mark)
        logger.info(f"Committed {mark.source.value} mark {mark_id}")
        return mark_id

    # -------- Session --------------------------------------------------------
    @property
    def session(self) -> Optional[DocumentSession]:
        return self._session

    @property
    def tool(self) -> MarkSource:
        return self._tool

    @property
    def is_exporting(self) -> bool:
        with self._export_lock:
            return self._exporting

    def load_document(self, data: bytes, name: Optional[str] = None, *, keep_marks: bool = False) -> DocumentSession:
        """
        Replace the current session. With ``keep_marks`` the existing placements
        move over to the new document unchanged (pages are checked on export).
        """
        self._guard_edit()
        placements = self._new_placements()
        if keep_marks and self._session is not None:
            placements = self._session.placements
        session = DocumentSession.open(data, codec=self._codec,
                                       render_width=self._cfg.preview.render_width,
                                       placements=placements, source_name=name)
        self._session = session
        self._strokes.clear()
        self._renderer_ready = False
        return session

    # -------- Tools & stroke capture ----------------------------------------
    def select_tool(self, tool: MarkSource | str) -> None:
        self._tool = MarkSource(tool)
        logger.debug(f"Tool selected: {self._tool.value}")

    def begin_stroke(self, x: float, y: float) -> None:
        self._strokes.begin(x, y)

    def draw_stroke_segment(self, x: float, y: float) -> None:
        self._strokes.extend(x, y)

    def end_stroke(self) -> None:
        """Pointer released; the stroke stays part of the capture."""

    def clear_strokes(self) -> None:
        self._strokes.clear()

    @property
    def strokes(self) -> StrokePath:
        return self._strokes

    # -------- Commit ---------------------------------------------------------
    def commit_drawn_mark(self) -> str:
        self._guard_edit()
        self._require_session()
        mark = self._producer.produce_from_stroke(self._strokes)
        mark_id = self._insert(mark)
        self._strokes.clear()
        return mark_id

    def commit_typed_mark(self, text: str, font: Optional[str] = None, size: Optional[int] = None) -> str:
        self._guard_edit()
        self._require_session()
        return self._insert(self._producer.produce_from_text(text, font, size))

    def commit_uploaded_mark(self, data: bytes) -> str:
        self._guard_edit()
        self._require_session()
        return self._insert(self._producer.produce_from_upload(data))

    # -------- Placement ------------------------------------------------------
    def place_mark_on_page(self, mark_id: str, page: int,
                           x: Optional[float] = None, y: Optional[float] = None) -> PlacedMark:
        """Move a mark to ``page``; the position is kept inside that page."""
        self._guard_edit()
        session = self._require_session()
        if not 1 <= page <= session.page_count:
            raise PageRangeError(page, session.page_count)
        rec = session.placements.get(mark_id)
        session.placements.retarget(mark_id, page)
        geom = session.geometry(page)
        nx, ny = clamp_to_page(rec.x if x is None else x, rec.y if y is None else y,
                               rec.width, rec.height, geom.render_width, geom.render_height)
        session.placements.update_position(mark_id, nx, ny)
        logger.debug(f"Placed mark {mark_id} on page {page} at ({nx:.1f}, {ny:.1f})")
        return rec

    def drag_update(self, mark_id: str, x: float, y: float) -> None:
        """Pointer-move while dragging; clamped to the page the mark is on."""
        self._guard_edit()
        session = self._require_session()
        rec = session.placements.get(mark_id)
        if 1 <= rec.page <= session.page_count:
            geom = session.pages[rec.page - 1]
            x, y = clamp_to_page(x, y, rec.width, rec.height, geom.render_width, geom.render_height)
        session.placements.update_position(mark_id, x, y)

    def remove_mark(self, mark_id: str) -> None:
        self._guard_edit()
        self._require_session().placements.remove(mark_id)

    def marks_for_page(self, page: int) -> List[PlacedMark]:
        return self._require_session().placements.list_for_page(page)

    # -------- Preview --------------------------------------------------------
    def render_preview(self, page: int) -> Image.Image:
        """Rendered page at the configured width with placed marks at ~60% opacity."""
        session = self._require_session()
        if not 1 <= page <= session.page_count:
            raise PageRangeError(page, session.page_count)
        if self._renderer is None:
            self._renderer = PdfiumPageRenderer()
        if not self._renderer_ready:
            self._renderer.open(session.original_bytes)
            self._renderer_ready = True

        base = self._renderer.render(page, int(self._cfg.preview.render_width))
        opacity = float(self._cfg.preview.mark_opacity)
        for rec in session.placements.list_for_page(page):
            sig = Image.open(io.BytesIO(rec.image)).convert("RGBA")
            sig = sig.resize((max(1, round(rec.width)), max(1, round(rec.height))), Image.LANCZOS)
            r, g, b, a = sig.split()
            a = ImageEnhance.Brightness(a).enhance(opacity)
            sig = Image.merge("RGBA", (r, g, b, a))
            base.alpha_composite(sig, dest=(max(0, round(rec.x)), max(0, round(rec.y))))
        return base

    # -------- Export ---------------------------------------------------------
    def _prepare_export(self) -> tuple[DocumentSession, List[PlacedMark]]:
        session = self._require_session()
        if len(session.placements) == 0:
            raise InputError("Place at least one mark before exporting.")
        return session, session.placements.snapshot()

    def _run_export(self, session: DocumentSession, marks: List[PlacedMark]) -> ExportResult:
        data = self._compositor.export(session, marks)
        filename = self._naming.propose_filename(NamingContext(source_name=session.source_name))
        logger.info(f"Exported {len(marks)} mark(s) into {filename} ({len(data)} bytes)")
        return ExportResult(data=data, filename=filename, page_count=session.page_count,
                            mark_count=len(marks))

    def export(self) -> ExportResult:
        """Stamp every placed mark; InputError without a document or marks."""
        self._guard_edit()
        session, marks = self._prepare_export()
        return self._run_export(session, marks)

    def export_async(self, on_done: Callable[[ExportResult], None],
                     on_error: Optional[Callable[[Exception], None]] = None) -> threading.Thread:
        """
        Export on a worker thread. Preconditions are checked before the thread
        starts; the callbacks run on the worker thread after editing is allowed
        again. A failed export is logged with its traceback and handed to
        ``on_error``; without ``on_error`` the log record is the only report.
        """
        with self._export_lock:
            if self._exporting:
                raise ExportInProgressError("An export is already running.")
            session, marks = self._prepare_export()
            self._exporting = True

        def worker() -> None:
            result: Optional[ExportResult] = None
            error: Optional[Exception] = None
            try:
                result = self._run_export(session, marks)
            except Exception as e:
                logger.exception(f"Export failed: {e}")
                error = e
            finally:
                with self._export_lock:
                    self._exporting = False
            if error is not None:
                if on_error is not None:
                    on_error(error)
            else:
                on_done(result)  # type: ignore[arg-type]

        t = threading.Thread(target=worker, name="stamping-export", daemon=True)
        t.start()
        return t
