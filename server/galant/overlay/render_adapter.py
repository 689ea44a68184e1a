"""Wrapper around one render engine instance."""

import json
import logging
from typing import Any

from galant.config import settings
from galant.core.errors import PageOutOfRange, ScoreLoadError, ScoreNotReady
from galant.overlay.engine import RenderEngine, engine_options
from galant.overlay.geometry import Candidate, Rect
from galant.overlay.svg import ScorePage, flatten_svg

logger = logging.getLogger(__name__)


class ScoreRenderAdapter:
    """
    Own the lifecycle of a render engine and expose a small query surface.

    The engine is injected, never looked up globally, so each score view gets
    its own instance and tests can pass a fake. Not thread-safe: confine an
    adapter to a single owner.
    """

    def __init__(self, engine: RenderEngine, options: dict[str, Any] | None = None):
        self.engine = engine
        self.options = options if options is not None else engine_options()
        self.page_count = 0
        self.generation = 0
        self._pages: dict[int, ScorePage] = {}

    @property
    def is_loaded(self) -> bool:
        return self.page_count > 0

    def load(self, symbolic_data: str) -> int:
        """
        Parse symbolic score data and lay it out.

        Returns:
            Number of pages

        Raises:
            ScoreLoadError: If the data is empty or the engine rejects it
        """
        if not isinstance(symbolic_data, str) or not symbolic_data.strip():
            raise ScoreLoadError("Score data is empty")

        self._pages = {}
        self.page_count = 0

        try:
            self.engine.setOptions(self.options)
        except Exception as e:
            raise ScoreLoadError(f"Failed to configure render engine: {e}") from e

        try:
            loaded = self.engine.loadData(symbolic_data)
        except Exception as e:
            raise ScoreLoadError(f"Render engine failed: {e}", self.engine_log()) from e

        if not loaded:
            engine_log = self.engine_log()
            logger.warning(f"Render engine rejected score data: {engine_log}")
            raise ScoreLoadError("Render engine could not parse the score", engine_log)

        try:
            page_count = int(self.engine.getPageCount())
        except Exception as e:
            raise ScoreLoadError(f"Render engine failed to lay out the score: {e}", self.engine_log()) from e
        if page_count <= 0:
            raise ScoreLoadError(f"Render engine returned invalid page count: {page_count}", self.engine_log())

        self.page_count = page_count
        self.generation += 1
        logger.info(f"Loaded score: {page_count} pages (generation {self.generation})")
        return page_count

    def engine_log(self) -> str:
        try:
            return self.engine.getLog() or ""
        except Exception:
            return ""

    def clamp_page(self, page: int) -> int:
        """Clamp a requested page into ``1..page_count``."""
        self._require_loaded()
        return max(1, min(page, self.page_count))

    def page(self, page_number: int) -> ScorePage:
        """Rendered and parsed page; cached until the next load."""
        self._require_loaded()
        if page_number < 1 or page_number > self.page_count:
            raise PageOutOfRange(page_number, self.page_count)

        cached = self._pages.get(page_number)
        if cached is not None:
            return cached

        markup = flatten_svg(self.engine.renderToSVG(page_number))
        page = ScorePage(markup)
        self._pages[page_number] = page
        return page

    def render_page(self, page_number: int) -> str:
        """SVG markup of one page; the same page always yields the same markup."""
        return self.page(page_number).markup

    def locate_page(self, element_id: str) -> int | None:
        """Page containing an element, or None when the engine doesn't know it."""
        self._require_loaded()
        try:
            page_number = int(self.engine.getPageWithElement(element_id))
        except Exception as e:
            logger.debug(f"Page lookup failed for {element_id}: {e}")
            return None
        if page_number < 1:
            return None
        return page_number

    @staticmethod
    def measure_id(measure_number: int) -> str:
        """Conventional element id of a measure."""
        return f"{settings.MEASURE_ID_PREFIX}{measure_number}"

    def attribute_of(self, element_id: str, attribute_name: str) -> str | None:
        """Attribute of an element in the original score format (e.g. a measure's ``n``)."""
        self._require_loaded()
        try:
            attributes = self.engine.getElementAttr(element_id)
        except Exception as e:
            logger.debug(f"Attribute lookup failed for {element_id}: {e}")
            return None
        if isinstance(attributes, str):
            try:
                attributes = json.loads(attributes or "{}")
            except ValueError:
                return None
        if not isinstance(attributes, dict):
            return None
        value = attributes.get(attribute_name)
        return None if value is None else str(value)

    def element_bounds(self, page_number: int, element_id: str) -> Rect | None:
        """Bounding box of an element on a page, in page content coordinates."""
        return self.page(page_number).bounds(element_id)

    def candidates(self, page_number: int, css_class: str) -> list[Candidate]:
        """Elements of a class on a page, in document order."""
        return self.page(page_number).candidates(css_class)

    def _require_loaded(self) -> None:
        if not self.is_loaded:
            raise ScoreNotReady("No score loaded")
