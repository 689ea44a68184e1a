"""Render engine capability and the Verovio-backed factory."""

from typing import Any, Callable, Protocol

import verovio

from galant.config import settings


class RenderEngine(Protocol):
    """The slice of the Verovio toolkit API the render adapter relies on."""

    def setOptions(self, options: dict[str, Any]) -> Any: ...

    def loadData(self, data: str) -> bool: ...

    def getLog(self) -> str: ...

    def getPageCount(self) -> int: ...

    def renderToSVG(self, page_no: int) -> str: ...

    def getPageWithElement(self, xml_id: str) -> int: ...

    def getElementAttr(self, xml_id: str) -> Any: ...


EngineFactory = Callable[[], RenderEngine]


def engine_options() -> dict[str, Any]:
    """Layout options shared by every score view."""
    return {
        "scale": settings.SCORE_SCALE,
        "pageHeight": settings.SCORE_PAGE_HEIGHT,
        "pageWidth": settings.SCORE_PAGE_WIDTH,
        "adjustPageHeight": settings.SCORE_ADJUST_PAGE_HEIGHT,
        "breaks": "auto",
        # Generated ids derive from the input, so placements survive reloads
        "xmlIdChecksum": True,
    }


def create_engine() -> RenderEngine:
    """Create a fresh Verovio toolkit; one per score view session."""
    return verovio.toolkit()
