"""Parsed view of one rendered score page."""

import logging
import re
from typing import Iterator

from lxml import etree

from galant.overlay.geometry import Candidate, Rect

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"

# Glyph extents as a fraction of the em box; noteheads dominate note bounds.
GLYPH_WIDTH_EM = 0.3
GLYPH_HEIGHT_EM = 0.3
DEFAULT_GLYPH_EM = 720.0

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_TRANSLATE = re.compile(rf"translate\(\s*({_NUMBER})(?:[\s,]+({_NUMBER}))?\s*\)")
_SCALE = re.compile(rf"scale\(\s*({_NUMBER})(?:[\s,]+({_NUMBER}))?\s*\)")
_ABSOLUTE_PATH = re.compile(r"^[MLZ\d\s.,eE+-]+$")

_PARSER = etree.XMLParser(remove_blank_text=False, huge_tree=True, resolve_entities=False)


def parse_svg(markup: str) -> etree._Element:
    """Parse SVG markup into an lxml element tree."""
    return etree.fromstring(markup.encode("utf-8"), _PARSER)


def serialize_svg(root: etree._Element) -> str:
    """Serialize a tree back to SVG text."""
    return etree.tostring(root, encoding="unicode")


def class_tokens(element: etree._Element) -> list[str]:
    return (element.get("class") or "").split()


def has_class(element: etree._Element, css_class: str) -> bool:
    return css_class in class_tokens(element)


def add_class(element: etree._Element, css_class: str) -> None:
    tokens = class_tokens(element)
    if css_class not in tokens:
        tokens.append(css_class)
        element.set("class", " ".join(tokens))


def remove_class(element: etree._Element, css_class: str) -> None:
    tokens = class_tokens(element)
    if css_class in tokens:
        tokens = [t for t in tokens if t != css_class]
        if tokens:
            element.set("class", " ".join(tokens))
        else:
            del element.attrib["class"]


def _float(value: str | None, default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        return float(value.strip().removesuffix("px"))
    except ValueError:
        return default


def _local_name(element: etree._Element) -> str:
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    return etree.QName(tag).localname


def _use_box(use: etree._Element) -> Rect:
    """Approximate the drawn extent of a glyph reference."""
    x = _float(use.get("x"))
    y = _float(use.get("y"))
    em = _float(use.get("height"), 0.0) or DEFAULT_GLYPH_EM
    transform = use.get("transform") or ""
    translate = _TRANSLATE.search(transform)
    if translate:
        x += float(translate.group(1))
        y += float(translate.group(2) or 0.0)
    scale = _SCALE.search(transform)
    if scale:
        sy = float(scale.group(2) or scale.group(1))
        em = 1000.0 * abs(sy)
    width = GLYPH_WIDTH_EM * em
    height = GLYPH_HEIGHT_EM * em
    # Glyph origin sits on the baseline; noteheads are centered on it.
    return Rect(x, y - height / 2, width, height)


def _points_box(numbers: list[float]) -> Rect | None:
    if len(numbers) < 2:
        return None
    xs = numbers[0::2]
    ys = numbers[1::2]
    return Rect(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


def _shape_box(element: etree._Element) -> Rect | None:
    """Bounding box of one primitive shape, or None for non-geometry nodes."""
    name = _local_name(element)
    if name == "use":
        return _use_box(element)
    if name == "rect":
        return Rect(
            _float(element.get("x")),
            _float(element.get("y")),
            _float(element.get("width")),
            _float(element.get("height")),
        )
    if name in ("ellipse", "circle"):
        rx = _float(element.get("rx", element.get("r")))
        ry = _float(element.get("ry", element.get("r")))
        cx = _float(element.get("cx"))
        cy = _float(element.get("cy"))
        return Rect(cx - rx, cy - ry, 2 * rx, 2 * ry)
    if name == "polygon" or name == "polyline":
        numbers = [float(n) for n in re.findall(_NUMBER, element.get("points") or "")]
        return _points_box(numbers)
    if name == "path":
        d = element.get("d") or ""
        if not _ABSOLUTE_PATH.match(d):
            return None
        numbers = [float(n) for n in re.findall(_NUMBER, d)]
        return _points_box(numbers)
    return None


def element_box(element: etree._Element) -> Rect | None:
    """Union of the shapes drawn by an element and its descendants."""
    box = None
    for node in element.iter():
        shape = _shape_box(node)
        if shape is None:
            continue
        box = shape if box is None else box.union(shape)
    return box


class ScorePage:
    """
    One rendered page, parsed once and queried by element id or class.

    Coordinates are in the local space of the page content group, the same
    space markers are injected into.
    """

    def __init__(self, markup: str) -> None:
        self.markup = markup
        self.root = parse_svg(markup)
        self._by_id: dict[str, etree._Element] = {}
        for element in self.root.iter():
            element_id = element.get("id") if isinstance(element.tag, str) else None
            if element_id and element_id not in self._by_id:
                self._by_id[element_id] = element

    def find(self, element_id: str) -> etree._Element | None:
        return self._by_id.get(element_id)

    def iter_class(self, css_class: str) -> Iterator[etree._Element]:
        """Elements carrying ``css_class``, in document order, skipping defs."""
        for element in self.root.iter():
            if not isinstance(element.tag, str) or not has_class(element, css_class):
                continue
            if any(_local_name(a) == "defs" for a in element.iterancestors()):
                continue
            yield element

    def bounds(self, element_id: str) -> Rect | None:
        element = self.find(element_id)
        if element is None:
            return None
        return element_box(element)

    def candidates(self, css_class: str) -> list[Candidate]:
        """Selectable elements of a class with a measurable box."""
        result = []
        for element in self.iter_class(css_class):
            element_id = element.get("id")
            box = element_box(element)
            if element_id and box is not None:
                result.append(Candidate(element_id, box))
        return result

    def enclosing_id(self, element_id: str, css_class: str) -> str | None:
        """Id of the nearest ancestor carrying ``css_class``."""
        element = self.find(element_id)
        if element is None:
            return None
        for ancestor in element.iterancestors():
            if has_class(ancestor, css_class):
                return ancestor.get("id")
        return None


def marker_container(root: etree._Element) -> etree._Element:
    """Group the page content is drawn in; markers share its coordinates."""
    for element in root.iter("{%s}g" % SVG_NS, "g"):
        if has_class(element, "page-margin"):
            return element
    return root


def flatten_svg(markup: str) -> str:
    """
    Flatten Verovio's nested ``<svg class="definition-scale">`` wrapper.

    The outer element carries a small pixel size while the inner one holds
    the real viewBox, so content renders outside the visible area. The inner
    viewBox is moved to the outer element and the inner children are hoisted.
    """
    if not markup or not markup.strip():
        return markup
    try:
        root = parse_svg(markup)
    except etree.XMLSyntaxError as e:
        logger.warning(f"Could not parse SVG for flattening: {e}")
        return markup

    nested = None
    for element in root.iter("{%s}svg" % SVG_NS, "svg"):
        if element is not root and has_class(element, "definition-scale"):
            nested = element
            break
    if nested is None:
        return markup

    view_box = nested.get("viewBox")
    if not view_box:
        logger.warning("Nested SVG found but no viewBox attribute")
        return markup

    for attribute in ("width", "height"):
        root.attrib.pop(attribute, None)
    root.set("viewBox", view_box)
    root.set("preserveAspectRatio", "xMidYMid meet")
    root.set("style", "width: 100%; max-width: 100%;")

    parent = nested.getparent()
    position = parent.index(nested)
    children = list(nested)
    tail = nested.tail
    for offset, child in enumerate(children):
        parent.insert(position + offset, child)
    parent.remove(nested)
    if tail and children:
        children[-1].tail = (children[-1].tail or "") + tail

    logger.debug(f"Flattened SVG with viewBox={view_box}")
    return serialize_svg(root)
