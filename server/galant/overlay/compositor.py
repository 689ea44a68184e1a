"""Draw schema annotation markers over a rendered score page."""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Iterable

import structlog
from lxml import etree

from galant.config import settings
from galant.core.categories import EventCategory, marker_offset, marker_style
from galant.overlay.geometry import Rect
from galant.overlay.svg import (
    add_class,
    class_tokens,
    marker_container,
    parse_svg,
    remove_class,
    serialize_svg,
)

logger = structlog.get_logger(__name__)

SELECTED_CLASS = "selected"
OVERLAY_CLASS = "galant-overlay"
GROUP_CLASS = "galant-group"
PENDING_CLASS = "galant-pending"
MARKER_CLASS = "galant-marker"
CAPTION_CLASS = "galant-caption"

PENDING_DASH = "30 20"
MARKER_STROKE_WIDTH = 12

BoundsProvider = Callable[[str], Rect | None]


@dataclass(frozen=True)
class OverlayAnnotation:
    """One marker to draw: an event value anchored to a rendered element."""

    element_id: str
    category: EventCategory
    value: str
    group_key: str
    group_label: str
    temporary: bool = False


def _num(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _tag(root: etree._Element, name: str) -> str:
    namespace = etree.QName(root).namespace
    return f"{{{namespace}}}{name}" if namespace else name


def _clear(root: etree._Element) -> None:
    for element in root.iter():
        if not isinstance(element.tag, str):
            continue
        if SELECTED_CLASS in class_tokens(element):
            remove_class(element, SELECTED_CLASS)
    stale = [
        element
        for element in root.iter()
        if isinstance(element.tag, str) and OVERLAY_CLASS in class_tokens(element)
    ]
    for element in stale:
        parent = element.getparent()
        if parent is not None:
            parent.remove(element)


def _highlight(root: etree._Element, element_id: str | None) -> None:
    if not element_id:
        return
    for element in root.iter():
        if isinstance(element.tag, str) and element.get("id") == element_id:
            add_class(element, SELECTED_CLASS)
            return
    logger.debug("Highlighted element not on page", element_id=element_id)


def _group(annotations: Iterable[OverlayAnnotation]) -> list[list[OverlayAnnotation]]:
    """Persisted groups in first-seen order, then the pending group."""
    persisted: OrderedDict[str, list[OverlayAnnotation]] = OrderedDict()
    pending: list[OverlayAnnotation] = []
    for annotation in annotations:
        if annotation.temporary:
            pending.append(annotation)
        else:
            persisted.setdefault(annotation.group_key, []).append(annotation)
    groups = list(persisted.values())
    if pending:
        groups.append(pending)
    return groups


def _draw_group(
    layer: etree._Element,
    annotations: list[OverlayAnnotation],
    bounds_of: BoundsProvider,
) -> None:
    radius = settings.MARKER_RADIUS
    first = annotations[0]
    group = etree.SubElement(layer, _tag(layer, "g"))
    group.set("class", f"{GROUP_CLASS} {PENDING_CLASS}" if first.temporary else GROUP_CLASS)
    group.set("data-group", first.group_key)

    left = right = lowest = None
    for annotation in annotations:
        bounds = bounds_of(annotation.element_id)
        if bounds is None:
            logger.info(
                "Annotation anchor not on page, skipping marker",
                element_id=annotation.element_id,
                group=annotation.group_key,
            )
            continue

        style = marker_style(annotation.category)
        center = bounds.center
        cy = center.y + marker_offset(annotation.category, bounds.height, radius, settings.MARKER_GAP)

        marker = etree.SubElement(group, _tag(layer, "g"))
        marker.set("class", f"{MARKER_CLASS} {annotation.category.value}")
        marker.set("data-element-id", annotation.element_id)

        circle = etree.SubElement(marker, _tag(layer, "circle"))
        circle.set("cx", _num(center.x))
        circle.set("cy", _num(cy))
        circle.set("r", _num(radius))
        circle.set("fill", style.fill)
        circle.set("stroke", "#000000")
        circle.set("stroke-width", str(MARKER_STROKE_WIDTH))
        if annotation.temporary:
            circle.set("stroke-dasharray", PENDING_DASH)

        label = etree.SubElement(marker, _tag(layer, "text"))
        label.set("x", _num(center.x))
        label.set("y", _num(cy))
        label.set("fill", style.text_fill)
        label.set("font-size", _num(settings.MARKER_FONT_SIZE))
        label.set("text-anchor", "middle")
        label.set("dominant-baseline", "central")
        label.text = annotation.value

        left = center.x - radius if left is None else min(left, center.x - radius)
        right = center.x + radius if right is None else max(right, center.x + radius)
        lowest = cy + radius if lowest is None else max(lowest, cy + radius)

    if left is None:
        layer.remove(group)
        return

    caption = etree.SubElement(group, _tag(layer, "text"))
    caption.set("class", CAPTION_CLASS)
    caption.set("x", _num((left + right) / 2))
    caption.set("y", _num(lowest + settings.GROUP_LABEL_GAP))
    caption.set("font-size", _num(settings.MARKER_FONT_SIZE))
    caption.set("text-anchor", "middle")
    if first.temporary:
        caption.set("font-style", "italic")
    caption.text = first.group_label


def compose(
    markup: str,
    highlight_id: str | None,
    annotations: Iterable[OverlayAnnotation],
    bounds_of: BoundsProvider,
) -> str:
    """
    Return the page markup with the selection highlight and annotation markers.

    Anything a previous call injected is removed first, so composing the
    output again with the same inputs reproduces it exactly. Annotations whose
    anchor has no bounds are skipped.
    """
    root = parse_svg(markup)
    _clear(root)
    _highlight(root, highlight_id)

    groups = _group(annotations)
    if groups:
        container = marker_container(root)
        layer = etree.SubElement(container, _tag(container, "g"))
        layer.set("class", OVERLAY_CLASS)
        for group in groups:
            _draw_group(layer, group, bounds_of)
        if len(layer) == 0:
            container.remove(layer)

    return serialize_svg(root)
