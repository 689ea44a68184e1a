"""Tests for the annotation overlay compositor."""

import pytest

from conftest import PAGE_ONE
from galant.core.categories import EventCategory
from galant.overlay.compositor import OverlayAnnotation, compose
from galant.overlay.svg import SVG_NS, ScorePage, flatten_svg, has_class, parse_svg


@pytest.fixture
def page() -> ScorePage:
    return ScorePage(flatten_svg(PAGE_ONE))


@pytest.fixture
def annotations() -> list[OverlayAnnotation]:
    return [
        OverlayAnnotation("n1", EventCategory.MELODY, "5", "schema-a", "Prinner"),
        OverlayAnnotation("n1", EventCategory.BASS, "3", "schema-a", "Prinner"),
        OverlayAnnotation("n3", EventCategory.MELODY, "4", "schema-b", "Romanesca"),
        OverlayAnnotation("n2", EventCategory.FIGURES, "6", "pending", "Prinner (pending)", temporary=True),
    ]


def circles(markup: str) -> list:
    return list(parse_svg(markup).iter(f"{{{SVG_NS}}}circle"))


def test_compose_is_idempotent(page, annotations):
    once = compose(page.markup, "n2", annotations, page.bounds)

    assert compose(page.markup, "n2", annotations, page.bounds) == once
    assert compose(once, "n2", annotations, page.bounds) == once


def test_compose_without_inputs_restores_page(page, annotations):
    decorated = compose(page.markup, "n1", annotations, page.bounds)

    assert compose(decorated, None, [], page.bounds) == page.markup


def test_highlight_moves(page):
    first = compose(page.markup, "n1", [], page.bounds)
    second = parse_svg(compose(first, "n3", [], page.bounds))

    selected = [e.get("id") for e in second.iter() if isinstance(e.tag, str) and has_class(e, "selected")]
    assert selected == ["n3"]


def test_markers_sit_above_and_below_by_category(page, annotations):
    result = circles(compose(page.markup, None, annotations[:2], page.bounds))

    # n1 is centered at (110, 110) and 20 high; radius 90, gap 40
    melody, bass = result
    assert (melody.get("cx"), melody.get("cy")) == ("110", "-30")
    assert (bass.get("cx"), bass.get("cy")) == ("110", "250")
    assert melody.get("fill") == "#000000"
    assert bass.get("fill") == "#ffffff"


def test_markers_inside_page_content(page, annotations):
    root = parse_svg(compose(page.markup, None, annotations, page.bounds))
    overlay = [e for e in root.iter(f"{{{SVG_NS}}}g") if has_class(e, "galant-overlay")]

    assert len(overlay) == 1
    assert has_class(overlay[0].getparent(), "page-margin")


def test_groups_have_one_caption_each(page, annotations):
    root = parse_svg(compose(page.markup, None, annotations, page.bounds))
    groups = [e for e in root.iter(f"{{{SVG_NS}}}g") if has_class(e, "galant-group")]

    assert [g.get("data-group") for g in groups] == ["schema-a", "schema-b", "pending"]
    captions = [
        t.text for t in root.iter(f"{{{SVG_NS}}}text") if has_class(t, "galant-caption")
    ]
    assert captions == ["Prinner", "Romanesca", "Prinner (pending)"]


def test_caption_centered_under_group(page, annotations):
    root = parse_svg(compose(page.markup, None, annotations[:2], page.bounds))
    caption = next(t for t in root.iter(f"{{{SVG_NS}}}text") if has_class(t, "galant-caption"))

    # Lowest marker is the bass circle at y=250 with radius 90
    assert caption.get("x") == "110"
    assert caption.get("y") == "460"


def test_pending_markers_are_dashed(page, annotations):
    result = circles(compose(page.markup, None, annotations, page.bounds))

    dashed = [c for c in result if c.get("stroke-dasharray")]
    assert len(dashed) == 1
    assert dashed[0].get("cx") == "310"


def test_missing_anchor_is_skipped(page, annotations):
    stale = OverlayAnnotation("gone", EventCategory.MELODY, "1", "schema-a", "Prinner")

    result = compose(page.markup, None, [stale, *annotations], page.bounds)

    assert len(circles(result)) == len(annotations)


def test_group_without_anchors_is_dropped(page):
    stale = OverlayAnnotation("gone", EventCategory.MELODY, "1", "schema-a", "Prinner")

    assert compose(page.markup, None, [stale], page.bounds) == page.markup
