try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from activity_cards.cards.layout import (
    CanvasSize,
    CardElement,
    CardLayout,
    CardLayoutError,
    ElementBox,
    add_stat,
    box_for_anchor,
    default_layout,
    move_element,
    remove_element,
    set_element_size,
    set_font,
    set_gradient,
    snap_position,
    validate_layout,
)
from activity_cards.models import Activity

CANVAS = CanvasSize(360)  # 360 x 640 CSS pixels, base size 36


def _layout(*elements: CardElement, show_grid: bool = False) -> CardLayout:
    return CardLayout(elements=list(elements), show_grid=show_grid)


def test_canvas_geometry() -> None:
    assert CANVAS.height == 640
    assert CANVAS.base_size == 36
    assert CANVAS.buffer_size(2) == (720, 1280)
    assert CanvasSize(300).buffer_size(1.5) == (450, 800)


def test_default_layout_positions(activity: Activity) -> None:
    layout = default_layout(activity)
    by_id = {element.id: element for element in layout.elements}

    assert list(by_id) == [
        "title",
        "distance",
        "distance-label",
        "time",
        "time-label",
        "date",
    ]
    assert by_id["title"].y == pytest.approx(0.06)
    assert by_id["distance"].y == pytest.approx(0.85)
    assert by_id["distance-label"].y == pytest.approx(0.895)
    assert by_id["time"].align == "right"
    assert by_id["time"].x == pytest.approx(0.9)
    assert by_id["date"].y == pytest.approx(0.92)
    assert validate_layout(layout) is layout


def test_default_layout_drops_empty_title(activity_payload: dict) -> None:
    untitled = Activity.model_validate(dict(activity_payload, name=""))

    assert "title" not in {element.id for element in default_layout(untitled).elements}


def test_box_for_anchor_alignment() -> None:
    assert box_for_anchor(100, 50, 40, 10, "left") == ElementBox(100, 45, 140, 55)
    assert box_for_anchor(100, 50, 40, 10, "center") == ElementBox(80, 45, 120, 55)
    assert box_for_anchor(100, 50, 40, 10, "right") == ElementBox(60, 45, 100, 55)


def test_snap_to_canvas_centre() -> None:
    layout = _layout(CardElement(id="a", stat_id="distance", x=0.5, y=0.5, align="center"))
    boxes = {"a": ElementBox(0, 0, 60, 20)}

    result = snap_position(layout, "a", 184, 325, CANVAS, boxes)

    assert result.x == pytest.approx(180)
    assert result.y == pytest.approx(320)
    assert {(g.orientation, g.kind) for g in result.guides} == {
        ("vertical", "center"),
        ("horizontal", "center"),
    }


def test_snap_to_margin_and_other_element_edges() -> None:
    layout = _layout(
        CardElement(id="a", stat_id="distance", x=0.1, y=0.5),
        CardElement(id="b", stat_id="time", x=0.5, y=0.2),
    )
    boxes = {
        "a": ElementBox(36, 310, 116, 330),
        "b": ElementBox(200, 120, 260, 140),
    }

    # Left edge 3px from the margin; bottom edge 4px above b's top edge.
    result = snap_position(layout, "a", 39, 106, CANVAS, boxes)

    assert result.x == pytest.approx(36)
    assert result.y == pytest.approx(110)
    kinds = {guide.orientation: guide for guide in result.guides}
    assert kinds["vertical"].kind == "margin"
    assert kinds["horizontal"].kind == "element"
    assert kinds["horizontal"].source_id == "b"


def test_no_snap_beyond_threshold() -> None:
    layout = _layout(CardElement(id="a", stat_id="distance", x=0.5, y=0.5))
    boxes = {"a": ElementBox(0, 0, 10, 10)}

    result = snap_position(layout, "a", 70, 250, CANVAS, boxes)

    assert (result.x, result.y) == (70, 250)
    assert result.guides == ()


def test_snap_to_grid_only_when_enabled() -> None:
    element = CardElement(id="a", stat_id="distance", x=0.5, y=0.5)
    boxes = {"a": ElementBox(0, 0, 10, 10)}

    without_grid = snap_position(_layout(element), "a", 62, 245, CANVAS, boxes)
    with_grid = snap_position(_layout(element, show_grid=True), "a", 62, 245, CANVAS, boxes)

    assert without_grid.guides == ()
    # Grid step is 360 / 12 = 30px; the left edge snaps to 60.
    assert with_grid.x == pytest.approx(60)
    assert any(guide.kind == "grid" for guide in with_grid.guides)


def test_positions_are_clamped_inside_canvas() -> None:
    layout = _layout(CardElement(id="a", stat_id="distance", x=0.5, y=0.5, align="right"))
    boxes = {"a": ElementBox(0, 0, 100, 20)}

    result = snap_position(layout, "a", 20, 700, CANVAS, boxes, threshold=0)

    # Right-aligned anchor sits at the box's right edge; the box must fit.
    assert result.x == pytest.approx(100)
    assert result.y == pytest.approx(630)


def test_move_element_updates_fractions(activity: Activity) -> None:
    layout = default_layout(activity)
    boxes = {"title": ElementBox(36, 30, 200, 47)}

    moved, guides = move_element(layout, "title", 0.3, 0.3, CANVAS, boxes, snap=False)

    title = moved.element("title")
    assert title.x == pytest.approx(0.3)
    assert title.y == pytest.approx(0.3)
    assert guides == ()
    assert layout.element("title").x == pytest.approx(0.1)


def test_move_unknown_element_raises(activity: Activity) -> None:
    with pytest.raises(CardLayoutError):
        move_element(default_layout(activity), "missing", 0.5, 0.5, CANVAS, {})


def test_layout_edits(activity: Activity) -> None:
    layout = default_layout(activity)

    layout = add_stat(layout, "avg_hr", activity)
    layout = add_stat(layout, "distance", activity)
    ids = [element.id for element in layout.elements]
    assert ids[-2:] == ["avg_hr", "distance-2"]

    layout = set_font(layout, "roboto")
    layout = set_gradient(layout, "sunset")
    layout = set_element_size(layout, "avg_hr", "xl")
    layout = remove_element(layout, "date")

    assert layout.font_id == "roboto"
    assert layout.gradient_id == "sunset"
    assert layout.element("avg_hr").size_id == "xl"
    assert "date" not in {element.id for element in layout.elements}


@pytest.mark.parametrize(
    "edit",
    [
        lambda layout, activity: add_stat(layout, "avg_power", activity),
        lambda layout, activity: add_stat(layout, "vo2max", activity),
        lambda layout, activity: set_font(layout, "comic-sans"),
        lambda layout, activity: set_gradient(layout, "rainbow"),
        lambda layout, activity: set_element_size(layout, "title", "xxl"),
        lambda layout, activity: remove_element(layout, "missing"),
    ],
)
def test_invalid_edits_raise(activity: Activity, edit) -> None:
    with pytest.raises(CardLayoutError):
        edit(default_layout(activity), activity)


def test_validate_layout_rejects_duplicates() -> None:
    element = CardElement(id="a", stat_id="distance", x=0.5, y=0.5)

    with pytest.raises(CardLayoutError):
        validate_layout(_layout(element, element))


@pytest.mark.parametrize("color", ["#FFFFFFCC", "#fc4c02", "white", "rgb(10, 20, 30)"])
def test_validate_layout_accepts_css_colours(color: str) -> None:
    element = CardElement(id="a", stat_id="distance", x=0.5, y=0.5, color=color)

    assert validate_layout(_layout(element)).elements[0].color == color


def test_validate_layout_rejects_unknown_colour() -> None:
    element = CardElement(id="a", stat_id="distance", x=0.5, y=0.5, color="not-a-colour")

    with pytest.raises(CardLayoutError, match="not-a-colour"):
        validate_layout(_layout(element))
