import pytest

from core.viewport import IDENTITY, MAX_SCALE, MIN_SCALE, ViewportController, ViewportTransform


def test_transform_clamps_scale() -> None:
    """Test that out-of-range scales are clamped on construction."""
    assert ViewportTransform(k=10.0).k == MAX_SCALE
    assert ViewportTransform(k=0.1).k == MIN_SCALE


def test_zoom_buttons() -> None:
    """Test zooming in and out by the fixed step."""
    controller = ViewportController()
    assert controller.zoom_in().k == pytest.approx(1.2)
    assert controller.zoom_out().k == pytest.approx(1.0)


def test_zoom_is_clamped() -> None:
    """Test that repeated zooming stops at the limits."""
    controller = ViewportController()
    for _ in range(20):
        controller.zoom_in()
    assert controller.transform.k == MAX_SCALE
    for _ in range(30):
        controller.zoom_out()
    assert controller.transform.k == MIN_SCALE


def test_wheel() -> None:
    """Test wheel zoom direction and clamping."""
    controller = ViewportController()
    assert controller.wheel(-100.0).k == pytest.approx(1.1)
    assert controller.wheel(10000.0).k == MIN_SCALE


def test_drag_pans_by_pointer_delta() -> None:
    """Test panning with a pointer drag."""
    controller = ViewportController()
    controller.drag_start(10.0, 10.0)
    assert controller.dragging
    moved = controller.drag_move(30.0, 25.0)
    assert (moved.x, moved.y) == (20.0, 15.0)
    controller.drag_end()
    assert not controller.dragging
    assert controller.drag_move(100.0, 100.0) == moved


def test_second_drag_continues_from_offset() -> None:
    """Test that a new drag starts from the current translation."""
    controller = ViewportController(ViewportTransform(x=20.0, y=15.0))
    controller.drag_start(0.0, 0.0)
    moved = controller.drag_move(5.0, 5.0)
    assert (moved.x, moved.y) == (25.0, 20.0)


def test_move_without_drag_is_ignored() -> None:
    """Test pointer movement with no drag in progress."""
    controller = ViewportController()
    assert controller.drag_move(50.0, 50.0) == IDENTITY


def test_pan_by_keeps_scale() -> None:
    """Test button panning."""
    controller = ViewportController()
    controller.zoom_in()
    panned = controller.pan_by(24.0, -24.0)
    assert (panned.x, panned.y) == (24.0, -24.0)
    assert panned.k == pytest.approx(1.2)
    assert not controller.dragging


def test_reset() -> None:
    """Test reset to the identity transform."""
    controller = ViewportController()
    controller.zoom_in()
    controller.drag_start(0.0, 0.0)
    assert controller.reset() == IDENTITY
    assert not controller.dragging
