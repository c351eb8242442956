"""Pan/zoom state for the 2D structure diagram."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

MIN_SCALE = 0.5
MAX_SCALE = 5.0
ZOOM_STEP = 1.2
WHEEL_SENSITIVITY = 0.001


def clamp_scale(k: float) -> float:
    return min(max(MIN_SCALE, k), MAX_SCALE)


@dataclass(frozen=True)
class ViewportTransform:
    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "k", clamp_scale(float(self.k)))


IDENTITY = ViewportTransform()


class ViewportController:
    """Applies pointer, wheel and button events to a ``ViewportTransform``.

    Each method commits a new immutable transform; the renderer reads
    ``transform`` and ``dragging`` on the next pass.
    """

    def __init__(self, transform: ViewportTransform = IDENTITY) -> None:
        self.transform = transform
        self.dragging = False
        self.pan_origin: Optional[Tuple[float, float]] = None

    def zoom_in(self) -> ViewportTransform:
        self.transform = replace(self.transform, k=clamp_scale(self.transform.k * ZOOM_STEP))
        return self.transform

    def zoom_out(self) -> ViewportTransform:
        self.transform = replace(self.transform, k=clamp_scale(self.transform.k / ZOOM_STEP))
        return self.transform

    def wheel(self, delta_y: float) -> ViewportTransform:
        scale_amount = -delta_y * WHEEL_SENSITIVITY
        self.transform = replace(self.transform, k=clamp_scale(self.transform.k + scale_amount))
        return self.transform

    def drag_start(self, pointer_x: float, pointer_y: float) -> None:
        self.dragging = True
        self.pan_origin = (pointer_x - self.transform.x, pointer_y - self.transform.y)

    def drag_move(self, pointer_x: float, pointer_y: float) -> ViewportTransform:
        if not self.dragging or self.pan_origin is None:
            return self.transform
        origin_x, origin_y = self.pan_origin
        self.transform = replace(self.transform, x=pointer_x - origin_x, y=pointer_y - origin_y)
        return self.transform

    def drag_end(self) -> None:
        self.dragging = False

    def pan_by(self, dx: float, dy: float) -> ViewportTransform:
        self.drag_start(0.0, 0.0)
        self.drag_move(dx, dy)
        self.drag_end()
        return self.transform

    def reset(self) -> ViewportTransform:
        self.transform = IDENTITY
        self.dragging = False
        self.pan_origin = None
        return self.transform
