"""Stroke primitives for the 2D structure diagram and their SVG form."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Dict, List, Optional, Tuple

from core.layout import ResolvedLayout, ViewBox
from core.scene import element_color
from core.viewport import ViewportTransform

BOND_COLOR = "#94a3b8"
BACKGROUND_COLOR = "#0B0F19"

SINGLE, DOUBLE, TRIPLE, AROMATIC = 1, 2, 3, 4

Point = Tuple[float, float]


@dataclass(frozen=True)
class Stroke:
    start: Point
    end: Point
    width: float
    color: str = BOND_COLOR
    opacity: float = 1.0
    dash: Optional[Tuple[float, float]] = None


@dataclass(frozen=True)
class AtomGlyph:
    element: str
    position: Point
    font_size: float
    radius: float
    color: str


@dataclass(frozen=True)
class Drawing:
    strokes: Tuple[Stroke, ...]
    glyphs: Tuple[AtomGlyph, ...]


def stroke_scale(view_width: float, k: float) -> float:
    return max(0.3, view_width / 100.0) / k


def bond_primitives(
    start: Point, end: Point, order: int, base_width: float, background: str = BACKGROUND_COLOR
) -> List[Stroke]:
    """Strokes for one bond.

    Double and triple bonds are drawn as a wide stroke with narrower
    background-coloured strokes laid over it, which leaves visually separate
    parallel lines. Aromatic bonds pair a dashed stroke with a faded solid one.
    """
    w = base_width
    if order == DOUBLE:
        return [
            Stroke(start, end, w * 2.5),
            Stroke(start, end, w * 0.8, color=background),
        ]
    if order == TRIPLE:
        return [
            Stroke(start, end, w * 3.5),
            Stroke(start, end, w * 1.5, color=background),
            Stroke(start, end, w * 0.5),
        ]
    if order == AROMATIC:
        return [
            Stroke(start, end, w, dash=(w * 2, w)),
            Stroke(start, end, w, opacity=0.5),
        ]
    return [Stroke(start, end, w)]


def render_layout(layout: ResolvedLayout, k: float = 1.0, background: str = BACKGROUND_COLOR) -> Drawing:
    if layout.is_empty:
        return Drawing((), ())

    scale = stroke_scale(layout.view_box.width, k)
    base_width = 0.6 * scale * layout.density
    positions: Dict[int, Point] = {atom.id: (atom.x, atom.y) for atom in layout.atoms}

    strokes: List[Stroke] = []
    for bond in layout.bonds:
        start, end = positions.get(bond.start), positions.get(bond.end)
        if start is None or end is None:
            continue
        strokes.extend(bond_primitives(start, end, bond.order, base_width, background))

    font_size = (0.4 if layout.is_official else 8.0) * scale * 4
    glyphs = tuple(
        AtomGlyph(
            element=atom.element,
            position=(atom.x, atom.y),
            font_size=font_size,
            radius=font_size * 0.5,
            color=element_color(atom.element),
        )
        for atom in layout.atoms
    )
    return Drawing(tuple(strokes), glyphs)


def _stroke_to_svg(stroke: Stroke) -> str:
    (x1, y1), (x2, y2) = stroke.start, stroke.end
    attrs = [
        f'x1="{x1:g}" y1="{y1:g}" x2="{x2:g}" y2="{y2:g}"',
        f'stroke="{stroke.color}" stroke-width="{stroke.width:g}" stroke-linecap="round"',
    ]
    if stroke.dash is not None:
        attrs.append(f'stroke-dasharray="{stroke.dash[0]:g}, {stroke.dash[1]:g}"')
    if stroke.opacity != 1.0:
        attrs.append(f'opacity="{stroke.opacity:g}"')
    return f"<line {' '.join(attrs)} />"


def _glyph_to_svg(glyph: AtomGlyph, background: str) -> str:
    x, y = glyph.position
    return (
        f'<g><circle cx="{x:g}" cy="{y:g}" r="{glyph.radius:g}" fill="{background}" />'
        f'<text x="{x:g}" y="{y:g}" dy=".35em" text-anchor="middle" font-size="{glyph.font_size:g}" '
        f'fill="{glyph.color}" font-weight="bold" font-family="sans-serif">{escape(glyph.element)}</text></g>'
    )


def drawing_to_svg(
    drawing: Drawing,
    view_box: ViewBox,
    transform: ViewportTransform,
    *,
    dragging: bool = False,
    background: str = BACKGROUND_COLOR,
) -> str:
    transition = "none" if dragging else "transform 0.1s ease-out"
    style = (
        f"transform: translate({transform.x:g}px, {transform.y:g}px) scale({transform.k:g}); "
        f"transition: {transition}; transform-origin: center; width: 100%; height: 100%; overflow: visible;"
    )
    body = "".join(_stroke_to_svg(s) for s in drawing.strokes)
    body += "".join(_glyph_to_svg(g, background) for g in drawing.glyphs)
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="{view_box.as_attribute()}" '
        f'preserveAspectRatio="xMidYMid meet" style="{style}">{body}</svg>'
    )
