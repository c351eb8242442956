import pytest

from core.bonds import (
    AROMATIC,
    BACKGROUND_COLOR,
    DOUBLE,
    SINGLE,
    TRIPLE,
    bond_primitives,
    drawing_to_svg,
    render_layout,
    stroke_scale,
)
from core.layout import resolve_layout
from core.models import Atom2D, Bond, MoleculeStructure, Structure2D
from core.viewport import ViewportTransform
from src.theme_config import THEMES


def _model_layout(bonds):
    structure = MoleculeStructure(
        structure_2d=Structure2D(atoms=(Atom2D(0, "C", 0.0, 0.0), Atom2D(1, "O", 60.0, 0.0)), bonds=tuple(bonds))
    )
    return resolve_layout(structure)


def test_stroke_scale() -> None:
    """Test the stroke scale floor and zoom compensation."""
    assert stroke_scale(100.0, 1.0) == pytest.approx(1.0)
    assert stroke_scale(10.0, 1.0) == pytest.approx(0.3)
    assert stroke_scale(200.0, 2.0) == pytest.approx(1.0)


@pytest.mark.parametrize("order, count", [(SINGLE, 1), (DOUBLE, 2), (TRIPLE, 3), (AROMATIC, 2), (7, 1)])
def test_bond_primitive_counts(order: int, count: int) -> None:
    """Test the number of strokes per bond order."""
    assert len(bond_primitives((0, 0), (1, 0), order, 1.0)) == count


def test_double_bond_gap() -> None:
    """Test that a double bond is a wide stroke with a background gap on top."""
    wide, gap = bond_primitives((0, 0), (1, 0), DOUBLE, 2.0)
    assert wide.width == pytest.approx(5.0)
    assert gap.width == pytest.approx(1.6)
    assert gap.color == BACKGROUND_COLOR


def test_triple_bond_layers() -> None:
    """Test the three layers of a triple bond."""
    outer, gap, core = bond_primitives((0, 0), (1, 0), TRIPLE, 1.0)
    assert (outer.width, gap.width, core.width) == pytest.approx((3.5, 1.5, 0.5))
    assert gap.color == BACKGROUND_COLOR and core.color != BACKGROUND_COLOR


def test_aromatic_bond() -> None:
    """Test the dashed plus faded pair for aromatic bonds."""
    dashed, faded = bond_primitives((0, 0), (1, 0), AROMATIC, 1.0)
    assert dashed.dash == (2.0, 1.0)
    assert faded.opacity == 0.5 and faded.dash is None


def test_render_layout_widths_for_model_layout() -> None:
    """Test stroke and glyph sizing for a model layout."""
    drawing = render_layout(_model_layout([Bond(0, 1, SINGLE)]))
    # view box width 100 -> scale 1, density 5
    assert drawing.strokes[0].width == pytest.approx(3.0)
    assert drawing.glyphs[0].font_size == pytest.approx(32.0)
    assert drawing.glyphs[0].radius == pytest.approx(16.0)


def test_render_layout_zoom_thins_strokes() -> None:
    """Test that zooming in keeps on-screen stroke width constant."""
    drawing = render_layout(_model_layout([Bond(0, 1)]), k=2.0)
    assert drawing.strokes[0].width == pytest.approx(1.5)


def test_render_layout_pubchem_density() -> None:
    """Test the finer sizing applied to PubChem coordinates."""
    fetched = Structure2D(atoms=(Atom2D(1, "C", 0.0, 0.0), Atom2D(2, "C", 7.0, 0.0)), bonds=(Bond(1, 2),))
    drawing = render_layout(resolve_layout(None, fetched))
    assert drawing.strokes[0].width == pytest.approx(0.6 * 0.3 * 0.1)
    assert drawing.glyphs[0].font_size == pytest.approx(0.4 * 0.3 * 4)


def test_render_layout_skips_dangling_bonds() -> None:
    """Test that bonds to unknown atom ids are not drawn."""
    drawing = render_layout(_model_layout([Bond(0, 1, DOUBLE), Bond(0, 9, SINGLE)]))
    assert len(drawing.strokes) == 2
    assert len(drawing.glyphs) == 2


def test_render_empty_layout() -> None:
    """Test the empty drawing."""
    drawing = render_layout(resolve_layout(None))
    assert drawing.strokes == () and drawing.glyphs == ()


def test_svg_transition_follows_drag_state() -> None:
    """Test that dragging disables the transform transition."""
    layout = _model_layout([Bond(0, 1)])
    drawing = render_layout(layout)
    transform = ViewportTransform(k=2.0, x=10.0, y=-5.0)

    idle = drawing_to_svg(drawing, layout.view_box, transform)
    assert "transition: transform 0.1s ease-out" in idle
    assert "translate(10px, -5px) scale(2)" in idle
    assert 'viewBox="-20 -20 100 40"' in idle
    assert idle.count("<line") == 1 and idle.count("<text") == 2

    dragging = drawing_to_svg(drawing, layout.view_box, transform, dragging=True)
    assert "transition: none" in dragging


def test_light_theme_background_reaches_gaps_and_backdrops() -> None:
    """Test that gap strokes and atom backdrops use the panel background."""
    light = THEMES["Light"].background
    layout = _model_layout([Bond(0, 1, DOUBLE)])
    drawing = render_layout(layout, background=light)
    assert drawing.strokes[1].color == light
    assert BACKGROUND_COLOR not in {s.color for s in drawing.strokes}

    svg = drawing_to_svg(drawing, layout.view_box, ViewportTransform(), background=light)
    assert svg.count(f'fill="{light}"') == 2
    assert BACKGROUND_COLOR not in svg


def test_triple_bond_gap_uses_given_background() -> None:
    """Test the triple bond gap colour override."""
    _, gap, _ = bond_primitives((0, 0), (1, 0), TRIPLE, 1.0, background="#FFFFFF")
    assert gap.color == "#FFFFFF"
