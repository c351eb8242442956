"""Selection of the 2D layout shown in the structure diagram."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from core.geometry import project_atoms_xy
from core.models import Atom2D, Bond, MoleculeStructure, Structure2D


class LayoutSource(str, Enum):
    PUBCHEM = "pubchem"
    MODEL = "model"
    PROJECTION = "projection"
    NONE = "none"


# PubChem coordinates are about an order of magnitude tighter than the
# model's layouts, so padding and stroke weights are scaled per source.
SOURCE_PADDING = {
    LayoutSource.PUBCHEM: 1.5,
    LayoutSource.MODEL: 20.0,
    LayoutSource.PROJECTION: 20.0,
}
SOURCE_DENSITY = {
    LayoutSource.PUBCHEM: 0.1,
    LayoutSource.MODEL: 5.0,
    LayoutSource.PROJECTION: 5.0,
}


@dataclass(frozen=True)
class ViewBox:
    x: float
    y: float
    width: float
    height: float

    def as_attribute(self) -> str:
        return f"{self.x:g} {self.y:g} {self.width:g} {self.height:g}"


EMPTY_VIEW_BOX = ViewBox(0.0, 0.0, 100.0, 100.0)


@dataclass(frozen=True)
class ResolvedLayout:
    source: LayoutSource
    atoms: Tuple[Atom2D, ...]
    bonds: Tuple[Bond, ...]
    view_box: ViewBox

    @property
    def is_fallback(self) -> bool:
        return self.source is LayoutSource.PROJECTION

    @property
    def is_official(self) -> bool:
        return self.source is LayoutSource.PUBCHEM

    @property
    def is_empty(self) -> bool:
        return not self.atoms

    @property
    def density(self) -> float:
        return SOURCE_DENSITY.get(self.source, SOURCE_DENSITY[LayoutSource.MODEL])


EMPTY_LAYOUT = ResolvedLayout(LayoutSource.NONE, (), (), EMPTY_VIEW_BOX)


def compute_view_box(atoms: Tuple[Atom2D, ...], padding: float) -> ViewBox:
    if not atoms:
        return EMPTY_VIEW_BOX
    xs = [atom.x for atom in atoms]
    ys = [atom.y for atom in atoms]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)
    return ViewBox(
        x=min_x - padding,
        y=min_y - padding,
        width=(max_x - min_x) + padding * 2,
        height=(max_y - min_y) + padding * 2,
    )


Candidate = Tuple[LayoutSource, Callable[[], Optional[Structure2D]]]


def _candidates(structure: Optional[MoleculeStructure], fetched: Optional[Structure2D]) -> List[Candidate]:
    def from_projection() -> Optional[Structure2D]:
        if structure is None or not structure.atoms:
            return None
        return Structure2D(atoms=project_atoms_xy(structure.atoms), bonds=structure.bonds)

    return [
        (LayoutSource.PUBCHEM, lambda: fetched),
        (LayoutSource.MODEL, lambda: structure.structure_2d if structure is not None else None),
        (LayoutSource.PROJECTION, from_projection),
    ]


def resolve_layout(
    structure: Optional[MoleculeStructure], fetched: Optional[Structure2D] = None
) -> ResolvedLayout:
    """Pick exactly one 2D source, highest priority first.

    Order: fetched PubChem layout, then the model's own 2D layout, then an
    XY projection of the 3D atoms. An empty candidate never wins.
    """
    for source, produce in _candidates(structure, fetched):
        candidate = produce()
        if candidate is None or candidate.is_empty():
            continue
        return ResolvedLayout(
            source=source,
            atoms=tuple(candidate.atoms),
            bonds=tuple(candidate.bonds),
            view_box=compute_view_box(tuple(candidate.atoms), SOURCE_PADDING[source]),
        )
    return EMPTY_LAYOUT
