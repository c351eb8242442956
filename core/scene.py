"""3D scene graph (spheres and cylinders) for a model-generated structure."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from core.geometry import normalize_atoms
from core.models import MoleculeStructure

# CPK colours
ATOM_COLORS: Dict[str, str] = {
    "H": "#FFFFFF", "C": "#909090", "N": "#3050F8", "O": "#FF0D0D",
    "F": "#90E050", "Cl": "#1FF01F", "Br": "#A62929", "I": "#940094",
    "P": "#FF8000", "S": "#FFFF30", "B": "#FFB5B5",
}
DEFAULT_ATOM_COLOR = "#DA70D6"

HYDROGEN_RADIUS = 0.2
ATOM_RADIUS = 0.35
BOND_RADIUS = 0.1
BOND_COLOR = "#64748b"


def element_color(element: str) -> str:
    symbol = (element or "").strip()
    return ATOM_COLORS.get(symbol.capitalize(), DEFAULT_ATOM_COLOR)


@dataclass(frozen=True)
class Sphere:
    element: str
    center: np.ndarray
    radius: float
    color: str


@dataclass(frozen=True)
class Cylinder:
    start: np.ndarray
    end: np.ndarray
    radius: float = BOND_RADIUS
    color: str = BOND_COLOR

    @property
    def midpoint(self) -> np.ndarray:
        return (self.start + self.end) * 0.5

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.end - self.start))

    @property
    def direction(self) -> np.ndarray:
        length = self.length
        if length == 0:
            return np.array([0.0, 1.0, 0.0])
        return (self.end - self.start) / length


@dataclass(frozen=True)
class Scene:
    spheres: Tuple[Sphere, ...]
    cylinders: Tuple[Cylinder, ...]

    @property
    def is_empty(self) -> bool:
        return not self.spheres


def build_scene(structure: Optional[MoleculeStructure]) -> Scene:
    if structure is None or not structure.atoms:
        return Scene((), ())

    geometry = normalize_atoms(structure.atoms)
    spheres = tuple(
        Sphere(
            element=element,
            center=position,
            radius=HYDROGEN_RADIUS if element.strip().upper() == "H" else ATOM_RADIUS,
            color=element_color(element),
        )
        for element, position in zip(geometry.elements, geometry.positions)
    )
    index_of = {atom_id: idx for idx, atom_id in enumerate(geometry.ids)}

    cylinders: List[Cylinder] = []
    for bond in structure.bonds:
        a, b = index_of.get(bond.start), index_of.get(bond.end)
        if a is None or b is None:
            continue
        cylinders.append(Cylinder(start=geometry.positions[a], end=geometry.positions[b]))
    return Scene(spheres, tuple(cylinders))


def _xyz(point: np.ndarray) -> Dict[str, float]:
    return {"x": float(point[0]), "y": float(point[1]), "z": float(point[2])}


def scene_payload(scene: Scene) -> Dict[str, List[Dict[str, Any]]]:
    """Shape specs for 3Dmol's ``addSphere``/``addCylinder``.

    Zero-length cylinders are dropped since they have no axis to draw along.
    """
    spheres = [
        {"center": _xyz(s.center), "radius": s.radius, "color": s.color, "label": s.element}
        for s in scene.spheres
    ]
    cylinders = [
        {
            "start": _xyz(c.start),
            "end": _xyz(c.end),
            "radius": c.radius,
            "color": c.color,
            "fromCap": 2,
            "toCap": 2,
        }
        for c in scene.cylinders
        if c.length > 0
    ]
    return {"spheres": spheres, "cylinders": cylinders}
