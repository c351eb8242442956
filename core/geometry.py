"""Centering and scaling of model-generated 3D coordinates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from core.models import Atom2D, Atom3D

TARGET_RADIUS = 5.5
PROJECTION_MAGNIFICATION = 20.0


@dataclass(frozen=True)
class NormalizedGeometry:
    elements: Tuple[str, ...]
    ids: Tuple[int, ...]
    positions: np.ndarray
    centroid: np.ndarray
    scale: float

    def __len__(self) -> int:
        return len(self.elements)


def atom_ids(atoms: Sequence[Atom3D]) -> List[int]:
    """Explicit ids where the model provided them, list positions otherwise."""
    return [atom.id if atom.id is not None else idx for idx, atom in enumerate(atoms)]


def atoms_to_array(atoms: Sequence[Atom3D]) -> np.ndarray:
    if not atoms:
        return np.zeros((0, 3), dtype=float)
    return np.array([[atom.x, atom.y, atom.z] for atom in atoms], dtype=float)


def normalize_atoms(atoms: Sequence[Atom3D], target_radius: float = TARGET_RADIUS) -> NormalizedGeometry:
    coords = atoms_to_array(atoms)
    if coords.shape[0] == 0:
        return NormalizedGeometry((), (), coords, np.zeros(3), 1.0)

    centroid = coords.mean(axis=0)
    centered = coords - centroid
    max_dist = float(np.linalg.norm(centered, axis=1).max())
    scale = target_radius / max_dist if max_dist > 0 else 1.0

    return NormalizedGeometry(
        elements=tuple(atom.element for atom in atoms),
        ids=tuple(atom_ids(atoms)),
        positions=centered * scale,
        centroid=centroid,
        scale=scale,
    )


def project_atoms_xy(
    atoms: Sequence[Atom3D], magnification: float = PROJECTION_MAGNIFICATION
) -> Tuple[Atom2D, ...]:
    return tuple(
        Atom2D(id=atom_id, element=atom.element, x=atom.x * magnification, y=atom.y * magnification)
        for atom_id, atom in zip(atom_ids(atoms), atoms)
    )
