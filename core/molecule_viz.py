"""ASE conversions for model-generated structures (summary, XYZ export)."""

from typing import Any, Dict, Optional

from ase import Atoms
from ase.data import chemical_symbols

from core.models import MoleculeStructure

_KNOWN_SYMBOLS = {symbol.upper(): symbol for symbol in chemical_symbols[1:]}


def _normalize_symbol(element: str) -> Optional[str]:
    return _KNOWN_SYMBOLS.get((element or "").strip().upper())


def structure_to_atoms(structure: MoleculeStructure) -> Atoms:
    """Build an ``Atoms`` object from the 3D atoms, skipping unknown elements."""
    symbols, positions = [], []
    for atom in structure.atoms:
        symbol = _normalize_symbol(atom.element)
        if symbol is None:
            continue
        symbols.append(symbol)
        positions.append((atom.x, atom.y, atom.z))
    if not symbols:
        return Atoms()
    return Atoms(symbols=symbols, positions=positions)


def atoms_to_xyz(atoms: Atoms, comment: str = "") -> str:
    xyz_lines = [str(len(atoms)), comment.replace("\n", " ")]
    for atom in atoms:
        xyz_lines.append(f"{atom.symbol} {atom.position[0]:.6f} {atom.position[1]:.6f} {atom.position[2]:.6f}")
    return "\n".join(xyz_lines)


def summarize_structure(structure: Optional[MoleculeStructure]) -> Dict[str, Any]:
    atoms = structure_to_atoms(structure) if structure is not None else Atoms()
    if len(atoms) == 0:
        return {"formula": "—", "num_atoms": 0, "num_bonds": 0, "mass_amu": None}
    return {
        "formula": atoms.get_chemical_formula(),
        "num_atoms": int(len(atoms)),
        "num_bonds": len(structure.bonds),
        "mass_amu": round(float(atoms.get_masses().sum()), 3),
    }
