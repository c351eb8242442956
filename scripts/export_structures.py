from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd
from ase import Atoms
from ase.db import connect
from tqdm import tqdm

from core.pubchem import DEFAULT_BASE_URL, fetch_pubchem_2d
from core.models import Structure2D


def layout_to_atoms(structure: Structure2D) -> Atoms:
    """Flat ``Atoms`` (z = 0) from a PubChem 2D layout, skipping unknown elements."""
    symbols, positions = [], []
    for atom in structure.atoms:
        if atom.element == "X":
            continue
        symbols.append(atom.element)
        positions.append((atom.x, atom.y, 0.0))
    return Atoms(symbols=symbols, positions=positions)


def export_structures(
    csv_path: str,
    db_path: str,
    *,
    overwrite: bool,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = 10.0,
) -> int:
    """
    Looks up every molecule named in the CSV's ``name`` column on PubChem and
    writes its 2D layout into an ASE database. Returns the number written.
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        print(f"\nError: CSV file not found at '{csv_path}'", file=sys.stderr)
        sys.exit(1)

    db_file = Path(db_path)
    if db_file.exists():
        if overwrite:
            print(f"Database file '{db_path}' already exists. Deleting it as requested.")
            db_file.unlink()
        else:
            print(f"\nError: Database file '{db_path}' already exists.", file=sys.stderr)
            print("Use the --overwrite flag to replace it.", file=sys.stderr)
            sys.exit(1)

    df = pd.read_csv(csv_file)
    if "name" not in df.columns:
        print("\nError: CSV must contain a 'name' column.", file=sys.stderr)
        sys.exit(1)

    names = [str(n).strip() for n in df["name"].dropna() if str(n).strip()]
    written = 0
    with connect(db_path) as db:
        for name in tqdm(names, desc="Fetching layouts", ncols=80):
            structure = fetch_pubchem_2d(name, base_url=base_url, timeout=timeout)
            if structure is None or structure.is_empty():
                print(f"Warning: No PubChem layout for '{name}'. Skipping.")
                continue
            atoms = layout_to_atoms(structure)
            if len(atoms) == 0:
                continue
            db.write(atoms, key_value_pairs={"name": name, "source": "pubchem"})
            written += 1

    print(f"\nTotal structures written: {written} (out of {len(names)} names)")
    return written


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Fetch PubChem 2D layouts for a list of molecule names into an ASE database.",
    )
    parser.add_argument("csv_path", type=str, help="CSV file with a 'name' column.")
    parser.add_argument("db_path", type=str, help="Output ASE database file (e.g. 'data/layouts.db').")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="PubChem PUG REST base URL.")
    parser.add_argument("--timeout", type=float, default=10.0, help="Per-request timeout in seconds.")
    parser.add_argument("--overwrite", action="store_true", help="Replace the database if it exists.")
    args = parser.parse_args()

    export_structures(
        args.csv_path, args.db_path, overwrite=args.overwrite, base_url=args.base_url, timeout=args.timeout
    )


if __name__ == "__main__":
    main()
