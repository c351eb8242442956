"""PubChem 2D layout lookup with last-request-wins state."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

import requests
from ase.data import chemical_symbols

from core.models import Atom2D, Bond, Structure2D

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://pubchem.ncbi.nlm.nih.gov/rest/pug"
UNKNOWN_ELEMENT = "X"


def element_symbol(atomic_number: Any) -> str:
    try:
        number = int(atomic_number)
    except (TypeError, ValueError):
        return UNKNOWN_ELEMENT
    # chemical_symbols[0] is already the "X" dummy element
    if 0 < number < len(chemical_symbols):
        return chemical_symbols[number]
    return UNKNOWN_ELEMENT


def parse_pubchem_record(payload: Dict[str, Any]) -> Optional[Structure2D]:
    """Turn a PUG REST ``record_type=2d`` response into a layout.

    Y coordinates are negated because the drawing surface grows downward.
    Returns None when the record has no usable atoms or coordinates.
    """
    try:
        record = payload["PC_Compounds"][0]
        atoms = record["atoms"]
        conformer = record["coords"][0]["conformers"][0]
        aids, elements = atoms["aid"], atoms["element"]
        xs, ys = conformer["x"], conformer["y"]
        parsed_atoms = tuple(
            Atom2D(id=int(aid), element=element_symbol(elements[i]), x=float(xs[i]), y=-float(ys[i]))
            for i, aid in enumerate(aids)
        )
        bonds = record.get("bonds") or {}
        parsed_bonds = tuple(
            Bond(start=int(start), end=int(bonds["aid2"][i]), order=int(bonds["order"][i]))
            for i, start in enumerate(bonds.get("aid1", []))
        )
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        logger.warning("Malformed PubChem record: %s", exc)
        return None
    if not parsed_atoms:
        return None
    return Structure2D(atoms=parsed_atoms, bonds=parsed_bonds)


def fetch_pubchem_2d(
    name: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = 10.0,
    session: Optional[requests.Session] = None,
) -> Optional[Structure2D]:
    if not name or not name.strip():
        return None
    url = f"{base_url.rstrip('/')}/compound/name/{quote(name.strip(), safe='')}/JSON"
    http = session or requests
    try:
        response = http.get(url, params={"record_type": "2d"}, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.warning("PubChem 2D fetch failed for %r, falling back to AI data: %s", name, exc)
        return None
    if not isinstance(payload, dict):
        logger.warning("Unexpected PubChem payload for %r", name)
        return None
    return parse_pubchem_record(payload)


@dataclass(frozen=True)
class FetchState:
    name: Optional[str]
    structure: Optional[Structure2D]
    loading: bool


class StructureFetcher:
    """Holds the PubChem layout for the molecule currently on display.

    Every ``request`` for a new name starts a background fetch and forgets the
    previous result. Completions are keyed by the name they were issued for;
    one that arrives after the displayed name changed is dropped.
    """

    def __init__(
        self,
        executor: Executor,
        fetch: Callable[[str], Optional[Structure2D]] = fetch_pubchem_2d,
    ) -> None:
        self._executor = executor
        self._fetch = fetch
        self._lock = threading.Lock()
        self._name: Optional[str] = None
        self._structure: Optional[Structure2D] = None
        self._loading = False

    @property
    def current_name(self) -> Optional[str]:
        with self._lock:
            return self._name

    def request(self, name: str) -> None:
        with self._lock:
            if name == self._name:
                return
            self._name = name
            self._structure = None
            self._loading = bool(name)
        if not name:
            return
        logger.debug("Requesting PubChem layout for %r", name)
        future = self._executor.submit(self._fetch, name)
        future.add_done_callback(lambda done, requested=name: self._complete(requested, done))

    def _complete(self, requested: str, future: Future) -> None:
        try:
            structure = future.result()
        except Exception as exc:
            logger.warning("PubChem worker failed for %r: %s", requested, exc)
            structure = None
        with self._lock:
            if requested != self._name:
                logger.debug("Discarding stale PubChem result for %r", requested)
                return
            self._structure = structure
            self._loading = False

    def snapshot(self) -> FetchState:
        with self._lock:
            return FetchState(self._name, self._structure, self._loading)
