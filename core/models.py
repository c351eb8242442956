"""Structure and analysis records returned by the model."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class AnalysisType(str, Enum):
    IMAGE = "IMAGE"
    TEXT = "TEXT"
    COMPARISON = "COMPARISON"
    REPORT = "REPORT"


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_int(value: Any) -> Optional[int]:
    number = _as_float(value)
    return None if number is None else int(number)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


@dataclass(frozen=True)
class Atom3D:
    element: str
    x: float
    y: float
    z: float
    id: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["Atom3D"]:
        if not isinstance(payload, dict):
            return None
        coords = [_as_float(payload.get(axis)) for axis in ("x", "y", "z")]
        if any(c is None for c in coords):
            return None
        return cls(
            element=str(payload.get("element") or "X"),
            x=coords[0],
            y=coords[1],
            z=coords[2],
            id=_as_int(payload.get("id")),
        )


@dataclass(frozen=True)
class Atom2D:
    id: int
    element: str
    x: float
    y: float

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["Atom2D"]:
        if not isinstance(payload, dict):
            return None
        atom_id = _as_int(payload.get("id"))
        x, y = _as_float(payload.get("x")), _as_float(payload.get("y"))
        if atom_id is None or x is None or y is None:
            return None
        return cls(id=atom_id, element=str(payload.get("element") or "X"), x=x, y=y)


@dataclass(frozen=True)
class Bond:
    """Connection between two atom ids; order 4 marks an aromatic bond."""

    start: int
    end: int
    order: int = 1

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["Bond"]:
        if not isinstance(payload, dict):
            return None
        start, end = _as_int(payload.get("from")), _as_int(payload.get("to"))
        if start is None or end is None:
            return None
        order = _as_int(payload.get("order"))
        return cls(start=start, end=end, order=order if order is not None else 1)

    def to_dict(self) -> Dict[str, int]:
        return {"from": self.start, "to": self.end, "order": self.order}


def _parse_items(raw: Any, parser) -> Tuple[Any, ...]:
    parsed = (parser(item) for item in _as_list(raw))
    return tuple(item for item in parsed if item is not None)


@dataclass(frozen=True)
class Structure2D:
    atoms: Tuple[Atom2D, ...] = ()
    bonds: Tuple[Bond, ...] = ()

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["Structure2D"]:
        if not isinstance(payload, dict):
            return None
        return cls(
            atoms=_parse_items(payload.get("atoms"), Atom2D.from_dict),
            bonds=_parse_items(payload.get("bonds"), Bond.from_dict),
        )

    def is_empty(self) -> bool:
        return len(self.atoms) == 0


@dataclass(frozen=True)
class MoleculeStructure:
    smiles: str = ""
    inchi: Optional[str] = None
    verification_note: Optional[str] = None
    atoms: Tuple[Atom3D, ...] = ()
    bonds: Tuple[Bond, ...] = ()
    structure_2d: Optional[Structure2D] = None

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["MoleculeStructure"]:
        """Build a structure from the model's camelCase JSON.

        Malformed atoms and bonds are dropped rather than rejected, so a
        partially valid response still renders whatever it does contain.
        """
        if not isinstance(payload, dict):
            return None
        return cls(
            smiles=str(payload.get("smiles") or ""),
            inchi=payload.get("inchi") or None,
            verification_note=payload.get("verificationNote") or None,
            atoms=_parse_items(payload.get("atoms"), Atom3D.from_dict),
            bonds=_parse_items(payload.get("bonds"), Bond.from_dict),
            structure_2d=Structure2D.from_dict(payload.get("structure2D")),
        )


@dataclass(frozen=True)
class AnalysisResult:
    id: str
    type: AnalysisType
    timestamp: float
    title: str
    data: Dict[str, Any] = field(default_factory=dict)
    domain_tag: Optional[str] = None

    @property
    def domain(self) -> str:
        return self.data.get("domain") or "General Science"


def new_result(analysis_type: AnalysisType, title: str, data: Dict[str, Any]) -> AnalysisResult:
    now = time.time()
    return AnalysisResult(
        id=str(int(now * 1000)),
        type=analysis_type,
        timestamp=now,
        title=title,
        data=data,
        domain_tag=data.get("domain") or None,
    )
