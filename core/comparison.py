"""Validate-then-compare workflow for the comparison engine."""

from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

from core.models import AnalysisResult, AnalysisType, new_result

logger = logging.getLogger(__name__)


class InvalidComparisonInput(ValueError):
    def __init__(self, message: str, mol1_valid: bool, mol2_valid: bool) -> None:
        super().__init__(message)
        self.mol1_valid = mol1_valid
        self.mol2_valid = mol2_valid


def validation_message(mol1: str, mol2: str, mol1_valid: bool, mol2_valid: bool) -> str:
    if not mol1_valid and not mol2_valid:
        return "Both inputs are not recognized as valid chemical entities."
    culprit = mol1 if not mol1_valid else mol2
    return f'"{culprit}" is not a recognized molecule or valid structure format.'


def run_comparison(service: Any, mol1: str, mol2: str) -> Tuple[Dict[str, Any], AnalysisResult]:
    """Validate both inputs, then run the comparison.

    The comparison request is only issued when both inputs pass validation;
    otherwise ``InvalidComparisonInput`` names the failing input.
    """
    mol1, mol2 = mol1.strip(), mol2.strip()
    if not mol1 or not mol2:
        raise InvalidComparisonInput("Enter two molecules to compare.", bool(mol1), bool(mol2))

    validation = service.validate_comparison_inputs(mol1, mol2)
    mol1_valid = bool(validation.get("mol1Valid"))
    mol2_valid = bool(validation.get("mol2Valid"))
    if not (mol1_valid and mol2_valid):
        message = validation_message(mol1, mol2, mol1_valid, mol2_valid)
        logger.info("Comparison input rejected: %s", message)
        raise InvalidComparisonInput(message, mol1_valid, mol2_valid)

    data = service.compare_molecules(mol1, mol2)
    result = new_result(
        AnalysisType.COMPARISON,
        f"Comparison: {data.get('molecule1') or mol1} vs {data.get('molecule2') or mol2}",
        data,
    )
    return data, result
