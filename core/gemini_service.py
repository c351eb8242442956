"""Gemini calls behind each analysis mode.

Every request carries a fixed JSON response schema. Responses are parsed
tolerantly: a body that is not a JSON object degrades to ``{}`` so the UI can
render placeholders instead of failing.
"""

from __future__ import annotations

import io
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from google import genai
from google.genai import types
from PIL import Image, UnidentifiedImageError

from core.config import AppConfig
from core.models import AnalysisResult
from core.parsing import parse_model_json, unwrap_or_empty

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES = {"image/png", "image/jpeg", "image/webp", "image/heic", "image/heif"}

HISTORY_SEPARATOR = "\n\n----------------\n\n"


class AnalysisError(RuntimeError):
    """Raised when the model API call itself fails."""


class UnsupportedImageError(ValueError):
    pass


def _string() -> Dict[str, Any]:
    return {"type": "STRING"}


def _string_list() -> Dict[str, Any]:
    return {"type": "ARRAY", "items": _string()}


def _enum(*values: str) -> Dict[str, Any]:
    return {"type": "STRING", "enum": list(values)}


def _object(properties: Dict[str, Any], required: Optional[Sequence[str]] = None, **extra: Any) -> Dict[str, Any]:
    schema = {"type": "OBJECT", "properties": properties, **extra}
    if required:
        schema["required"] = list(required)
    return schema


def _bond_schema() -> Dict[str, Any]:
    return _object(
        {"from": {"type": "INTEGER"}, "to": {"type": "INTEGER"}, "order": {"type": "INTEGER"}},
        ["from", "to", "order"],
    )


MOLECULE_STRUCTURE_SCHEMA = _object(
    {
        "smiles": {"type": "STRING", "description": "Canonical SMILES string."},
        "inchi": {"type": "STRING", "description": "Standard InChI string."},
        "verificationNote": {"type": "STRING", "description": "Validation source."},
        "atoms": {
            "type": "ARRAY",
            "description": "3D coordinates (Angstroms). Include ALL atoms (Explicit H).",
            "items": _object(
                {"element": _string(), "x": {"type": "NUMBER"}, "y": {"type": "NUMBER"}, "z": {"type": "NUMBER"}},
                ["element", "x", "y", "z"],
            ),
        },
        "bonds": {"type": "ARRAY", "description": "3D Bonds.", "items": _bond_schema()},
        "structure2D": _object(
            {
                "atoms": {
                    "type": "ARRAY",
                    "description": "2D layout coordinates. Include EVERY atom (C, H, O, N); no skeletal hiding.",
                    "items": _object(
                        {
                            "id": {"type": "INTEGER"},
                            "element": _string(),
                            "x": {"type": "NUMBER", "description": "2D X coordinate"},
                            "y": {"type": "NUMBER", "description": "2D Y coordinate"},
                        },
                        ["id", "element", "x", "y"],
                    ),
                },
                "bonds": {"type": "ARRAY", "items": _bond_schema()},
            },
            ["atoms", "bonds"],
            description="Standard 2D layout. Explicit atoms only.",
        ),
    },
    ["smiles", "inchi", "verificationNote", "atoms", "bonds", "structure2D"],
    description="Chemically accurate structural data",
)

THERAPEUTIC_SCHEMA = {
    "type": "ARRAY",
    "items": _object(
        {"class": _string(), "explanation": _string(), "confidence": _enum("High", "Medium", "Low")},
        ["class", "explanation", "confidence"],
    ),
}

VALIDATION_SCHEMA = _object(
    {"mol1Valid": {"type": "BOOLEAN"}, "mol2Valid": {"type": "BOOLEAN"}},
    ["mol1Valid", "mol2Valid"],
)

IMAGE_ANALYSIS_SCHEMA = _object(
    {
        "chemicalName": {"type": "STRING", "description": "The name of the molecule or 'Not Detected'."},
        "formula": {"type": "STRING", "description": "Chemical formula or 'N/A'."},
        "domain": {"type": "STRING", "description": "Scientific domain or 'Invalid'."},
        "features": _string_list(),
        "properties": _object(
            {"solubility": _string(), "stability": _string(), "toxicity_risk": _string()},
            ["solubility", "stability", "toxicity_risk"],
        ),
        "similarFamilies": _string_list(),
        "hypotheticalVariations": {
            "type": "ARRAY",
            "items": _object({"structure": _string(), "purpose": _string()}, ["structure", "purpose"]),
        },
        "therapeuticPredictions": THERAPEUTIC_SCHEMA,
        "structure": MOLECULE_STRUCTURE_SCHEMA,
        "rawAnalysis": {
            "type": "STRING",
            "description": "If invalid, state 'No chemical structure identified in image.'",
        },
    },
    [
        "chemicalName", "formula", "domain", "features", "properties", "similarFamilies",
        "hypotheticalVariations", "therapeuticPredictions", "structure", "rawAnalysis",
    ],
)

TEXT_ANALYSIS_SCHEMA = _object(
    {
        "summary": _string(),
        "studentSummary": _string(),
        "domain": _string(),
        "experimentType": _string(),
        "keyConcepts": _string_list(),
        "experimentGoals": _string_list(),
        "variables": _string_list(),
        "results": _string_list(),
        "educationalExplanation": _string(),
        "mechanisticInterpretation": _string(),
        "simpleMechanism": _string(),
        "molecularBehavior": _string(),
        "potentialAnalogModifications": _string_list(),
        "computationalReasoning": _string(),
        "limitationsAssumptions": _string_list(),
        "visuals": _object(
            {
                "asciiArt": _string(),
                "relationships": {
                    "type": "ARRAY",
                    "items": _object({"source": _string(), "target": _string(), "interaction": _string()}),
                },
                "functionalGroups": {
                    "type": "ARRAY",
                    "items": _object(
                        {
                            "name": _string(),
                            "type": _enum("Acidic", "Basic", "Polar", "Nonpolar", "Reactive", "Stable", "Other"),
                        }
                    ),
                },
                "keyProperties": {
                    "type": "ARRAY",
                    "items": _object(
                        {"label": _string(), "value": _string(), "trend": _enum("Positive", "Negative", "Neutral")}
                    ),
                },
            },
            ["asciiArt", "relationships", "functionalGroups", "keyProperties"],
        ),
    },
    [
        "summary", "studentSummary", "domain", "experimentType", "keyConcepts", "experimentGoals",
        "variables", "results", "educationalExplanation", "mechanisticInterpretation", "simpleMechanism",
        "molecularBehavior", "potentialAnalogModifications", "computationalReasoning",
        "limitationsAssumptions", "visuals",
    ],
)

COMPARISON_SCHEMA = _object(
    {
        "molecule1": _string(),
        "molecule2": _string(),
        "domain": _string(),
        "molecule1Visual": _string(),
        "molecule2Visual": _string(),
        "similarityScore": {"type": "NUMBER"},
        "similarityExplanation": _string(),
        "reasoningSnapshot": _string_list(),
        "confidenceScore": _enum("High", "Medium", "Low"),
        "comparisonTable": {
            "type": "ARRAY",
            "items": _object(
                {
                    "feature": _string(),
                    "val1": _string(),
                    "val2": _string(),
                    "trend": _enum("Positive", "Neutral", "Uncertain"),
                },
                ["feature", "val1", "val2", "trend"],
            ),
        },
        "structuralModifications": {
            "type": "ARRAY",
            "items": _object({"molecule": _string(), "suggestion": _string(), "impact": _string()}),
        },
        "molecule1TherapeuticClasses": THERAPEUTIC_SCHEMA,
        "molecule2TherapeuticClasses": THERAPEUTIC_SCHEMA,
        "structure1": MOLECULE_STRUCTURE_SCHEMA,
        "structure2": MOLECULE_STRUCTURE_SCHEMA,
    },
    [
        "molecule1", "molecule2", "domain", "molecule1Visual", "molecule2Visual", "similarityScore",
        "similarityExplanation", "reasoningSnapshot", "confidenceScore", "comparisonTable",
        "structuralModifications", "molecule1TherapeuticClasses", "molecule2TherapeuticClasses",
        "structure1", "structure2",
    ],
)

_REPORT_FIELDS = [
    "domainName", "title", "introduction", "methodInputs", "keyInsights",
    "suggestedVariations", "limitations", "domainSummary",
]

REPORT_SCHEMA = _object(
    {
        "reports": {"type": "ARRAY", "items": _object({f: _string() for f in _REPORT_FIELDS}, _REPORT_FIELDS)},
        "globalSafetyNotice": _string(),
    },
    ["reports", "globalSafetyNotice"],
)


VALIDATION_PROMPT = """
You are a strict molecular input validator.
Given a user string, decide whether it is a valid chemical input.

Task: Validate the following two inputs.

Input 1: "{mol1}"
Input 2: "{mol2}"

Accept only canonical molecule names (e.g. "aspirin", "ethanol", "paracetamol"),
valid SMILES strings, or valid InChI strings.

Do not guess a molecule from random letters, and do not invent or autocorrect
molecule names. If there is any uncertainty, treat the input as invalid.
"""

IMAGE_PROMPT = """
You are an advanced Computational Chemistry Engine.

Identification protocol:
1. Never infer a molecule from the theme, mood, colour, objects or symbolism of the image.
2. Identify a structure only when the image explicitly shows a molecular diagram, a chemical
   formula, SMILES / InChI, a labeled structure, or scientific imagery (spectra, lab notes).
3. Without explicit chemical information, return "Not Detected" for name and formula and
   "Invalid" for domain, and do not output an analysis.

Pipeline:
1. Identify the molecule from the image.
2. Give its canonical SMILES.
3. Generate an explicit 2D layout with clean, non-overlapping X/Y coordinates, 120 degree
   angles for rings and sp2 centres, and EVERY atom (all C and all H) listed as a node.
4. Generate 3D geometry in Angstroms with all explicit hydrogens.

Output JSON. If no molecule is detected, return valid JSON with "Not Detected" values.
"""

TEXT_PROMPT = """
Analyze this scientific text.
Extract summary, domain, mechanism, and visuals.
Text: "{text}"
"""

COMPARISON_PROMPT = """
Compare: "{mol1}" vs "{mol2}".

For EACH molecule:
1. Identify it and give its canonical SMILES.
2. Generate an explicit 2D layout: clean X/Y coordinates, correct bond angles, no overlapping
   atoms, and ALL atoms (C, H, O, N) listed explicitly.
3. Generate the 3D structure with explicit hydrogens.

Comparison: domain, similarity, comparison matrix, therapeutic classes.
"""

REPORT_PROMPT = """
You are NovaSynth AI.
Generate a Research Insight Report.
Group by Scientific Domain.

Session Data:
{context}
"""


def format_history_context(history: Sequence[AnalysisResult]) -> str:
    blocks = []
    for i, item in enumerate(history):
        blocks.append(
            f"[Item {i + 1}] Domain: {item.domain} | Type: {item.type.value} | Title: {item.title}\n"
            f"Data: {json.dumps(item.data, default=str)}"
        )
    return HISTORY_SEPARATOR.join(blocks)


def prepare_image_part(data: bytes, mime_type: Optional[str]) -> types.Part:
    """Inline image part for the API, converting unsupported formats to JPEG."""
    if not data:
        raise UnsupportedImageError("Failed to read file data")
    if mime_type in SUPPORTED_MIME_TYPES:
        return types.Part.from_bytes(data=data, mime_type=mime_type)

    logger.info("Converting unsupported format %s to image/jpeg...", mime_type)
    try:
        with Image.open(io.BytesIO(data)) as img:
            buffer = io.BytesIO()
            img.convert("RGB").save(buffer, format="JPEG", quality=90)
    except (UnidentifiedImageError, OSError) as exc:
        raise UnsupportedImageError(
            f"Unsupported image format: {mime_type}. Please upload PNG, JPG, or WEBP."
        ) from exc
    return types.Part.from_bytes(data=buffer.getvalue(), mime_type="image/jpeg")


class GeminiService:
    """Thin wrapper over a ``google.genai`` client for the four analysis modes.

    Each service owns its client, so the API key never leaves the service it
    was configured for.
    """

    def __init__(self, config: AppConfig, client: Optional[genai.Client] = None) -> None:
        self.config = config
        if client is None:
            if not config.has_api_key:
                raise AnalysisError("No Gemini API key configured. Set GEMINI_API_KEY or enter one in the sidebar.")
            client = genai.Client(api_key=config.api_key)
        self._client = client

    def _generate(self, parts: List[Any], schema: Dict[str, Any], *, task: str) -> Dict[str, Any]:
        try:
            response = self._client.models.generate_content(
                model=self.config.model_name,
                contents=parts,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=schema,
                ),
            )
        except Exception as exc:
            logger.error("Gemini %s request failed: %s", task, exc)
            raise AnalysisError(str(exc) or f"{task} failed") from exc
        text = response.text
        if not text:
            # blocked candidates and empty parts come back without text
            logger.warning("Gemini %s response had no text", task)
        return unwrap_or_empty(parse_model_json(text or "{}"))

    def validate_comparison_inputs(self, mol1: str, mol2: str) -> Dict[str, bool]:
        payload = self._generate(
            [VALIDATION_PROMPT.format(mol1=mol1, mol2=mol2)], VALIDATION_SCHEMA, task="validation"
        )
        return {
            "mol1Valid": payload.get("mol1Valid") is True,
            "mol2Valid": payload.get("mol2Valid") is True,
        }

    def analyze_molecule_image(self, data: bytes, mime_type: Optional[str]) -> Dict[str, Any]:
        image_part = prepare_image_part(data, mime_type)
        return self._generate([image_part, IMAGE_PROMPT], IMAGE_ANALYSIS_SCHEMA, task="image analysis")

    def analyze_scientific_text(self, text: str) -> Dict[str, Any]:
        return self._generate([TEXT_PROMPT.format(text=text)], TEXT_ANALYSIS_SCHEMA, task="text analysis")

    def compare_molecules(self, mol1: str, mol2: str) -> Dict[str, Any]:
        return self._generate(
            [COMPARISON_PROMPT.format(mol1=mol1, mol2=mol2)], COMPARISON_SCHEMA, task="comparison"
        )

    def generate_research_report(self, history: Sequence[AnalysisResult]) -> Dict[str, Any]:
        prompt = REPORT_PROMPT.format(context=format_history_context(history))
        return self._generate([prompt], REPORT_SCHEMA, task="report generation")
