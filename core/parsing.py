"""Tolerant parsing of model JSON output."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Empty:
    reason: str = ""


ParseResult = Union[Ok[Dict[str, Any]], Empty]


def strip_code_fences(text: str) -> str:
    return _FENCE_PATTERN.sub("", text).strip()


def parse_model_json(text: Optional[str]) -> ParseResult:
    """Parse a model response body into a JSON object.

    Markdown code fences around the payload are removed first. Anything that
    does not decode to a JSON object yields ``Empty`` instead of raising.
    """
    if not text or not text.strip():
        return Empty("empty response")
    try:
        payload = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse JSON response: %s", exc)
        return Empty(str(exc))
    if not isinstance(payload, dict):
        logger.error("Model returned %s instead of a JSON object", type(payload).__name__)
        return Empty("not an object")
    return Ok(payload)


def unwrap_or_empty(result: ParseResult) -> Dict[str, Any]:
    return result.value if isinstance(result, Ok) else {}


def clean_text(text: Optional[str]) -> str:
    if not text:
        return ""
    return (
        str(text)
        .replace("_x000D_", "")
        .replace("\\n", "\n")
        .replace("**", "")
        .strip()
    )
