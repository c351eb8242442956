"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from core.pubchem import DEFAULT_BASE_URL

DEFAULT_MODEL = "gemini-3-pro-preview"
DEFAULT_PUBCHEM_TIMEOUT = 10.0


@dataclass(frozen=True)
class AppConfig:
    api_key: Optional[str] = None
    model_name: str = DEFAULT_MODEL
    pubchem_url: str = DEFAULT_BASE_URL
    pubchem_timeout: float = DEFAULT_PUBCHEM_TIMEOUT
    log_level: str = "INFO"

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def with_api_key(self, api_key: Optional[str]) -> "AppConfig":
        if not api_key:
            return self
        return replace(self, api_key=api_key.strip())


def _float_setting(raw: Optional[str], default: float) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring invalid numeric setting %r", raw)
        return default
    return value if value > 0 else default


def load_config(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    env = os.environ if environ is None else environ
    return AppConfig(
        api_key=env.get("GEMINI_API_KEY") or env.get("API_KEY") or None,
        model_name=env.get("NOVASYNTH_MODEL") or DEFAULT_MODEL,
        pubchem_url=env.get("NOVASYNTH_PUBCHEM_URL") or DEFAULT_BASE_URL,
        pubchem_timeout=_float_setting(env.get("NOVASYNTH_PUBCHEM_TIMEOUT"), DEFAULT_PUBCHEM_TIMEOUT),
        log_level=(env.get("NOVASYNTH_LOG_LEVEL") or "INFO").upper(),
    )
