"""Configuration defaults, .env loading, and the Config value.

WHY: The Gemini credential, model, sampling settings and debug options
come from the environment (usually a .env file next to the script). They
are read once at startup and handed to the components that need them,
so nothing downstream reaches into os.environ.

HOW: python-dotenv's dotenv_values() reads the .env file without
touching os.environ. Real environment variables win over .env entries.
Config.load() builds a frozen Config; CLI flags override fields with
dataclasses.replace().

RULES:
- GEMINI_API_KEY is required; missing/empty raises ConfigError
- Numeric values that fail to parse are ignored (default kept, warning logged);
  a negative GEMINI_MAX_RETRIES counts as unparseable
- DEBUG_MODE accepts true/1/yes/on (case-insensitive)
- A missing .env file is not an error
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional, TypeVar, Union

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 8192
DEFAULT_LANGUAGE = "Thai, English (few words)"
DEFAULT_DEBUG_DIR = "debug"
DEFAULT_MAX_RETRIES = 0
DEFAULT_ENV_FILE = ".env"

SUPPORTED_INPUT_SUFFIX = ".srv3"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class ConfigError(ValueError):
    """Raised when required configuration is missing."""


@dataclass(frozen=True)
class Config:
    """Run configuration, built once and passed by value.

    RULES:
    - api_key: Gemini API key (never logged)
    - model / temperature / max_tokens: passed to the service unchanged
    - language: target language description used in the prompt
    - max_retries: extra attempts for retryable service failures (0 = none)
    - debug_mode / debug_dir: where batch prompt/response dumps go
    """

    api_key: str
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    base_url: str = DEFAULT_BASE_URL
    language: str = DEFAULT_LANGUAGE
    max_retries: int = DEFAULT_MAX_RETRIES
    debug_mode: bool = False
    debug_dir: str = DEFAULT_DEBUG_DIR

    @classmethod
    def load(
        cls,
        env_file: Union[str, Path, None] = DEFAULT_ENV_FILE,
        environ: Optional[Mapping[str, str]] = None,
    ) -> Config:
        """Build a Config from a .env file and the process environment.

        Args:
            env_file: Path to a .env file, or None to skip it.
            environ: Environment mapping; defaults to os.environ.

        Raises:
            ConfigError: if GEMINI_API_KEY is not set.
        """
        values = _merge_sources(env_file, os.environ if environ is None else environ)

        api_key = values.get("GEMINI_API_KEY", "").strip()
        if not api_key:
            raise ConfigError(
                "Gemini API key not configured. "
                "Set GEMINI_API_KEY in the environment or the .env file."
            )

        return cls(
            api_key=api_key,
            model=values.get("GEMINI_MODEL") or DEFAULT_MODEL,
            temperature=_parse(values, "GEMINI_TEMPERATURE", float, DEFAULT_TEMPERATURE),
            max_tokens=_parse(values, "GEMINI_MAX_TOKENS", int, DEFAULT_MAX_TOKENS),
            base_url=values.get("GEMINI_BASE_URL") or DEFAULT_BASE_URL,
            language=values.get("SUBTITLE_LANGUAGE") or DEFAULT_LANGUAGE,
            max_retries=_parse(values, "GEMINI_MAX_RETRIES", _non_negative_int, DEFAULT_MAX_RETRIES),
            debug_mode=values.get("DEBUG_MODE", "").strip().lower() in _TRUE_VALUES,
            debug_dir=values.get("DEBUG_DIR") or DEFAULT_DEBUG_DIR,
        )


def _merge_sources(
    env_file: Union[str, Path, None],
    environ: Mapping[str, str],
) -> dict:
    """Combine .env entries with the environment; environment wins."""
    merged: dict = {}
    if env_file is not None and Path(env_file).is_file():
        for key, value in dotenv_values(env_file).items():
            if value is not None:
                merged[key] = value
    for key, value in environ.items():
        if value != "":
            merged[key] = value
    return merged


def _non_negative_int(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise ValueError("must not be negative")
    return value


def _parse(values: Mapping[str, str], key: str, convert: Callable[[str], T], default: T) -> T:
    raw = values.get(key, "").strip()
    if not raw:
        return default
    try:
        return convert(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using default %r", key, raw, default)
        return default
