"""
Runtime settings, read from the environment (and an optional .env file).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000
DEFAULT_BUCKET = "pdfs"


@dataclass(frozen=True)
class Settings:
    """Tutor configuration.

    Build with `Settings.from_env()`; fields map to:

    - SUPABASE_URL, SUPABASE_ANON_KEY (or SUPABASE_KEY)
    - OPENAI_API_KEY
    - AI_TUTOR_MODEL, AI_TUTOR_TEMPERATURE, AI_TUTOR_MAX_TOKENS
    - AI_TUTOR_STORAGE_BUCKET, AI_TUTOR_USER_ID, AI_TUTOR_LOG_LEVEL
    """

    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    storage_bucket: str = DEFAULT_BUCKET
    user_id: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        dotenv: bool = True,
    ) -> "Settings":
        """Read settings from `environ` (defaults to os.environ).

        Args:
            environ: Mapping to read from instead of the process environment
            dotenv: Load a .env file into os.environ first
        """
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        def get(name: str) -> Optional[str]:
            value = (environ.get(name) or "").strip()
            return value or None

        return cls(
            supabase_url=get("SUPABASE_URL"),
            supabase_key=get("SUPABASE_ANON_KEY") or get("SUPABASE_KEY"),
            openai_api_key=get("OPENAI_API_KEY"),
            model=get("AI_TUTOR_MODEL") or DEFAULT_MODEL,
            temperature=_parse_number(
                "AI_TUTOR_TEMPERATURE", get("AI_TUTOR_TEMPERATURE"), float, DEFAULT_TEMPERATURE
            ),
            max_tokens=_parse_number(
                "AI_TUTOR_MAX_TOKENS", get("AI_TUTOR_MAX_TOKENS"), int, DEFAULT_MAX_TOKENS
            ),
            storage_bucket=get("AI_TUTOR_STORAGE_BUCKET") or DEFAULT_BUCKET,
            user_id=get("AI_TUTOR_USER_ID"),
            log_level=(get("AI_TUTOR_LOG_LEVEL") or "INFO").upper(),
        )

    def require_supabase(self) -> None:
        """Raise ConfigError unless the Supabase project is configured."""
        if not self.supabase_url:
            raise ConfigError("SUPABASE_URL is not set")
        if not self.supabase_key:
            raise ConfigError("SUPABASE_ANON_KEY is not set")

    def require_openai(self) -> None:
        """Raise ConfigError unless an OpenAI key is configured."""
        if not self.openai_api_key:
            raise ConfigError("OPENAI_API_KEY is not set")


def _parse_number(name, raw, kind, default):
    if raw is None:
        return default
    try:
        return kind(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a {kind.__name__}, got {raw!r}") from exc


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging for the app."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(numeric)
