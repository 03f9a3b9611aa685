# environment driven settings, read once per process
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from utils.logger import get_logger

_logger = get_logger(__name__)

DEFAULT_GENAI_MODEL = "gemini-2.5-flash"
DEFAULT_SESSION_DB_PATH = "data/session.sqlite"
DEFAULT_SESSION_TTL_MINUTES = 120


def _env(*keys: str, default: str = "") -> str:
    """First non-empty value among `keys`; build-tool prefixed names are accepted too."""
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return default


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _logger.warning(f"Ignoring non-integer {key}={raw!r}, using {default}.")
        return default


@dataclass(frozen=True)
class Settings:
    supabase_url: str = ""
    supabase_key: str = ""
    genai_api_key: str = ""
    genai_model: str = DEFAULT_GENAI_MODEL
    session_db_path: str = DEFAULT_SESSION_DB_PATH
    session_ttl: timedelta = timedelta(minutes=DEFAULT_SESSION_TTL_MINUTES)

    @property
    def store_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def genai_configured(self) -> bool:
        return bool(self.genai_api_key)


def load_settings() -> Settings:
    """
    Build Settings from the environment.

    Missing credentials are only warned about: the store and the AI service
    degrade at call time instead of stopping the app from starting.
    """
    settings = Settings(
        supabase_url=_env("SUPABASE_URL", "VITE_SUPABASE_URL"),
        supabase_key=_env("SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY"),
        genai_api_key=_env("API_KEY", "GOOGLE_API_KEY", "VITE_GOOGLE_API_KEY"),
        genai_model=_env("GENAI_MODEL", default=DEFAULT_GENAI_MODEL),
        session_db_path=_env("SESSION_DB_PATH", default=DEFAULT_SESSION_DB_PATH),
        session_ttl=timedelta(
            minutes=_env_int("SESSION_TTL_MINUTES", DEFAULT_SESSION_TTL_MINUTES)
        ),
    )
    if not settings.store_configured:
        _logger.warning(
            "Supabase credentials missing. Check SUPABASE_URL and SUPABASE_ANON_KEY."
        )
    if not settings.genai_configured:
        _logger.warning("Gemini API key missing. AI features will return fallbacks.")
    return settings


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def set_settings(settings: Optional[Settings]) -> None:
    """Replace the process settings; None makes the next get_settings() re-read the environment."""
    global _settings
    _settings = settings
