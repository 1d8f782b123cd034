import os
from dataclasses import dataclass

from dotenv import load_dotenv


DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-2.5-flash"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ConfigurationError(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str
    model_name: str = DEFAULT_MODEL
    api_base: str = DEFAULT_API_BASE
    max_retries: int = 3
    timeout_seconds: float | None = 60.0
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def api_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/{self.model_name}:generateContent"


def _read_int(name: str, default: int, minimum: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}.") from exc
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}.")
    return value


def _read_timeout(name: str, default: float | None) -> float | None:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    if raw.lower() in {"none", "off"}:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number of seconds or 'none', got {raw!r}.") from exc
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value}.")
    return value


def _read_log_level(name: str, default: str) -> str:
    value = (os.getenv(name) or "").strip().upper() or default
    if value not in LOG_LEVELS:
        raise ConfigurationError(f"{name} must be one of {', '.join(LOG_LEVELS)}, got {value!r}.")
    return value


def load_settings() -> Settings:
    """Read settings from the environment (and a .env file, if present).

    Raises ConfigurationError when the Gemini API key is missing or a numeric
    setting cannot be parsed.
    """
    load_dotenv()
    api_key = (os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or "").strip()
    if not api_key:
        raise ConfigurationError(
            "Missing GEMINI_API_KEY. Create a .env file in the project root containing "
            "GEMINI_API_KEY=your_actual_key_here (GOOGLE_API_KEY is also accepted)."
        )

    return Settings(
        gemini_api_key=api_key,
        model_name=(os.getenv("GEMINI_MODEL") or "").strip() or DEFAULT_MODEL,
        api_base=(os.getenv("GEMINI_API_BASE") or "").strip() or DEFAULT_API_BASE,
        max_retries=_read_int("GEMINI_MAX_RETRIES", 3, minimum=1),
        timeout_seconds=_read_timeout("GEMINI_TIMEOUT_SECONDS", 60.0),
        host=(os.getenv("HOST") or "").strip() or "127.0.0.1",
        port=_read_int("PORT", 3000, minimum=1),
        log_level=_read_log_level("LOG_LEVEL", "INFO"),
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
