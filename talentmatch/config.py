"""Runtime settings for the matching engine, read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .env import load_env


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass
class Settings:
    """Application configuration."""

    groq_api_key: Optional[str] = None
    model: str = "llama-3.3-70b-versatile"
    max_tokens: int = 2000
    temperature: float = 0.7
    ai_limit: int = 10
    ai_concurrency: int = 1
    cache_ttl: int = 300
    db_path: Path = Path("data/talentmatch.db")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "Settings":
        """Build settings from environment variables (and .env if present)."""
        if load_dotenv_file:
            load_env()
        defaults = cls()
        return cls(
            groq_api_key=os.getenv("GROQ_API_KEY") or None,
            model=os.getenv("TALENTMATCH_MODEL", defaults.model),
            max_tokens=_int_env("TALENTMATCH_MAX_TOKENS", defaults.max_tokens),
            temperature=_float_env("TALENTMATCH_TEMPERATURE", defaults.temperature),
            ai_limit=_int_env("TALENTMATCH_AI_LIMIT", defaults.ai_limit),
            ai_concurrency=_int_env("TALENTMATCH_AI_CONCURRENCY", defaults.ai_concurrency),
            cache_ttl=_int_env("TALENTMATCH_CACHE_TTL", defaults.cache_ttl),
            db_path=Path(os.getenv("TALENTMATCH_DB", str(defaults.db_path))),
            log_level=os.getenv("TALENTMATCH_LOG_LEVEL", defaults.log_level).upper(),
        )

    def validate(self) -> None:
        """Raise ValueError on settings that cannot work."""
        if self.ai_limit < 0:
            raise ValueError("TALENTMATCH_AI_LIMIT must be >= 0")
        if self.ai_concurrency < 1:
            raise ValueError("TALENTMATCH_AI_CONCURRENCY must be >= 1")
        if self.cache_ttl <= 0:
            raise ValueError("TALENTMATCH_CACHE_TTL must be > 0")
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {self.log_level}")
