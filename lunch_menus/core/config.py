import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional, Tuple


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing and nothing can compensate for it."""


def _env(name: str, default: str) -> str:
    return os.getenv(name, default)


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_list(name: str, default: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in os.getenv(name, default).split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    # Database
    DATABASE_PATH: str = field(default_factory=lambda: _env("DATABASE_PATH", "data/menus.sqlite"))

    # Language model (OpenAI-compatible chat completions)
    LLM_API_KEY: Optional[str] = field(
        default_factory=lambda: os.getenv("GROQ_API_KEY") or os.getenv("LLM_API_KEY")
    )
    LLM_API_URL: str = field(
        default_factory=lambda: _env("LLM_API_URL", "https://api.groq.com/openai/v1/chat/completions")
    )
    LLM_MODEL: str = field(default_factory=lambda: _env("LLM_MODEL", "llama-3.3-70b-versatile"))
    LLM_TEMPERATURE: float = field(default_factory=lambda: _env_float("LLM_TEMPERATURE", 0.1))

    # Scraping
    REQUEST_TIMEOUT: int = field(default_factory=lambda: _env_int("REQUEST_TIMEOUT", 30))
    USER_AGENT: str = field(
        default_factory=lambda: _env(
            "USER_AGENT",
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        )
    )
    DIRECT_TEXT_MAX_CHARS: int = field(default_factory=lambda: _env_int("DIRECT_TEXT_MAX_CHARS", 25000))
    MIN_DIRECT_TEXT_LENGTH: int = field(default_factory=lambda: _env_int("MIN_DIRECT_TEXT_LENGTH", 500))
    WIDGET_DOMAINS: Tuple[str, ...] = field(default_factory=lambda: _env_list("WIDGET_DOMAINS", "menicka.cz"))

    # Remote rendering (URL-to-text service)
    REMOTE_RENDER_URL_TEMPLATE: str = field(
        default_factory=lambda: _env("REMOTE_RENDER_URL_TEMPLATE", "https://r.jina.ai/{url}")
    )
    REMOTE_RENDER_USER_AGENT: str = field(default_factory=lambda: _env("REMOTE_RENDER_USER_AGENT", "EatMeBot/1.0"))
    REMOTE_TEXT_MAX_CHARS: int = field(default_factory=lambda: _env_int("REMOTE_TEXT_MAX_CHARS", 50000))
    MIN_REMOTE_TEXT_LENGTH: int = field(default_factory=lambda: _env_int("MIN_REMOTE_TEXT_LENGTH", 100))

    # Batch refresh
    BATCH_TIMEOUT_SECONDS: float = field(default_factory=lambda: _env_float("BATCH_TIMEOUT_SECONDS", 60))
    BATCH_CONCURRENCY: int = field(default_factory=lambda: _env_int("BATCH_CONCURRENCY", 4))

    LOG_LEVEL: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))

    def require_llm_api_key(self) -> str:
        if not self.LLM_API_KEY:
            raise ConfigurationError("GROQ_API_KEY not set")
        return self.LLM_API_KEY


@lru_cache
def get_settings() -> Settings:
    """Settings read once from the environment, for the HTTP layer."""
    return Settings()
