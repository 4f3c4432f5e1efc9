from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from ``TASKCAPTURE_``-prefixed environment variables
    and/or a .env file.
    """

    log_level: str = "INFO"

    # HTTP adapter
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    min_confidence: float = 0.4
    max_input_chars: int = 10_000

    # Calibration constants (tuned against data/labeled_corpus.json)
    category_normalizer: float = 3.0
    strong_keyword_weight: float = 2.0
    weak_keyword_weight: float = 1.0
    category_hint_confidence: float = 0.5

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "TASKCAPTURE_",
        "extra": "ignore",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing or unreadable .env files (e.g. in CI/testing)
    by falling back to environment variables and defaults.
    """
    try:
        return Settings()
    except (OSError, UnicodeDecodeError):
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
