from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from adapters.llm.openai_provider import DEFAULT_MODEL, DEFAULT_TIMEOUT_SEC


@dataclass
class Settings:
    """
    Centralized application configuration.

    Does NOT depend on pydantic. Values are loaded from environment
    variables via Settings.from_env().
    """

    # --- Completion API ---
    api_key: str = ""
    base_url: str = ""
    model: str = DEFAULT_MODEL
    completion_timeout_sec: float = DEFAULT_TIMEOUT_SEC

    # --- DB ---
    postgres_dsn: str = ""

    # --- API keys for the HTTP surface (comma-separated) ---
    api_keys_raw: str = ""

    # --- App version ---
    app_version: str = "dev"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build Settings from environment variables with sane fallbacks.

        PGHUMAN_API_KEY wins over OPENAI_API_KEY. Unparseable numbers fall
        back to their defaults.
        """

        def getenv_float(name: str, default: float) -> float:
            raw = os.getenv(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                value = float(raw)
            except ValueError:
                return default
            return value if value > 0 else default

        api_key = (
            os.getenv("PGHUMAN_API_KEY", "").strip()
            or os.getenv("OPENAI_API_KEY", "").strip()
        )

        return cls(
            api_key=api_key,
            base_url=os.getenv("OPENAI_BASE_URL", cls.base_url).strip(),
            model=os.getenv("PGHUMAN_MODEL", "").strip() or cls.model,
            completion_timeout_sec=getenv_float(
                "PGHUMAN_COMPLETION_TIMEOUT_SEC", cls.completion_timeout_sec
            ),
            postgres_dsn=os.getenv("POSTGRES_DSN", cls.postgres_dsn),
            api_keys_raw=os.getenv("API_KEYS", cls.api_keys_raw),
            app_version=os.getenv("APP_VERSION", cls.app_version),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
