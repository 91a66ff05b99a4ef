from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

SUPPORTED_AI_PROVIDERS = {"gemini", "openai"}


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    port: int
    log_level: str
    sentry_dsn: str | None
    rate_limit: str
    rate_limit_enabled: bool
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    scratch_dir: str
    ai_provider: str
    ai_model: str
    gemini_api_key: str | None
    openai_api_key: str | None
    openai_base_url: str | None
    model_timeout_s: float
    prompt_max_chars: int
    adzuna_app_id: str | None
    adzuna_app_key: str | None
    adzuna_country: str
    adzuna_base_url: str
    search_timeout_s: float


def _default_model(provider: str) -> str:
    if provider == "openai":
        return "gpt-4o-mini"
    return "gemini-2.5-flash"


def load_settings() -> Settings:
    provider = (_get_env("AI_PROVIDER", "gemini") or "gemini").strip().lower()
    return Settings(
        port=_get_env_int("PORT", 3001),
        log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
        sentry_dsn=_get_env("SENTRY_DSN"),
        rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
        rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
        cors_allowed_origins=_get_env_list(
            "CORS_ALLOWED_ORIGINS",
            [
                "http://localhost:5173",
                "http://127.0.0.1:5173",
                "http://localhost:3000",
            ],
        ),
        cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
        cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", False),
        scratch_dir=_get_env("SCRATCH_DIR", "temp") or "temp",
        ai_provider=provider,
        ai_model=(_get_env("AI_MODEL") or _default_model(provider)).strip(),
        gemini_api_key=_get_env("GOOGLE_AI_STUDIO_KEY") or _get_env("GEMINI_API_KEY"),
        openai_api_key=_get_env("OPENAI_API_KEY"),
        openai_base_url=_get_env("OPENAI_BASE_URL"),
        model_timeout_s=_get_env_float("MODEL_TIMEOUT_S", 30.0),
        prompt_max_chars=_get_env_int("PROMPT_MAX_CHARS", 12000),
        adzuna_app_id=_get_env("ADZUNA_APP_ID"),
        adzuna_app_key=_get_env("ADZUNA_APP_KEY"),
        adzuna_country=(_get_env("ADZUNA_COUNTRY", "us") or "us").strip().lower(),
        adzuna_base_url=(
            _get_env("ADZUNA_BASE_URL", "https://api.adzuna.com/v1/api/jobs") or "https://api.adzuna.com/v1/api/jobs"
        ).rstrip("/"),
        search_timeout_s=_get_env_float("SEARCH_TIMEOUT_S", 15.0),
    )


settings = load_settings()

if settings.ai_provider not in SUPPORTED_AI_PROVIDERS:
    raise RuntimeError("AI_PROVIDER must be either 'gemini' or 'openai'.")
