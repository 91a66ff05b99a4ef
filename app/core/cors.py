from __future__ import annotations

from app.core.config import Settings


def cors_allowed_origins(settings: Settings) -> list[str]:
    return list(settings.cors_allowed_origins)


def cors_allow_origin_regex(settings: Settings) -> str | None:
    regex = (settings.cors_allow_origin_regex or "").strip()
    return regex or None
