from dataclasses import dataclass

from app.core.config import Settings


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    api_key: str | None
    base_url: str | None = None


def load_ai_config(settings: Settings) -> AIConfig:
    if settings.ai_provider == "openai":
        return AIConfig(
            provider="openai",
            model=settings.ai_model,
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
        )
    return AIConfig(provider=settings.ai_provider, model=settings.ai_model, api_key=settings.gemini_api_key)
