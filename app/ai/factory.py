from app.ai.config import AIConfig
from app.ai.types import AIClient

from app.ai.providers.openai_provider import OpenAIProvider
from app.ai.providers.gemini_provider import GeminiProvider


def get_ai_client(cfg: AIConfig) -> AIClient:
    if cfg.provider == "openai":
        return OpenAIProvider(model=cfg.model, api_key=cfg.api_key, base_url=cfg.base_url)

    if cfg.provider == "gemini":
        return GeminiProvider(model=cfg.model, api_key=cfg.api_key)

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")
