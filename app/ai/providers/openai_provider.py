from __future__ import annotations

import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from app.core.errors import UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.2,
    ):
        self._model = model
        self._temperature = temperature
        key = (api_key or "").strip()
        if not key:
            raise RuntimeError("OPENAI_API_KEY is missing")

        # No automatic retries; a transient failure is surfaced to the caller.
        self._client = AsyncOpenAI(api_key=key, base_url=base_url or None, max_retries=0)

    async def generate(self, prompt: str) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
            )
        except openai.APITimeoutError as exc:
            raise UpstreamTimeoutError("Language model request timed out.") from exc
        except openai.APIError as exc:
            logger.warning("openai_generate_failed model=%s: %s", self._model, exc)
            raise UpstreamError(f"Language model request failed: {exc}") from exc

        content = response.choices[0].message.content if response.choices else ""
        return content or ""
