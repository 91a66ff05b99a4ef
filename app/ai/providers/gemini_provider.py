from __future__ import annotations

import logging
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from app.core.errors import UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


class GeminiProvider:
    def __init__(self, model: str, api_key: Optional[str] = None, temperature: float = 0.2):
        self._model = model
        self._temperature = temperature
        key = (api_key or "").strip()
        if not key:
            raise RuntimeError("GOOGLE_AI_STUDIO_KEY is missing")
        self._client = genai.Client(api_key=key)

    async def generate(self, prompt: str) -> str:
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=genai_types.GenerateContentConfig(
                    temperature=self._temperature,
                    response_mime_type="application/json",
                ),
            )
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError("Language model request timed out.") from exc
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            logger.warning("gemini_generate_failed model=%s: %s", self._model, exc)
            raise UpstreamError(f"Language model request failed: {exc}") from exc

        return response.text or ""
