import sys
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import httpx  # noqa: E402
import openai  # noqa: E402
from google.genai import errors as genai_errors  # noqa: E402

from app.ai.providers.gemini_provider import GeminiProvider  # noqa: E402
from app.ai.providers.openai_provider import OpenAIProvider  # noqa: E402
from app.core.errors import UpstreamError, UpstreamTimeoutError  # noqa: E402


def _request() -> httpx.Request:
    return httpx.Request("POST", "https://llm.test/v1/generate")


class GeminiProviderTests(unittest.IsolatedAsyncioTestCase):
    def _provider(self, **generate_kwargs) -> tuple[GeminiProvider, AsyncMock]:
        provider = GeminiProvider(model="gemini-2.5-flash", api_key="test-key")
        generate_content = AsyncMock(**generate_kwargs)
        provider._client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))
        return provider, generate_content

    def test_missing_key_is_rejected(self):
        with self.assertRaises(RuntimeError):
            GeminiProvider(model="gemini-2.5-flash", api_key="  ")

    async def test_returns_response_text_and_asks_for_json(self):
        provider, generate_content = self._provider(return_value=SimpleNamespace(text='["Backend Engineer"]'))
        self.assertEqual(await provider.generate("prompt"), '["Backend Engineer"]')

        kwargs = generate_content.await_args.kwargs
        self.assertEqual(kwargs["model"], "gemini-2.5-flash")
        self.assertEqual(kwargs["contents"], "prompt")
        self.assertEqual(kwargs["config"].response_mime_type, "application/json")

    async def test_empty_text_becomes_empty_string(self):
        provider, _ = self._provider(return_value=SimpleNamespace(text=None))
        self.assertEqual(await provider.generate("prompt"), "")

    async def test_api_error_is_an_upstream_error(self):
        error = genai_errors.APIError(500, {"error": {"code": 500, "message": "boom", "status": "INTERNAL"}})
        provider, _ = self._provider(side_effect=error)
        with self.assertLogs("app.ai.providers.gemini_provider", level="WARNING"):
            with self.assertRaises(UpstreamError) as ctx:
                await provider.generate("prompt")
        self.assertIn("boom", str(ctx.exception))

    async def test_transport_error_is_an_upstream_error(self):
        provider, _ = self._provider(side_effect=httpx.ConnectError("refused", request=_request()))
        with self.assertLogs("app.ai.providers.gemini_provider", level="WARNING"):
            with self.assertRaises(UpstreamError):
                await provider.generate("prompt")

    async def test_read_timeout_is_an_upstream_timeout(self):
        provider, _ = self._provider(side_effect=httpx.ReadTimeout("timed out", request=_request()))
        with self.assertRaises(UpstreamTimeoutError):
            await provider.generate("prompt")


class OpenAIProviderTests(unittest.IsolatedAsyncioTestCase):
    def _provider(self, **create_kwargs) -> tuple[OpenAIProvider, AsyncMock]:
        provider = OpenAIProvider(model="gpt-4o-mini", api_key="sk-test")
        create = AsyncMock(**create_kwargs)
        provider._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
        return provider, create

    def test_missing_key_is_rejected(self):
        with self.assertRaises(RuntimeError):
            OpenAIProvider(model="gpt-4o-mini", api_key=None)

    async def test_returns_first_choice_content(self):
        message = SimpleNamespace(content='["Data Engineer", "Analytics Engineer"]')
        provider, create = self._provider(return_value=SimpleNamespace(choices=[SimpleNamespace(message=message)]))
        self.assertEqual(await provider.generate("prompt"), '["Data Engineer", "Analytics Engineer"]')
        self.assertEqual(create.await_args.kwargs["messages"], [{"role": "user", "content": "prompt"}])

    async def test_no_choices_becomes_empty_string(self):
        provider, _ = self._provider(return_value=SimpleNamespace(choices=[]))
        self.assertEqual(await provider.generate("prompt"), "")

    async def test_timeout_is_an_upstream_timeout(self):
        provider, _ = self._provider(side_effect=openai.APITimeoutError(request=_request()))
        with self.assertRaises(UpstreamTimeoutError):
            await provider.generate("prompt")

    async def test_connection_error_is_an_upstream_error(self):
        provider, _ = self._provider(side_effect=openai.APIConnectionError(request=_request()))
        with self.assertLogs("app.ai.providers.openai_provider", level="WARNING"):
            with self.assertRaises(UpstreamError) as ctx:
                await provider.generate("prompt")
        self.assertNotIsInstance(ctx.exception, UpstreamTimeoutError)


if __name__ == "__main__":
    unittest.main()
