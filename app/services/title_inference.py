from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Literal

from app.ai.types import AIClient
from app.core.errors import InferenceFormatError, UpstreamTimeoutError
from app.parsing.models import RESUME_SECTIONS, ParsedResume

logger = logging.getLogger(__name__)

TitleParseFailure = Literal["not_json", "not_array", "empty_array", "invalid_element"]

TITLE_PROMPT_TEMPLATE = """You are a career analyst. Read the résumé sections below and identify the professional job titles this candidate is best suited for.

Rules:
- Return ONLY a JSON array of strings, for example ["Backend Engineer", "Python Developer"]. No markdown, no code block, no explanation.
- Element 0 must be the single most specific and representative title for this candidate.
- Collapse redundant near-synonyms into one title; every other element must be a related but distinct title.
- The array length varies naturally (1 to about 4). Never pad the array with invented titles.
- Each element is a plain job title suitable as a job-board search term.

Résumé sections (JSON):
{resume_json}"""

_FAILURE_MESSAGES: dict[str, str] = {
    "not_json": "Model response is not valid JSON.",
    "not_array": "Model response is not a JSON array.",
    "empty_array": "Model response is an empty array.",
    "invalid_element": "Model response contains an empty or non-string title.",
}


@dataclass(frozen=True)
class TitleParseResult:
    titles: list[str] | None = None
    failure: TitleParseFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def parse_title_candidates(text: str) -> TitleParseResult:
    """Strictly parse a model response as a non-empty JSON array of non-empty strings."""
    try:
        payload = json.loads(text)
    except (TypeError, ValueError):
        return TitleParseResult(failure="not_json")
    if not isinstance(payload, list):
        return TitleParseResult(failure="not_array")
    if not payload:
        return TitleParseResult(failure="empty_array")
    titles: list[str] = []
    for item in payload:
        if not isinstance(item, str) or not item.strip():
            return TitleParseResult(failure="invalid_element")
        titles.append(item.strip())
    return TitleParseResult(titles=titles)


def serialize_sections(resume: ParsedResume, max_chars: int) -> str:
    sections = {name: resume.section(name) for name in RESUME_SECTIONS if resume.section(name).strip()}
    if not sections:
        sections = {"text": resume.text}
    serialized = json.dumps(sections, ensure_ascii=False, indent=2)
    return serialized[:max_chars]


class TitleInferenceEngine:
    def __init__(self, ai_client: AIClient, *, timeout_s: float = 30.0, max_prompt_chars: int = 12000):
        self._ai_client = ai_client
        self._timeout_s = timeout_s
        self._max_prompt_chars = max_prompt_chars

    def build_prompt(self, resume: ParsedResume) -> str:
        return TITLE_PROMPT_TEMPLATE.format(resume_json=serialize_sections(resume, self._max_prompt_chars))

    async def infer(self, resume: ParsedResume) -> list[str]:
        prompt = self.build_prompt(resume)
        try:
            raw = await asyncio.wait_for(self._ai_client.generate(prompt), timeout=self._timeout_s)
        except asyncio.TimeoutError as exc:
            logger.warning("title_inference_timeout timeout_s=%s", self._timeout_s)
            raise UpstreamTimeoutError("Language model did not respond in time.") from exc

        result = parse_title_candidates(raw.strip())
        if not result.ok:
            logger.warning("title_inference_invalid kind=%s response_len=%s", result.failure, len(raw))
            raise InferenceFormatError(_FAILURE_MESSAGES[result.failure], kind=result.failure)
        logger.info("title_inference_completed titles=%s", result.titles)
        return result.titles
