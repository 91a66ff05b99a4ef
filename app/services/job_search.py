from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from app.core.errors import UpstreamError, UpstreamTimeoutError, ValidationError

logger = logging.getLogger(__name__)

RESULTS_PER_PAGE = 10
SORT_BY = "relevance"

_WHITESPACE_RE = re.compile(r"\s+")

RawJobRecord = dict[str, Any]


@dataclass(frozen=True)
class JobQuery:
    what: str
    where: str
    results_per_page: int = RESULTS_PER_PAGE
    sort_by: str = SORT_BY


def normalize_title(title: str) -> str:
    """Join the words of a title with ``+``, the provider's multi-word separator."""
    return _WHITESPACE_RE.sub("+", (title or "").strip())


def build_query(title: str, location: str | None) -> JobQuery:
    where = (location or "").strip()
    if not where:
        raise ValidationError("Location is required")
    what = normalize_title(title)
    if not what:
        raise ValidationError("A non-empty job title is required")
    return JobQuery(what=what, where=where)


def _provider_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("display", "exception", "message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    text = (response.text or "").strip()
    return text[:300] or f"HTTP {response.status_code}"


class AdzunaJobSearch:
    def __init__(
        self,
        *,
        app_id: str | None,
        app_key: str | None,
        country: str = "us",
        base_url: str = "https://api.adzuna.com/v1/api/jobs",
        timeout_s: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._app_id = app_id or ""
        self._app_key = app_key or ""
        self._country = country
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._transport = transport

    def build_url(self, query: JobQuery) -> str:
        params = {
            "app_id": self._app_id,
            "app_key": self._app_key,
            "what": query.what,
            "where": query.where,
            "results_per_page": query.results_per_page,
            "sort_by": query.sort_by,
        }
        # "+" is kept literal so the provider reads it as a word separator.
        query_string = urlencode(params, quote_via=quote, safe="+")
        return f"{self._base_url}/{self._country}/search/1?{query_string}"

    async def _fetch(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self._timeout_s, transport=self._transport) as client:
            return await client.get(url, headers={"Accept": "application/json"})

    async def search(self, query: JobQuery) -> list[RawJobRecord]:
        url = self.build_url(query)
        try:
            response = await asyncio.wait_for(self._fetch(url), timeout=self._timeout_s)
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            logger.warning("job_search_timeout what=%s where=%s", query.what, query.where)
            raise UpstreamTimeoutError("Job search provider did not respond in time.") from exc
        except httpx.HTTPError as exc:
            logger.warning("job_search_request_failed what=%s: %s", query.what, exc)
            raise UpstreamError(f"Job search request failed: {exc}") from exc

        if response.is_error:
            message = _provider_message(response)
            logger.warning("job_search_http_error status=%s message=%s", response.status_code, message)
            raise UpstreamError(message)

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Job search provider returned invalid JSON.") from exc

        results = data.get("results") if isinstance(data, dict) else None
        jobs = [item for item in (results or []) if isinstance(item, dict)]
        logger.info("job_search_completed what=%s where=%s results=%s", query.what, query.where, len(jobs))
        return jobs
