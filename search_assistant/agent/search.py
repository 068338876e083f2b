"""
Search provider client: free-text query -> list[SearchResult].

Backends: Perplexity /search (structured results), Perplexity sonar chat
completions (free text, segmented heuristically), DuckDuckGo via ddgs.
One network call per search; failures raise SearchProviderError, no retry.
"""

import asyncio
import logging
import re
from typing import Any

import httpx
from ddgs import DDGS
from ddgs.exceptions import DDGSException

from search_assistant.agent.heuristics import segment_into_results
from search_assistant.core.config import Settings
from search_assistant.core.errors import SearchProviderError
from search_assistant.schemas.search import SearchResult

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_SYSTEM_PROMPT = (
    "Ты поисковый ассистент. Найди актуальную информацию по запросу и верни список источников: "
    "для каждого источника укажи название, ссылку и краткое содержание."
)
_CITATION_RE = re.compile(r"\[(\d+)\]")


def _map_structured(rows: Any) -> list[SearchResult]:
    """Validate loosely-typed result rows; rows without any text are dropped."""
    if not isinstance(rows, list):
        return []
    results = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        snippet = (row.get("snippet") or row.get("content") or row.get("body") or "").strip()
        if not snippet:
            continue
        results.append(
            SearchResult(
                title=(row.get("title") or "").strip() or None,
                url=(row.get("url") or row.get("href") or "").strip() or None,
                snippet=snippet,
                source=(row.get("source") or "").strip() or None,
            )
        )
    return results


def _attach_citations(results: list[SearchResult], citations: Any) -> list[SearchResult]:
    """Give URL-less results the URL of their first [n] citation marker."""
    if not isinstance(citations, list) or not citations:
        return results
    out = []
    for r in results:
        match = _CITATION_RE.search(r.snippet) if r.url is None else None
        if match and 1 <= int(match.group(1)) <= len(citations):
            url = str(citations[int(match.group(1)) - 1])
            host = httpx.URL(url).host or None
            r = r.model_copy(update={"url": url, "source": r.source or host})
        out.append(r)
    return out


class SearchClient:
    """Web-search client shared by all requests; built once from Settings."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self.backend = settings.search_backend
        self._http = http_client or httpx.AsyncClient(timeout=settings.search_timeout)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def search(
        self,
        query: str,
        focus: str | None = None,
        system_prompt: str | None = None,
        temperature: float | None = None,
    ) -> list[SearchResult]:
        q = (query or "").strip()
        if not q:
            raise ValueError("search query is required")
        logger.info("[search] IN  backend=%s query=%r", self.backend, q)
        if self.backend == "perplexity_chat":
            results = await self._search_chat(q, system_prompt, temperature)
        elif self.backend == "duckduckgo":
            results = await self._search_ddgs(q)
        else:
            results = await self._search_structured(q, focus)
        logger.info("[search] OUT results=%d urls=%s", len(results), [r.url for r in results[:5]])
        return results

    async def _post(self, path: str, payload: dict[str, Any]) -> Any:
        s = self.settings
        url = f"{s.perplexity_base_url.rstrip('/')}{path}"
        headers = {
            "Authorization": f"Bearer {s.perplexity_api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._http.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error("[search:perplexity] request failed: %s", e)
            raise SearchProviderError(f"Search request failed: {e}") from e
        if not response.is_success:
            logger.error("[search:perplexity] error %s: %s", response.status_code, response.text[:200])
            raise SearchProviderError(
                "Search backend returned an error", status=response.status_code, body=response.text
            )
        try:
            return response.json()
        except ValueError as e:
            raise SearchProviderError(
                "Search backend returned invalid JSON", status=response.status_code, body=response.text
            ) from e

    async def _search_structured(self, query: str, focus: str | None) -> list[SearchResult]:
        s = self.settings
        data = await self._post(
            "/search",
            {
                "query": query,
                "model": s.perplexity_model,
                "focus": focus or s.search_focus,
                "source_filter": s.perplexity_source_filter,
                "include_citations": True,
            },
        )
        rows = data.get("results") if isinstance(data, dict) else None
        return _map_structured(rows)

    async def _search_chat(
        self, query: str, system_prompt: str | None, temperature: float | None
    ) -> list[SearchResult]:
        s = self.settings
        data = await self._post(
            "/chat/completions",
            {
                "model": s.perplexity_chat_model,
                "messages": [
                    {"role": "system", "content": system_prompt or DEFAULT_SEARCH_SYSTEM_PROMPT},
                    {"role": "user", "content": query},
                ],
                "temperature": s.search_temperature if temperature is None else temperature,
            },
        )
        if not isinstance(data, dict):
            return []
        choices = data.get("choices") or []
        message: dict = {}
        if choices and isinstance(choices[0], dict):
            message = choices[0].get("message") or {}
        text = (message.get("content") or "").strip()
        return _attach_citations(segment_into_results(text), data.get("citations"))

    async def _search_ddgs(self, query: str) -> list[SearchResult]:
        max_results = self.settings.search_max_results

        def run() -> list[dict]:
            with DDGS() as ddgs:
                return list(ddgs.text(query, max_results=max_results))

        try:
            rows = await asyncio.to_thread(run)
        except DDGSException as e:
            # ddgs reports an empty result page as an exception
            if "no results" in str(e).lower():
                return []
            logger.error("[search:ddgs] search failed: %s", e)
            raise SearchProviderError(f"Search request failed: {e}") from e
        return _map_structured(rows)
