"""
Shared fixtures: deterministic fake backends behind httpx.MockTransport, so the
real provider clients, planner, graph and streamer run without network access.
"""

import json

import httpx
import pytest

from search_assistant.agent.graph import ANALYSIS_SYSTEM_PROMPT, FINAL_SYSTEM_PROMPT
from search_assistant.agent.llm import CompletionClient
from search_assistant.agent.planner import PLANNER_SYSTEM_PROMPT
from search_assistant.agent.search import SearchClient
from search_assistant.core.config import Settings
from search_assistant.services.providers import build_providers


class FakeCompletionBackend:
    """Anthropic-style /v1/messages stub. Picks the reply by the system prompt of the request."""

    def __init__(
        self,
        plan: str | None = "Ответь вежливо",
        summary: str = "Краткая сводка",
        final: str = "Финальный ответ",
        answer: str = "Ответ по результатам поиска",
        status: int = 200,
    ) -> None:
        self.replies = {
            PLANNER_SYSTEM_PROMPT: plan,
            ANALYSIS_SYSTEM_PROMPT: summary,
            FINAL_SYSTEM_PROMPT: final,
        }
        self.answer = answer
        self.status = status
        self.requests: list[dict] = []

    def kinds(self) -> list[str]:
        names = {PLANNER_SYSTEM_PROMPT: "plan", ANALYSIS_SYSTEM_PROMPT: "summary", FINAL_SYSTEM_PROMPT: "final"}
        return [names.get(r["system"], "answer") for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        if self.status != 200:
            return httpx.Response(self.status, text="upstream exploded")
        text = self.replies.get(body["system"], self.answer)
        if text is None:
            content = [{"type": "tool_use", "id": "t1", "name": "noop", "input": {}}]
        else:
            content = [{"type": "text", "text": text}]
        return httpx.Response(200, json={"content": content, "model": body["model"], "stop_reason": "end_turn"})


class FakeSearchBackend:
    """Perplexity-style /search stub returning fixed rows (or an error status)."""

    def __init__(self, rows: list[dict] | None = None, status: int = 200) -> None:
        self.rows = rows if rows is not None else [
            {"title": "Коты", "url": "https://example.org/cats", "snippet": "Всё о котах", "source": "example"},
        ]
        self.rows_by_query: dict[str, list[dict]] = {}
        self.status = status
        self.requests: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        if self.status != 200:
            return httpx.Response(self.status, text="search is down")
        return httpx.Response(200, json={"results": self.rows_by_query.get(body["query"], self.rows)})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        completion_backend="anthropic",
        anthropic_api_key="test-key",
        anthropic_base_url="https://llm.test",
        search_backend="perplexity",
        perplexity_api_key="test-key",
        perplexity_base_url="https://search.test",
    )


@pytest.fixture
def completion_backend() -> FakeCompletionBackend:
    return FakeCompletionBackend()


@pytest.fixture
def search_backend() -> FakeSearchBackend:
    return FakeSearchBackend()


@pytest.fixture
def completion_client(settings, completion_backend) -> CompletionClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(completion_backend))
    return CompletionClient(settings, http_client=http)


@pytest.fixture
def search_client(settings, search_backend) -> SearchClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(search_backend))
    return SearchClient(settings, http_client=http)


@pytest.fixture
def providers(settings, completion_client, search_client):
    return build_providers(settings, completion=completion_client, search=search_client)
