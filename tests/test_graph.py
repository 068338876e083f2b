"""
Agent loop tests: plan → search/summarize → synthesize, with fake backends.
"""

import pytest

from search_assistant.agent.graph import (
    ANALYSIS_SYSTEM_PROMPT,
    NO_RESULTS_TEXT,
    NO_SUMMARY_TEXT,
    Orchestrator,
    seed_context,
)
from search_assistant.agent.llm import NO_TEXT_FALLBACK
from search_assistant.agent.planner import PLANNER_SYSTEM_PROMPT, Planner
from search_assistant.core.errors import CompletionProviderError, SearchProviderError


@pytest.fixture
def orchestrator(completion_client, search_client) -> Orchestrator:
    return Orchestrator(Planner(completion_client), search_client, completion_client)


@pytest.mark.asyncio
async def test_two_step_plan_accumulates_context_in_order(orchestrator, completion_backend, search_backend) -> None:
    completion_backend.replies[PLANNER_SYSTEM_PROMPT] = "Найди информацию о котах\nОтветь вежливо"

    result = await orchestrator.run("Расскажи о котах")

    assert result.response == "Финальный ответ"
    assert completion_backend.kinds() == ["plan", "summary", "final"]
    assert [r["query"] for r in search_backend.requests] == ["о котах"]
    assert result.context.startswith(seed_context("Расскажи о котах"))
    search_block = 'Результаты поиска по запросу "о котах":\nКраткая сводка'
    step_block = "Шаг плана: Ответь вежливо"
    assert search_block in result.context
    assert step_block in result.context
    assert result.context.index(search_block) < result.context.index(step_block)
    assert result.search_query == "о котах"
    assert [r.url for r in result.search_results] == ["https://example.org/cats"]
    assert len(result.plan.steps) == 2


@pytest.mark.asyncio
async def test_summary_sees_context_of_previous_steps(orchestrator, completion_backend) -> None:
    completion_backend.replies[PLANNER_SYSTEM_PROMPT] = "Понять вопрос\nНайти информацию о породах"

    await orchestrator.run("Какие бывают коты?")

    summary_request = completion_backend.requests[1]
    prompt = summary_request["messages"][0]["content"]
    assert "Шаг плана: Понять вопрос" in prompt
    assert "https://example.org/cats" in prompt
    final_prompt = completion_backend.requests[2]["messages"][0]["content"]
    assert "Краткая сводка" in final_prompt


@pytest.mark.asyncio
async def test_empty_plan_synthesizes_from_seed_context(orchestrator, completion_backend, search_backend) -> None:
    completion_backend.replies[PLANNER_SYSTEM_PROMPT] = None

    result = await orchestrator.run("Привет")

    assert result.plan.steps == ()
    assert result.context == seed_context("Привет")
    assert completion_backend.kinds() == ["plan", "final"]
    assert search_backend.requests == []
    assert result.search_query is None


@pytest.mark.asyncio
async def test_empty_search_results_still_summarized(orchestrator, completion_backend, search_backend) -> None:
    completion_backend.replies[PLANNER_SYSTEM_PROMPT] = "Поиск: редкие породы"
    search_backend.rows = []

    result = await orchestrator.run("Редкие породы котов")

    assert completion_backend.kinds() == ["plan", "summary", "final"]
    assert NO_RESULTS_TEXT in completion_backend.requests[1]["messages"][0]["content"]
    assert result.search_results == []
    assert result.response == "Финальный ответ"


@pytest.mark.asyncio
async def test_search_failure_propagates(orchestrator, completion_backend, search_backend) -> None:
    completion_backend.replies[PLANNER_SYSTEM_PROMPT] = "Найди информацию о котах"
    search_backend.status = 503

    with pytest.raises(SearchProviderError) as exc_info:
        await orchestrator.run("Расскажи о котах")
    assert exc_info.value.status == 503
    assert completion_backend.kinds() == ["plan"]


@pytest.mark.asyncio
async def test_planner_failure_propagates(orchestrator, completion_backend) -> None:
    completion_backend.status = 500

    with pytest.raises(CompletionProviderError):
        await orchestrator.run("Расскажи о котах")


@pytest.mark.asyncio
async def test_summary_without_text_is_marked_in_context(orchestrator, completion_backend) -> None:
    completion_backend.replies[PLANNER_SYSTEM_PROMPT] = "Найди информацию о котах"
    completion_backend.replies[ANALYSIS_SYSTEM_PROMPT] = None

    result = await orchestrator.run("Расскажи о котах")

    assert f'Результаты поиска по запросу "о котах":\n{NO_SUMMARY_TEXT}' in result.context
    assert NO_TEXT_FALLBACK not in result.context
    final_prompt = completion_backend.requests[2]["messages"][0]["content"]
    assert NO_TEXT_FALLBACK not in final_prompt


@pytest.mark.asyncio
async def test_search_metadata_pairs_last_query_with_its_results(orchestrator, completion_backend, search_backend) -> None:
    completion_backend.replies[PLANNER_SYSTEM_PROMPT] = "Найди информацию о котах\nНайди информацию о собаках"
    search_backend.rows_by_query["о собаках"] = [
        {"title": "Собаки", "url": "https://example.org/dogs", "snippet": "Всё о собаках"},
    ]

    result = await orchestrator.run("Коты или собаки?")

    assert [r["query"] for r in search_backend.requests] == ["о котах", "о собаках"]
    assert result.search_query == "о собаках"
    assert [r.url for r in result.search_results] == ["https://example.org/dogs"]
