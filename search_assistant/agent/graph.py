"""
LangGraph agent: plan → execute steps one by one (search + summarize, or note) → synthesize.

Strictly sequential: each step's summary is written against the context built
by the previous steps. Any provider error propagates out of run().
"""

import json
import logging
from typing import Literal, TypedDict

from langgraph.graph import END, StateGraph

from search_assistant.agent.llm import CompletionClient
from search_assistant.agent.planner import Planner
from search_assistant.agent.search import SearchClient
from search_assistant.schemas.agent import AgentResult, Plan, PlanStep
from search_assistant.schemas.chat import Message
from search_assistant.schemas.search import SearchResult

logger = logging.getLogger(__name__)

# Each plan step is one graph super-step; this bounds plans at a few hundred lines.
RECURSION_LIMIT = 500

ANALYSIS_SYSTEM_PROMPT = "Твоя задача - проанализировать результаты поиска и выделить наиболее важную информацию."
FINAL_SYSTEM_PROMPT = "Составь информативный и полезный ответ на основе предоставленного контекста."
NO_RESULTS_TEXT = "ничего не найдено (поиск не вернул результатов)"
NO_SUMMARY_TEXT = "сводка по результатам поиска недоступна (модель не вернула текст)"


class AgentState(TypedDict):
    query: str
    plan: Plan
    step_index: int
    context: str
    search_query: str | None
    search_results: list[SearchResult]
    response: str


def seed_context(query: str) -> str:
    return f"Исходный запрос: {query}\n\n"


def format_results(results: list[SearchResult]) -> str:
    """JSON for the prompt, or an explicit no-results marker."""
    if not results:
        return NO_RESULTS_TEXT
    return json.dumps([r.model_dump(exclude_none=True) for r in results], ensure_ascii=False)


class Orchestrator:
    """Runs the plan / search / synthesize loop for one query at a time; holds no per-request state."""

    def __init__(self, planner: Planner, search: SearchClient, completion: CompletionClient) -> None:
        self.planner = planner
        self.search = search
        self.completion = completion
        self.graph = self._build_graph()

    async def _plan_node(self, state: AgentState) -> dict:
        plan = await self.planner.plan(state["query"])
        logger.info("[graph:plan] OUT steps=%d", len(plan.steps))
        return {"plan": plan, "step_index": 0, "context": seed_context(state["query"])}

    async def _execute_step_node(self, state: AgentState) -> dict:
        index = state["step_index"]
        step: PlanStep = state["plan"].steps[index]
        context = state["context"]
        logger.info("[graph:execute_step] IN  step=%d needs_search=%s", index + 1, step.needs_search)
        if not step.needs_search:
            return {"step_index": index + 1, "context": context + f"\nШаг плана: {step.description}\n"}

        results = await self.search.search(step.query)
        logger.info("[graph:execute_step] search query=%r results=%d", step.query, len(results))
        prompt = (
            f"Контекст: {context}\n\n"
            f"Результаты поиска: {format_results(results)}\n\n"
            "Проанализируй эти результаты и выдели ключевую информацию, относящуюся к контексту."
        )
        summary = await self.completion.complete(
            [Message(role="user", content=prompt)],
            system_prompt=ANALYSIS_SYSTEM_PROMPT,
            fallback=NO_SUMMARY_TEXT,
        )
        logger.info("[graph:execute_step] OUT summary_len=%d", len(summary))
        return {
            "step_index": index + 1,
            "context": context + f'\nРезультаты поиска по запросу "{step.query}":\n{summary}\n\n',
            "search_query": step.query,
            "search_results": results,
        }

    async def _synthesize_node(self, state: AgentState) -> dict:
        context = state["context"]
        logger.info("[graph:synthesize] IN  context_len=%d", len(context))
        prompt = f"Контекст: {context}\n\nСоставь финальный ответ для пользователя на основе этого контекста."
        response = await self.completion.complete(
            [Message(role="user", content=prompt)], system_prompt=FINAL_SYSTEM_PROMPT
        )
        logger.info("[graph:synthesize] OUT response_len=%d", len(response))
        return {"response": response}

    @staticmethod
    def _route_next(state: AgentState) -> Literal["execute_step", "synthesize"]:
        if state["step_index"] < len(state["plan"].steps):
            return "execute_step"
        return "synthesize"

    def _build_graph(self):
        """plan → (execute_step)* → synthesize → END."""
        graph = StateGraph(AgentState)

        graph.add_node("plan", self._plan_node)
        graph.add_node("execute_step", self._execute_step_node)
        graph.add_node("synthesize", self._synthesize_node)

        graph.set_entry_point("plan")
        graph.add_conditional_edges("plan", self._route_next)
        graph.add_conditional_edges("execute_step", self._route_next)
        graph.add_edge("synthesize", END)

        return graph.compile()

    async def run(self, query: str) -> AgentResult:
        q = (query or "").strip()
        if not q:
            raise ValueError("query is required")
        logger.info("[run_agent] START query=%r", q)
        initial: AgentState = {
            "query": q,
            "plan": Plan(),
            "step_index": 0,
            "context": "",
            "search_query": None,
            "search_results": [],
            "response": "",
        }
        final = await self.graph.ainvoke(initial, config={"recursion_limit": RECURSION_LIMIT})
        logger.info(
            "[run_agent] END steps=%d context_len=%d response_len=%d",
            len(final["plan"].steps), len(final["context"]), len(final["response"]),
        )
        return AgentResult(
            response=final["response"],
            context=final["context"],
            plan=final["plan"],
            search_query=final.get("search_query"),
            search_results=final.get("search_results") or [],
        )
