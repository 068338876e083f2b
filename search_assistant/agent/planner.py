"""
Planner: ask the completion provider for a short action plan and parse it
line by line into PlanSteps.
"""

import logging
from collections.abc import Sequence

from search_assistant.agent.heuristics import classify_needs_search, extract_search_query
from search_assistant.agent.llm import CompletionClient
from search_assistant.core.config import PLAN_SEARCH_KEYWORDS
from search_assistant.schemas.agent import Plan, PlanStep
from search_assistant.schemas.chat import Message

logger = logging.getLogger(__name__)

PLANNER_SYSTEM_PROMPT = "Ты помощник, который анализирует запросы и составляет план действий для ответа на них."


def parse_plan(text: str, keywords: Sequence[str] = PLAN_SEARCH_KEYWORDS) -> Plan:
    """One step per non-blank line; search steps get a sub-query extracted from the line."""
    steps = []
    for line in (text or "").splitlines():
        description = line.strip()
        if not description:
            continue
        needs_search = classify_needs_search(description, keywords)
        steps.append(
            PlanStep(
                description=description,
                needs_search=needs_search,
                query=extract_search_query(description, keywords) if needs_search else "",
            )
        )
    return Plan(steps=tuple(steps))


class Planner:
    def __init__(self, completion: CompletionClient, keywords: Sequence[str] = PLAN_SEARCH_KEYWORDS) -> None:
        self.completion = completion
        self.keywords = tuple(keywords)

    async def plan(self, query: str) -> Plan:
        """Returns an empty plan when the model produced no text."""
        logger.info("[planner:plan] IN  query=%r", query)
        prompt = (
            f"Запрос пользователя: {query}\n\n"
            "Составь план действий для ответа на этот запрос. Если нужен поиск, укажи это явно."
        )
        response = await self.completion.create(
            [Message(role="user", content=prompt)],
            system_prompt=PLANNER_SYSTEM_PROMPT,
        )
        text = response.first_text()
        if text is None:
            logger.warning("[planner:plan] no text block; using empty plan")
            return Plan()
        plan = parse_plan(text, self.keywords)
        logger.info(
            "[planner:plan] OUT steps=%d search_steps=%s",
            len(plan.steps), [s.query for s in plan.steps if s.needs_search],
        )
        return plan
