"""Schemas produced by the planner and the agent loop."""

from pydantic import BaseModel, ConfigDict, Field

from search_assistant.schemas.search import SearchResult


class PlanStep(BaseModel):
    """One line of the action plan."""

    model_config = ConfigDict(frozen=True)

    description: str
    needs_search: bool = False
    query: str = ""


class Plan(BaseModel):
    """Ordered plan steps for one request. May be empty."""

    model_config = ConfigDict(frozen=True)

    steps: tuple[PlanStep, ...] = ()


class AgentResult(BaseModel):
    """Final answer plus the accumulated context and plan, for observability."""

    response: str
    context: str
    plan: Plan
    search_query: str | None = None
    search_results: list[SearchResult] = Field(default_factory=list)
