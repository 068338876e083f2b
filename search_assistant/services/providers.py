"""
Provider wiring: build the long-lived clients and components once at process
start from Settings and hand them to the API layer through app.state.
"""

import logging
from dataclasses import dataclass

from fastapi import Request

from search_assistant.agent.graph import Orchestrator
from search_assistant.agent.llm import CompletionClient
from search_assistant.agent.planner import Planner
from search_assistant.agent.search import SearchClient
from search_assistant.core.config import Settings
from search_assistant.services.streamer import ResponseStreamer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Providers:
    settings: Settings
    completion: CompletionClient
    search: SearchClient
    orchestrator: Orchestrator
    streamer: ResponseStreamer

    async def aclose(self) -> None:
        await self.completion.aclose()
        await self.search.aclose()


def build_providers(
    settings: Settings,
    completion: CompletionClient | None = None,
    search: SearchClient | None = None,
) -> Providers:
    """Clients may be passed in (tests, alternative backends); otherwise they are built from settings."""
    completion = completion or CompletionClient(settings)
    search = search or SearchClient(settings)
    planner = Planner(completion, settings.plan_search_keywords)
    orchestrator = Orchestrator(planner, search, completion)
    streamer = ResponseStreamer(search, completion, orchestrator, settings.direct_search_keywords)
    logger.info(
        "[providers] built completion_backend=%s search_backend=%s",
        settings.completion_backend, settings.search_backend,
    )
    return Providers(settings, completion, search, orchestrator, streamer)


def get_providers(request: Request) -> Providers:
    return request.app.state.providers
