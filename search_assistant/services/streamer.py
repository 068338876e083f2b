"""
Response streamer: wraps the direct-search path or the agent loop in an
incremental channel of StreamChunks.

Contract of a ResponseStream:
- the first chunk is a status placeholder, emitted before any upstream call;
- on success the answer follows as one content chunk per line;
- on any failure exactly one error chunk with a fixed apology follows instead
  (details are logged, never sent), and the stream still ends normally;
- it can be consumed once; iterating it again yields nothing.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from enum import Enum

from search_assistant.agent.graph import Orchestrator, format_results
from search_assistant.agent.heuristics import is_direct_search_query
from search_assistant.agent.llm import NO_TEXT_FALLBACK, CompletionClient
from search_assistant.agent.search import SearchClient
from search_assistant.core.config import DIRECT_SEARCH_KEYWORDS
from search_assistant.schemas.chat import Message
from search_assistant.schemas.search import SearchMetadata
from search_assistant.schemas.stream import StreamChunk

logger = logging.getLogger(__name__)


class StreamMode(str, Enum):
    DIRECT_SEARCH = "direct-search"
    AGENT = "agent"


STATUS_TEXT = {
    StreamMode.DIRECT_SEARCH: "Выполняем поиск...",
    StreamMode.AGENT: "Обрабатываю ваш запрос...",
}
ERROR_TEXT = {
    StreamMode.DIRECT_SEARCH: "Произошла ошибка при выполнении поиска. Пожалуйста, попробуйте позже.",
    StreamMode.AGENT: "Произошла ошибка при обработке вашего запроса. Пожалуйста, попробуйте позже.",
}
MODEL_NO_TEXT = "Не удалось получить текстовый ответ от модели."
SEARCH_ANSWER_SYSTEM_PROMPT = (
    "Ты AI-помощник с доступом к поисковым результатам. Твоя задача - давать точные, "
    "полезные ответы на запросы пользователей на русском языке."
)


def split_lines(text: str) -> list[str]:
    """One entry per line; empty text still yields one (empty) line."""
    return text.splitlines() or [text]


def frame_data(text: str) -> str:
    """SSE frame for one chunk: marker prefix, blank-line terminator."""
    return f"data: {text}\n\n"


def frame_metadata(metadata: SearchMetadata) -> str:
    """Named SSE event; clients reading only default message events skip it."""
    return f"event: search_results\ndata: {metadata.model_dump_json()}\n\n"


class ResponseStream:
    """Single-consumer async channel of StreamChunk with a search-metadata side value."""

    def __init__(
        self,
        streamer: "ResponseStreamer",
        query: str,
        mode: StreamMode,
        history: Sequence[Message],
        system: str | None,
    ) -> None:
        self.query = query
        self.mode = mode
        self.metadata: SearchMetadata | None = None
        self._streamer = streamer
        self._history = list(history)
        self._system = system
        self._chunks = self._produce()

    def __aiter__(self) -> AsyncIterator[StreamChunk]:
        return self._chunks

    async def aclose(self) -> None:
        await self._chunks.aclose()

    async def _produce(self) -> AsyncIterator[StreamChunk]:
        yield StreamChunk(kind="status", text=STATUS_TEXT[self.mode])
        try:
            if self.mode is StreamMode.DIRECT_SEARCH:
                text = await self._direct_search()
            else:
                text = await self._agent()
        except Exception:
            logger.exception("[streamer] %s request failed query=%r", self.mode.value, self.query)
            self.metadata = None
            yield StreamChunk(kind="error", text=ERROR_TEXT[self.mode])
            return
        for line in split_lines(text):
            yield StreamChunk(kind="content", text=line)
        logger.info("[streamer] END mode=%s text_len=%d", self.mode.value, len(text))

    async def _direct_search(self) -> str:
        results = await self._streamer.search.search(self.query)
        self.metadata = SearchMetadata(query=self.query, results=results)
        prompt = (
            f'Вот мой запрос: "{self.query}"\n\n'
            f"И вот результаты поиска: {format_results(results)}\n\n"
            "Пожалуйста, ответь на мой запрос на основе этих результатов. "
            "Будь краток и информативен. Ответ давай на русском языке."
        )
        messages = [*self._history, Message(role="user", content=prompt)]
        return await self._streamer.completion.complete(
            messages,
            system_prompt=self._system or SEARCH_ANSWER_SYSTEM_PROMPT,
            fallback=MODEL_NO_TEXT,
        )

    async def _agent(self) -> str:
        result = await self._streamer.orchestrator.run(self.query)
        if result.search_query:
            self.metadata = SearchMetadata(query=result.search_query, results=result.search_results)
        if not result.response or result.response == NO_TEXT_FALLBACK:
            return MODEL_NO_TEXT
        return result.response


class ResponseStreamer:
    def __init__(
        self,
        search: SearchClient,
        completion: CompletionClient,
        orchestrator: Orchestrator,
        direct_search_keywords: Sequence[str] = DIRECT_SEARCH_KEYWORDS,
    ) -> None:
        self.search = search
        self.completion = completion
        self.orchestrator = orchestrator
        self.direct_search_keywords = tuple(direct_search_keywords)

    def select_mode(self, query: str) -> StreamMode:
        if is_direct_search_query(query, self.direct_search_keywords):
            return StreamMode.DIRECT_SEARCH
        return StreamMode.AGENT

    def stream_response(
        self,
        query: str,
        mode: StreamMode | None = None,
        history: Sequence[Message] = (),
        system: str | None = None,
    ) -> ResponseStream:
        """Open a stream for the query. Nothing runs until the stream is iterated."""
        mode = mode or self.select_mode(query)
        logger.info("[streamer] OPEN mode=%s query=%r history_len=%d", mode.value, query, len(history))
        return ResponseStream(self, query, mode, history, system)


async def sse_events(stream: ResponseStream) -> AsyncIterator[str]:
    """Frame a ResponseStream for text/event-stream; metadata goes last, when search happened."""
    async for chunk in stream:
        yield frame_data(chunk.text)
    if stream.metadata is not None:
        yield frame_metadata(stream.metadata)
