"""
API handlers: read request data, call services, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Chat errors before the stream
opens become plain-text 400/500 responses; once the stream is open, failures
travel in-band and the response always ends cleanly.
"""

import json
import logging

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse
from pydantic import ValidationError

from search_assistant.core.errors import RequestValidationError
from search_assistant.schemas.chat import ChatRequest
from search_assistant.schemas.search import SearchRequest, SearchResponse
from search_assistant.services.providers import Providers
from search_assistant.services.streamer import sse_events

logger = logging.getLogger(__name__)

MISSING_MESSAGE_TEXT = "Сообщение пользователя отсутствует"
INTERNAL_ERROR_TEXT = "Внутренняя ошибка сервера"
MISSING_QUERY_TEXT = "Отсутствует поисковый запрос"

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
    "X-Content-Type-Options": "nosniff",
}


async def parse_chat_request(request: Request) -> ChatRequest:
    """Parse and validate the body; no usable user message -> RequestValidationError."""
    try:
        chat = ChatRequest.model_validate(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        raise RequestValidationError(f"invalid chat request: {e}") from e
    last = chat.last_user_message()
    if last is None or not last.content.strip():
        raise RequestValidationError("no user message in request")
    return chat


async def handle_chat(request: Request, providers: Providers) -> Response:
    try:
        chat = await parse_chat_request(request)
        query = chat.last_user_message().content.strip()
        stream = providers.streamer.stream_response(
            query,
            history=chat.history_before_last_user(),
            system=chat.system,
        )
    except RequestValidationError as e:
        logger.info("[api:chat] rejected: %s", e.message)
        return PlainTextResponse(MISSING_MESSAGE_TEXT, status_code=400)
    except Exception:
        logger.exception("[api:chat] failed before stream opened")
        return PlainTextResponse(INTERNAL_ERROR_TEXT, status_code=500)
    return StreamingResponse(sse_events(stream), media_type="text/event-stream", headers=SSE_HEADERS)


async def parse_search_request(request: Request) -> SearchRequest:
    """Parse and validate the body; malformed body or blank query -> RequestValidationError."""
    try:
        body = SearchRequest.model_validate(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        raise RequestValidationError(f"invalid search request: {e}") from e
    if not (body.query or "").strip():
        raise RequestValidationError("no search query in request")
    return body


async def handle_search(request: Request, providers: Providers) -> Response:
    try:
        body = await parse_search_request(request)
    except RequestValidationError as e:
        logger.info("[api:search] rejected: %s", e.message)
        return JSONResponse({"error": MISSING_QUERY_TEXT}, status_code=400)
    query = body.query.strip()
    try:
        results = await providers.search.search(query, focus=body.focus)
    except Exception:
        logger.exception("[api:search] search failed query=%r", query)
        return JSONResponse({"error": INTERNAL_ERROR_TEXT}, status_code=500)
    return JSONResponse(SearchResponse(results=results).model_dump())
