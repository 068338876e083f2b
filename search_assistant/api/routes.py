"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from search_assistant.api.handlers import handle_chat, handle_search
from search_assistant.schemas.search import SearchResponse
from search_assistant.services.providers import Providers, get_providers

router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Search assistant backend running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Chat (SSE) ---

@router.post(
    "/api/chat",
    tags=["chat"],
    summary="Chat with the search assistant (SSE stream)",
    description=(
        "Body: {messages: [{role, content}], system?}. Streams `data:` frames: a status placeholder, "
        "then the answer one line per frame (or one apology frame on failure). When search happened, "
        "a final `search_results` event carries {query, results}. 400 plain text when there is no user "
        "message, 500 plain text on failure before the stream opens."
    ),
)
async def post_chat(request: Request, providers: Providers = Depends(get_providers)) -> Response:
    return await handle_chat(request, providers)


# --- Search ---

@router.post(
    "/api/search",
    tags=["search"],
    summary="Run one web search",
    description=(
        "Return {results} for {query, focus?}. 400 JSON {error} on a malformed body or empty query, "
        "500 JSON {error} on provider failure."
    ),
    response_model=SearchResponse,
)
async def post_search(request: Request, providers: Providers = Depends(get_providers)) -> Response:
    return await handle_search(request, providers)
