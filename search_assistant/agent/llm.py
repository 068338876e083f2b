"""
Completion provider client: Anthropic Messages API (primary) or OpenAI chat completions.

One network call per request, no retry. Responses are validated into
CompletionResponse before anything else sees them.
"""

import logging
from collections.abc import Sequence

import httpx
from openai import AsyncOpenAI, OpenAIError

from search_assistant.core.config import Settings
from search_assistant.core.errors import CompletionProviderError, NoTextContentError
from search_assistant.schemas.chat import Message
from search_assistant.schemas.completion import CompletionResponse, ContentBlock

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "Ты AI агент с доступом к поиску. Отвечай точно, кратко и по существу."
NO_TEXT_FALLBACK = "Не удалось получить текстовый ответ от API"


def _to_wire_messages(messages: Sequence[Message]) -> list[dict[str, str]]:
    """Drop system turns (the instruction travels separately) and map roles to user/assistant."""
    return [
        {"role": "user" if m.role == "user" else "assistant", "content": m.content}
        for m in messages
        if m.role != "system"
    ]


class CompletionClient:
    """Chat-completion client shared by all requests; built once from Settings."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        openai_client: AsyncOpenAI | None = None,
    ) -> None:
        self.settings = settings
        self.backend = settings.completion_backend
        self._http = http_client or httpx.AsyncClient(timeout=settings.llm_timeout)
        self._openai = openai_client
        if self.backend == "openai" and self._openai is None:
            self._openai = AsyncOpenAI(
                api_key=settings.openai_api_key or None,
                base_url=settings.openai_base_url or None,
                timeout=settings.llm_timeout,
                max_retries=0,
                http_client=http_client,
            )

    async def aclose(self) -> None:
        await self._http.aclose()
        if self._openai is not None:
            await self._openai.close()

    async def create(
        self,
        messages: Sequence[Message],
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        max_tokens: int | None = None,
    ) -> CompletionResponse:
        """Send one completion request and return the validated content blocks."""
        wire = _to_wire_messages(messages)
        if not wire:
            raise ValueError("at least one user or assistant message is required")
        max_tokens = max_tokens or self.settings.completion_max_tokens
        logger.info(
            "[llm:create] IN  backend=%s messages=%d system_len=%d max_tokens=%d",
            self.backend, len(wire), len(system_prompt or ""), max_tokens,
        )
        if self.backend == "openai":
            response = await self._call_openai(wire, system_prompt, max_tokens)
        else:
            response = await self._call_anthropic(wire, system_prompt, max_tokens)
        logger.info(
            "[llm:create] OUT blocks=%s stop_reason=%s",
            [b.type for b in response.content], response.stop_reason,
        )
        return response

    async def complete(
        self,
        messages: Sequence[Message],
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        max_tokens: int | None = None,
        fallback: str = NO_TEXT_FALLBACK,
    ) -> str:
        """
        Return the text of the first text block.
        When the response has no text block, return `fallback` instead of raising.
        """
        response = await self.create(messages, system_prompt or DEFAULT_SYSTEM_PROMPT, max_tokens)
        try:
            text = response.require_text()
        except NoTextContentError:
            logger.warning("[llm:complete] no text block in response; returning fallback")
            return fallback
        logger.info("[llm:complete] OUT text_len=%d", len(text))
        return text

    async def _call_anthropic(
        self, wire: list[dict[str, str]], system_prompt: str, max_tokens: int
    ) -> CompletionResponse:
        s = self.settings
        url = f"{s.anthropic_base_url.rstrip('/')}/v1/messages"
        headers = {
            "x-api-key": s.anthropic_api_key,
            "anthropic-version": s.anthropic_version,
            "content-type": "application/json",
        }
        payload = {
            "model": s.anthropic_model,
            "max_tokens": max_tokens,
            "system": system_prompt,
            "messages": wire,
        }
        try:
            response = await self._http.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error("[llm:anthropic] request failed: %s", e)
            raise CompletionProviderError(f"Completion request failed: {e}") from e
        if response.status_code != 200:
            logger.error("[llm:anthropic] error %s: %s", response.status_code, response.text[:200])
            raise CompletionProviderError(
                "Completion backend returned an error", status=response.status_code, body=response.text
            )
        try:
            return CompletionResponse.model_validate(response.json())
        except ValueError as e:
            raise CompletionProviderError(
                f"Malformed completion response: {e}", status=response.status_code, body=response.text
            ) from e

    async def _call_openai(
        self, wire: list[dict[str, str]], system_prompt: str, max_tokens: int
    ) -> CompletionResponse:
        messages = [{"role": "system", "content": system_prompt}, *wire]
        try:
            response = await self._openai.chat.completions.create(
                model=self.settings.openai_model,
                messages=messages,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            logger.error("[llm:openai] request failed: %s", e)
            status = getattr(e, "status_code", None)
            raise CompletionProviderError(f"Completion request failed: {e}", status=status) from e
        choice = response.choices[0] if response.choices else None
        content = getattr(choice.message, "content", None) if choice else None
        blocks = [ContentBlock(type="text", text=content)] if content else []
        return CompletionResponse(
            content=blocks,
            model=response.model,
            stop_reason=getattr(choice, "finish_reason", None),
        )
