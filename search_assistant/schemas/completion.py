"""Validated shape of a completion backend response."""

from pydantic import BaseModel, ConfigDict, Field

from search_assistant.core.errors import NoTextContentError


class ContentBlock(BaseModel):
    """Typed content block. Non-text blocks (tool_use, images) keep only their type."""

    model_config = ConfigDict(extra="ignore")

    type: str
    text: str | None = None


class CompletionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: list[ContentBlock] = Field(default_factory=list)
    model: str | None = None
    stop_reason: str | None = None

    def first_text(self) -> str | None:
        """Text of the first text-typed block, or None when there is none."""
        for block in self.content:
            if block.type == "text" and block.text is not None:
                return block.text
        return None

    def require_text(self) -> str:
        text = self.first_text()
        if text is None:
            raise NoTextContentError("completion response contains no text block")
        return text
