"""Schemas for the chat endpoint."""

from typing import Literal

from pydantic import BaseModel, Field


class Message(BaseModel):
    """One conversation turn as sent by the chat client."""

    role: Literal["user", "assistant", "system"] = Field(..., description="Author of the turn.")
    content: str = Field("", description="Plain-text content of the turn.")


class ChatRequest(BaseModel):
    """Request body for POST /api/chat. History is sent by the client on every call and never stored."""

    messages: list[Message] = Field(default_factory=list, description="Conversation so far, oldest first.")
    system: str | None = Field(None, description="Optional system instruction overriding the default one.")

    def last_user_message(self) -> Message | None:
        """Return the trailing user turn, or None when the conversation has none."""
        for message in reversed(self.messages):
            if message.role == "user":
                return message
        return None

    def history_before_last_user(self) -> list[Message]:
        """Messages preceding the trailing user turn."""
        for i in range(len(self.messages) - 1, -1, -1):
            if self.messages[i].role == "user":
                return list(self.messages[:i])
        return list(self.messages)
