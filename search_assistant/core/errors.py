"""
Application errors for clean API error handling.

RequestValidationError is raised before a stream opens and maps to 400.
UpstreamProviderError (search / completion backends) is caught at the response
streamer and turned into one in-band apology chunk. NoTextContentError never
leaves the completion layer: callers get a fallback sentence instead.
"""


class AssistantError(Exception):
    """Base class for errors raised by the assistant core."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RequestValidationError(AssistantError):
    """Raised when the chat request carries no usable user message."""


class UpstreamProviderError(AssistantError):
    """Raised when a remote provider fails at the transport or HTTP level."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None) -> None:
        self.status = status
        self.body = body
        super().__init__(message)

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (status={self.status}): {(self.body or '')[:200]}"


class SearchProviderError(UpstreamProviderError):
    """Search backend failure. Carries the upstream status and body when there was a response."""


class CompletionProviderError(UpstreamProviderError):
    """Completion backend failure."""


class NoTextContentError(AssistantError):
    """The completion response contained no text-typed content block."""
