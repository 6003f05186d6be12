"""Application-level exception types for Ponder."""

from __future__ import annotations


class PonderError(Exception):
    """Base exception for Ponder."""


class ValidationError(PonderError):
    """Raised when command-line input or configuration is invalid."""


class RemoteError(PonderError):
    """Raised when the completion endpoint returns a non-success response."""

    def __init__(self, status: int | None, reason: str) -> None:
        self.status = status
        self.reason = reason
        super().__init__(f"remote call failed: {status} {reason}" if status is not None else reason)


class CompletionError(RemoteError):
    """Raised when a completion request fails or returns an unexpected shape."""

    def __init__(self, status: int | None, reason: str, body: str = "") -> None:
        super().__init__(status, reason)
        self.body = body

    def __str__(self) -> str:
        message = super().__str__()
        if self.body:
            return f"{message}\n{self.body}"
        return message


class ConversationNotFoundError(PonderError):
    """Raised when a saved conversation does not exist."""

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        super().__init__(f"conversation not found: {conversation_id}")


class CorruptConversationError(PonderError):
    """Raised when a saved conversation cannot be decoded."""

    def __init__(self, conversation_id: str, detail: str) -> None:
        self.conversation_id = conversation_id
        self.detail = detail
        super().__init__(f"conversation {conversation_id} is corrupt: {detail}")
