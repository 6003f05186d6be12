"""Ponder - think it over before answering."""

from .client import CompletionClient
from .config import Settings, get_settings
from .core import ConversationResult, ReasoningOrchestrator
from .store import ConversationStore
from .types import FileContent, Message, Role

__version__ = "0.1.0"

__all__ = [
    "CompletionClient",
    "ConversationResult",
    "ConversationStore",
    "FileContent",
    "Message",
    "ReasoningOrchestrator",
    "Role",
    "Settings",
    "get_settings",
]
