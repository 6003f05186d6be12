"""Core module for Ponder."""

from .orchestrator import ConversationResult, ReasoningOrchestrator
from .thinking import strip_thought, wrap_thought

__all__ = ["ConversationResult", "ReasoningOrchestrator", "strip_thought", "wrap_thought"]
