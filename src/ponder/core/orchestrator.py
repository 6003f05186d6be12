"""Iterative reasoning and finalization loop."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from ponder.client import CompletionClient
from ponder.config import Settings
from ponder.core.prompt import (
    FINALIZE_SYSTEM_PROMPT,
    KEEP_THINKING_PROMPT,
    REASONING_SYSTEM_PROMPT,
    render_file_context,
)
from ponder.core.thinking import strip_thought, wrap_thought
from ponder.errors import ValidationError
from ponder.store import ConversationStore
from ponder.types import FileContent, Message, Role

ThoughtHandler = Callable[[int, str], None]


class Renderer(Protocol):
    def render(self, text: str) -> None: ...


@dataclass(frozen=True)
class ConversationResult:
    """Result of one answered query."""

    messages: list[Message]
    answer: str
    conversation_id: str | None = None


class ReasoningOrchestrator:
    """Runs private reasoning rounds, then asks the model for a public answer."""

    def __init__(
        self,
        client: CompletionClient,
        settings: Settings,
        *,
        store: ConversationStore | None = None,
        renderer: Renderer | None = None,
        on_thought: ThoughtHandler | None = None,
    ) -> None:
        self._client = client
        self._settings = settings
        self._store = store
        self._renderer = renderer
        self._on_thought = on_thought

    def respond(
        self,
        query: str | None,
        *,
        conversation_id: str | None = None,
        files: Sequence[FileContent] = (),
        rounds: int | None = None,
        save: bool = False,
    ) -> ConversationResult:
        """Answer one query, optionally resuming and saving a stored conversation."""
        if conversation_id is None and not query:
            raise ValidationError("a query is required unless continuing a conversation")

        history: list[Message] = []
        if conversation_id is not None:
            history = self._require_store().load(conversation_id)

        if rounds is None:
            rounds = self._settings.rounds
        messages = self.run_conversation(history, query, rounds, files)

        saved_id: str | None = None
        if save:
            saved_id = self._require_store().save(messages, conversation_id)
        return ConversationResult(messages=messages, answer=messages[-1].content, conversation_id=saved_id)

    def run_conversation(
        self,
        initial_messages: Iterable[Message],
        query: str | None,
        rounds: int,
        files: Sequence[FileContent] = (),
    ) -> list[Message]:
        if rounds < 1:
            raise ValidationError(f"rounds must be at least 1, got {rounds}")

        messages = list(initial_messages)
        if not messages or messages[0].role is not Role.SYSTEM:
            messages.insert(0, Message.system(REASONING_SYSTEM_PROMPT))
        messages.extend(Message.user(render_file_context(item)) for item in files)
        if query:
            messages.append(Message.user(query))

        for round_no in range(1, rounds + 1):
            logger.info("orchestrator.round round={}/{} model={}", round_no, rounds, self._settings.model)
            raw = self._client.get_completion(messages, max_tokens=self._settings.reasoning_max_tokens)
            thought = strip_thought(raw)
            messages.append(Message.assistant(wrap_thought(thought)))
            if self._on_thought is not None:
                self._on_thought(round_no, thought)
            if round_no < rounds:
                messages.append(Message.system(KEEP_THINKING_PROMPT))

        messages.append(Message.system(FINALIZE_SYSTEM_PROMPT))
        logger.info("orchestrator.finalize rounds={} model={}", rounds, self._settings.model)
        answer = self._client.get_completion(messages)
        if self._renderer is not None:
            self._renderer.render(answer)
        messages.append(Message.assistant(answer))
        return messages

    def _require_store(self) -> ConversationStore:
        if self._store is None:
            raise ValidationError("no conversation store configured")
        return self._store
