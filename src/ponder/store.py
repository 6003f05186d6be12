"""Persistent conversation store."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from ponder.errors import ConversationNotFoundError, CorruptConversationError, ValidationError
from ponder.types import PERSISTED_ROLES, Message, Role

CONVERSATION_FILE_SUFFIX = ".json"
CONVERSATION_ID_LENGTH = 8


def persisted_messages(messages: Iterable[Message]) -> list[Message]:
    """Drop control-plane system messages, keeping user and assistant turns."""
    return [message for message in messages if message.role in PERSISTED_ROLES]


def serialize_messages(messages: Iterable[Message]) -> bytes:
    payload = [message.to_payload() for message in messages]
    # Lone surrogates are written as JSON \u escapes so the file stays valid UTF-8.
    return json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8", errors="backslashreplace")


def conversation_id_for(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()[:CONVERSATION_ID_LENGTH]


class ConversationStore:
    """One JSON file per conversation under a storage root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def path_for(self, conversation_id: str) -> Path:
        if not conversation_id or conversation_id in {".", ".."} or "/" in conversation_id or "\\" in conversation_id:
            raise ValidationError(f"invalid conversation id: {conversation_id!r}")
        return self.root / f"{conversation_id}{CONVERSATION_FILE_SUFFIX}"

    def save(self, messages: Iterable[Message], conversation_id: str | None = None) -> str:
        payload = serialize_messages(persisted_messages(messages))
        if conversation_id is None:
            conversation_id = conversation_id_for(payload)
        path = self.path_for(conversation_id)
        self.root.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)
        logger.info("store.save id={} path={} bytes={}", conversation_id, path, len(payload))
        return conversation_id

    def load(self, conversation_id: str) -> list[Message]:
        path = self.path_for(conversation_id)
        if not path.is_file():
            raise ConversationNotFoundError(conversation_id)

        raw = path.read_bytes()
        try:
            payload = json.loads(raw.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise CorruptConversationError(conversation_id, f"not UTF-8 text: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise CorruptConversationError(conversation_id, f"invalid JSON: {exc}") from exc

        messages = self._messages_from_payload(conversation_id, payload)
        logger.info("store.load id={} messages={}", conversation_id, len(messages))
        return messages

    def list_conversations(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(path.stem for path in self.root.glob(f"*{CONVERSATION_FILE_SUFFIX}") if path.is_file())

    @staticmethod
    def _messages_from_payload(conversation_id: str, payload: object) -> list[Message]:
        if not isinstance(payload, list):
            raise CorruptConversationError(conversation_id, "expected a JSON array of messages")

        messages: list[Message] = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                raise CorruptConversationError(conversation_id, f"message {index} is not an object")
            role = item.get("role")
            content = item.get("content")
            if not isinstance(content, str):
                raise CorruptConversationError(conversation_id, f"message {index} has no text content")
            try:
                messages.append(Message(Role(role), content))
            except (ValueError, TypeError) as exc:
                raise CorruptConversationError(conversation_id, f"message {index} has unknown role {role!r}") from exc
        return messages
