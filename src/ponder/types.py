"""Shared conversation dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


PERSISTED_ROLES = frozenset({Role.USER, Role.ASSISTANT})


@dataclass(frozen=True)
class Message:
    """One transcript entry."""

    role: Role
    content: str

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str) -> Message:
        return cls(Role.ASSISTANT, content)

    def to_payload(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class FileContent:
    """Auxiliary context read from a local file."""

    path: str
    content: str

    @classmethod
    def read(cls, path: Path) -> FileContent:
        return cls(str(path), path.read_text(encoding="utf-8"))
