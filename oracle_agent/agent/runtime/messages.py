"""Conversation messages and the per-run append-only message log."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from oracle_agent.exceptions import InvalidStateError


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True, slots=True)
class ContentBlock:
    """One typed block of message content. Only ``text`` is produced today."""

    value: str
    content_type: str = "text"

    def to_dict(self) -> dict[str, str]:
        return {"contentType": self.content_type, "value": self.value}


@dataclass(frozen=True, slots=True)
class Message:
    """One conversation turn."""

    role: Role
    content: tuple[ContentBlock, ...] = field(default_factory=tuple)

    @classmethod
    def text(cls, role: Role | str, value: str) -> Message:
        return cls(role=Role(role), content=(ContentBlock(value=value),))

    @property
    def text_value(self) -> str:
        return "".join(block.value for block in self.content if block.content_type == "text")

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role.value, "content": [block.to_dict() for block in self.content]}


class MessageLog:
    """Ordered, append-only log of messages for a single run.

    There is no API to remove or reorder entries. Once frozen, appends are
    rejected with :class:`InvalidStateError`.
    """

    def __init__(self, run_id: int) -> None:
        self._run_id = run_id
        self._messages: list[Message] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def append(self, message: Message) -> None:
        if self._frozen:
            raise InvalidStateError(self._run_id, "message log is frozen")
        if not isinstance(message, Message):
            raise TypeError("message must be a Message")
        self._messages.append(message)

    def freeze(self) -> None:
        self._frozen = True

    def snapshot(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def to_list(self) -> list[dict[str, Any]]:
        return [message.to_dict() for message in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]
