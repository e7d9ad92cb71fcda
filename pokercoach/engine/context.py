"""
Conversation Context - Message history for one hand.

The context always starts with exactly one system message. Each
successful analysis adds a user turn and the assistant reply, so after
k analyses it holds 1 + 2k messages. It goes back to the system message
when the hand completes or is abandoned.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from ..analysis.prompts import SYSTEM_PROMPT


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class ConversationContext:
    """
    Append-only, ordered log of role-tagged messages.

    Turns are committed in pairs so a failed call never leaves a user
    message without its reply.
    """
    system_prompt: str = SYSTEM_PROMPT
    _messages: list[Message] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self._messages:
            self._messages = [Message(Role.SYSTEM, self.system_prompt)]

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def commit_exchange(self, user_content: str, assistant_content: str):
        """Append a user query together with its reply."""
        self._messages.append(Message(Role.USER, user_content))
        self._messages.append(Message(Role.ASSISTANT, assistant_content))

    def with_pending(self, user_content: str) -> list[dict[str, str]]:
        """Wire-format messages including an uncommitted user turn."""
        payload = [m.to_dict() for m in self._messages]
        payload.append(Message(Role.USER, user_content).to_dict())
        return payload

    def reset(self):
        self._messages = [Message(Role.SYSTEM, self.system_prompt)]
