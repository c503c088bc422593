"""Concrete implementations for conversation managers."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from .models import (
    ASSISTANT_ROLE,
    SYSTEM_ROLE,
    USER_ROLE,
    ChatMessage,
    Conversation,
)


class History(ABC):
    """Interface for an append-only conversation log."""

    @abstractmethod
    def append(self, role: str, content: str) -> ChatMessage:
        """Appends a new message and returns it."""
        pass

    @property
    @abstractmethod
    def messages(self) -> Sequence[ChatMessage]:
        """All messages in insertion order."""
        pass

    def append_user(self, content: str) -> ChatMessage:
        return self.append(USER_ROLE, content)

    def append_assistant(self, content: str) -> ChatMessage:
        return self.append(ASSISTANT_ROLE, content)

    def build_payload(
        self, system_prompt: str, new_turn: Optional[str] = None
    ) -> List[Dict[str, str]]:
        """Builds the ordered message list sent to the completion service.

        The system prompt comes first, then every stored message in order,
        then ``new_turn`` as a user message when given. Nothing is reordered
        or deduplicated and the log itself is left untouched.
        """
        payload = [{"role": SYSTEM_ROLE, "content": system_prompt}]
        payload.extend(message.to_payload() for message in self.messages)
        if new_turn is not None:
            payload.append({"role": USER_ROLE, "content": new_turn})
        return payload

    def transcript(self) -> str:
        """Flattens the log into ``role: content`` blocks separated by blank lines."""
        return "\n\n".join(f"{m.role}: {m.content}" for m in self.messages)

    def has_user_turn(self) -> bool:
        return any(m.role == USER_ROLE for m in self.messages)

    def __len__(self) -> int:
        return len(self.messages)


class InMemory(History):
    """Keeps the conversation in a pydantic ``Conversation`` model."""

    def __init__(self, conversation: Optional[Conversation] = None):
        self._conversation = conversation or Conversation()

    @property
    def id(self) -> str:
        return self._conversation.id

    @property
    def messages(self) -> Sequence[ChatMessage]:
        return tuple(self._conversation.messages)

    def append(self, role: str, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self._conversation.messages.append(message)
        return message

    def snapshot(self) -> Conversation:
        """Returns a deep copy of the underlying conversation."""
        return self._conversation.model_copy(deep=True)
