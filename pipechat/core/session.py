"""Conversation state: turns, retention policy and session configuration."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator, List, Optional

# Short codes accepted by ``:model`` mapped to provider model identifiers.
SUPPORTED_MODELS = {
    "3": "gpt-3.5-turbo",
    "4": "gpt-4",
    "4t": "gpt-4-turbo",
}

DEFAULT_MODEL = SUPPORTED_MODELS["3"]
DEFAULT_MAX_TOKENS = 512
MAX_TOKENS_LIMIT = 65535


class Role(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """A single message in the conversation."""

    role: Role
    text: str

    @classmethod
    def user(cls, text: str) -> "Turn":
        return cls(Role.USER, text)

    @classmethod
    def assistant(cls, text: str) -> "Turn":
        return cls(Role.ASSISTANT, text)


def resolve_model(value: Optional[str]) -> Optional[str]:
    """Return the provider id for a short code or id, or ``None`` if unknown."""
    if value is None:
        return None
    value = value.strip().lower()
    if value in SUPPORTED_MODELS:
        return SUPPORTED_MODELS[value]
    if value in SUPPORTED_MODELS.values():
        return value
    return None


@dataclass
class SessionConfig:
    """Mutable per-process settings; changed only through commands."""

    model: str = DEFAULT_MODEL
    max_output_tokens: int = DEFAULT_MAX_TOKENS
    carry_context: bool = False

    def __post_init__(self) -> None:
        if self.model not in SUPPORTED_MODELS.values():
            raise ValueError(f"Unsupported model '{self.model}'.")
        if not 1 <= self.max_output_tokens <= MAX_TOKENS_LIMIT:
            raise ValueError(
                f"max_output_tokens must be between 1 and {MAX_TOKENS_LIMIT}, "
                f"got {self.max_output_tokens}."
            )

    def toggle_context(self) -> bool:
        self.carry_context = not self.carry_context
        return self.carry_context


class ConversationContext:
    """Ordered log of turns, oldest first.

    Whatever this log holds when a request is issued is sent verbatim, so
    the only mutations are appending and a full reset at the start of a
    turn that does not keep context.
    """

    def __init__(self) -> None:
        self._turns: List[Turn] = []

    @property
    def turns(self) -> List[Turn]:
        return list(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(list(self._turns))

    def begin_turn(self, text: str, *, carry_context: bool, continuation: bool) -> List[Turn]:
        """Apply the retention rule, append the user turn and return the outgoing turns.

        Prior turns are kept when *carry_context* is on or the line carried
        the continuation marker; otherwise the log starts over with *text*.
        """
        if not (carry_context or continuation):
            self._turns = []
        self._turns.append(Turn.user(text))
        return self.turns

    def add_assistant(self, text: str) -> None:
        self._turns.append(Turn.assistant(text))
