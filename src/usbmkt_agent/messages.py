"""
Ordered, append-only log of conversation turns.
"""

from typing import Iterable, Iterator, Optional

from usbmkt_agent.models.message import Message


class MessageLog:
    """Insertion order is conversation order. No dedup, no reordering.

    The only way to drop turns is ``replace_all``, used when history is
    (re)loaded or a conversation is reset.
    """

    def __init__(self, messages: Optional[Iterable[Message]] = None) -> None:
        self._messages: list[Message] = list(messages or [])

    def append(self, message: Message) -> None:
        self._messages.append(message)

    def replace_all(self, messages: Iterable[Message]) -> None:
        self._messages = list(messages)

    def snapshot(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __repr__(self) -> str:
        return f"MessageLog(len={len(self._messages)})"
