from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class ChatMessage:
    text: str
    blocks: list[dict[str, Any]] = field(default_factory=list)


class OrderNotifier(Protocol):
    def send(self, message: ChatMessage) -> None: ...
