"""In-process conversation memory."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import List, Optional

from ragchat.models import ConversationTurn


class ConversationMemory:
    """Thread-safe question -> answer mapping for the life of the process.

    Asking the same question again replaces the stored answer and moves the
    turn to the end. With ``max_turns`` set, the oldest turns are evicted.
    """

    def __init__(self, max_turns: int | None = None) -> None:
        if max_turns is not None and max_turns <= 0:
            raise ValueError("max_turns must be positive")
        self.max_turns = max_turns
        self._turns: "OrderedDict[str, str]" = OrderedDict()
        self._lock = threading.Lock()

    def record(self, question: str, answer: str) -> None:
        with self._lock:
            self._turns.pop(question, None)
            self._turns[question] = answer
            if self.max_turns is not None:
                while len(self._turns) > self.max_turns:
                    self._turns.popitem(last=False)

    def get(self, question: str) -> Optional[str]:
        with self._lock:
            return self._turns.get(question)

    def turns(self) -> List[ConversationTurn]:
        with self._lock:
            return [ConversationTurn(question=q, answer=a) for q, a in self._turns.items()]

    def clear(self) -> None:
        with self._lock:
            self._turns.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._turns)

    def __contains__(self, question: object) -> bool:
        with self._lock:
            return question in self._turns
