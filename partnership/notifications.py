from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional


# Recent notifications kept for inspection; older ones are dropped.
HISTORY_LIMIT = 50


@dataclass(frozen=True)
class Notification:
    title: str
    description: Optional[str] = None
    variant: str = "success"  # success | error

    @property
    def is_error(self) -> bool:
        return self.variant == "error"


class Notifier:
    """Collects user-facing notifications until a page drains them into toasts."""

    def __init__(self, history_limit: int = HISTORY_LIMIT) -> None:
        self._pending: List[Notification] = []
        self.history: Deque[Notification] = deque(maxlen=history_limit)

    def success(self, title: str, description: Optional[str] = None) -> Notification:
        return self._push(Notification(title, description, "success"))

    def error(self, title: str, description: Optional[str] = None) -> Notification:
        return self._push(Notification(title, description, "error"))

    def _push(self, note: Notification) -> Notification:
        self._pending.append(note)
        self.history.append(note)
        return note

    def drain(self) -> List[Notification]:
        pending, self._pending = self._pending, []
        return pending

    @property
    def errors(self) -> List[Notification]:
        return [n for n in self.history if n.is_error]
