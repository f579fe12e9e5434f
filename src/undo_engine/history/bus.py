"""Change notifications for history observers."""

from __future__ import annotations

from typing import Callable, List, Sequence

from .actions import EditAction

HistoryCallback = Callable[[List[EditAction], int], None]


class HistoryBus:
    """Synchronous observer registry invoked in registration order."""

    def __init__(self) -> None:
        self._subscribers: List[HistoryCallback] = []

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: HistoryCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, actions: Sequence[EditAction], position: int) -> None:
        # every observer gets private copies; later coalescing mutates records in place
        for callback in list(self._subscribers):
            callback([action.copy() for action in actions], position)

    def clear(self) -> None:
        self._subscribers.clear()


__all__ = ["HistoryBus", "HistoryCallback"]
