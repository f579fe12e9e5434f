"""Ordered record storage plus the bounded position pointer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from .actions import EditAction, anchor_action


class HistoryStateError(ValueError):
    """Raised when a replacement history would leave the store empty."""

    def __init__(self, message: str, *, length: int = 0) -> None:
        super().__init__(message)
        self.length = length


@dataclass(slots=True)
class CommitReport:
    """What a commit did to the sequence besides writing the record."""

    discarded: int = 0
    evicted: int = 0


class HistoryStore:
    """Owns the action sequence and keeps ``0 <= position < len``."""

    def __init__(
        self,
        actions: Optional[Iterable[EditAction]] = None,
        index: Optional[int] = None,
    ) -> None:
        self._actions: List[EditAction] = [anchor_action()]
        self._position = 0
        if actions is not None:
            self.replace_state(actions, index)

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def position(self) -> int:
        return self._position

    @property
    def current(self) -> EditAction:
        return self._actions[self._position]

    def snapshot(self) -> List[EditAction]:
        return [action.copy() for action in self._actions]

    def records(self) -> tuple[EditAction, ...]:
        """Live records, for callers that copy before handing them out."""

        return tuple(self._actions)

    def can_move_back(self) -> bool:
        return self._position > 0

    def can_move_forward(self) -> bool:
        return self._position < len(self._actions) - 1

    def move_back(self) -> EditAction:
        if self.can_move_back():
            self._seat(self._position - 1)
        return self.current

    def move_forward(self) -> EditAction:
        if self.can_move_forward():
            self._seat(self._position + 1)
        return self.current

    def replace_state(
        self,
        actions: Iterable[EditAction],
        index: Optional[int] = None,
        *,
        max_size: Optional[int] = None,
    ) -> int:
        """Adopt copies of ``actions``; return how many oldest records were trimmed."""

        replacement = [action.copy() for action in actions]
        if not replacement:
            raise HistoryStateError(
                "History needs at least one record; omit it to start from the anchor",
                length=0,
            )
        target = len(replacement) - 1 if index is None else index
        evicted = _evict_oldest(replacement, max_size)
        self._actions = replacement
        self._seat(target - evicted)
        return evicted

    def reset(self) -> None:
        self._actions = [anchor_action()]
        self._seat(0)

    def coalesce(self, value: str, selection_end: int, timestamp: int) -> EditAction:
        record = self.current
        record.value = value
        record.selection_end = selection_end
        record.timestamp = timestamp
        return record

    def commit(
        self, record: EditAction, *, max_size: Optional[int] = None
    ) -> CommitReport:
        """Drop the redo branch, append ``record`` and enforce ``max_size``.

        Eviction removes the oldest records and puts a blank anchor back at
        index 0, so the pristine state stays reachable.
        """

        report = CommitReport(discarded=len(self._actions) - self._position - 1)
        del self._actions[self._position + 1 :]
        self._actions.append(record)
        report.evicted = _evict_oldest(self._actions, max_size)
        self._seat(len(self._actions) - 1)
        return report

    def _seat(self, index: int) -> None:
        self._position = _clamp(index, len(self._actions))


def _clamp(index: int, length: int) -> int:
    return max(0, min(index, length - 1))


def _evict_oldest(actions: List[EditAction], max_size: Optional[int]) -> int:
    if max_size is None or len(actions) <= max_size:
        return 0
    evicted = len(actions) - max_size
    del actions[:evicted]
    actions[0] = anchor_action()
    return evicted


__all__ = ["HistoryStore", "HistoryStateError", "CommitReport"]
