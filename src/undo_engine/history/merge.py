"""Coalesce-or-commit policy for incoming edits."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .actions import EditAction
from .store import HistoryStore


class MergeDecision(str, Enum):
    COALESCE = "coalesce"
    COMMIT = "commit"


@dataclass(slots=True)
class MergeOutcome:
    decision: MergeDecision
    record: EditAction
    position: int
    discarded: int = 0
    evicted: int = 0

    @property
    def coalesced(self) -> bool:
        return self.decision is MergeDecision.COALESCE


class MergePolicy:
    """Groups bursts of same-kind edits into a single undo step.

    An edit folds into the record at the current position when both share a
    kind and arrive in order less than ``merge_window_ms`` apart. Anything
    else becomes a new record, which discards the redo branch and may evict
    the oldest record once ``max_size`` is reached.
    """

    def __init__(self, merge_window_ms: int, *, max_size: Optional[int] = None) -> None:
        self.merge_window_ms = merge_window_ms
        self.max_size = max_size

    def decide(self, last: EditAction, kind: str, timestamp: int) -> MergeDecision:
        elapsed = timestamp - last.timestamp
        # a clock that stepped backwards never extends a burst
        if last.kind == kind and 0 <= elapsed < self.merge_window_ms:
            return MergeDecision.COALESCE
        return MergeDecision.COMMIT

    def apply(
        self,
        store: HistoryStore,
        *,
        kind: str,
        value: str,
        timestamp: int,
        selection_start: int,
        selection_end: int,
    ) -> MergeOutcome:
        decision = self.decide(store.current, kind, timestamp)
        if decision is MergeDecision.COALESCE:
            record = store.coalesce(value, selection_end, timestamp)
            return MergeOutcome(
                decision=decision, record=record.copy(), position=store.position
            )

        record = EditAction(
            kind=kind,
            value=value,
            timestamp=timestamp,
            selection_start=selection_start,
            selection_end=selection_end,
        )
        report = store.commit(record, max_size=self.max_size)
        return MergeOutcome(
            decision=decision,
            record=record.copy(),
            position=store.position,
            discarded=report.discarded,
            evicted=report.evicted,
        )


__all__ = ["MergeDecision", "MergeOutcome", "MergePolicy"]
