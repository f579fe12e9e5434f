"""Engine façade combining the history store, merge policy, and bus."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Tuple

from undo_engine.runtime import telemetry

from .history.actions import INSERT_KIND, EditAction
from .history.bus import HistoryBus, HistoryCallback
from .history.config import HistoryConfig
from .history.merge import MergeOutcome, MergePolicy
from .history.store import HistoryStore

Clock = Callable[[], int]


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class RenderTarget:
    """What a host surface should display after an engine call."""

    value: str
    caret: int
    position: int
    kind: str


class UndoEngine:
    """Linear undo/redo history for one text buffer.

    Adapters feed edits through :meth:`ingest`; :meth:`undo` and :meth:`redo`
    move the position pointer. Every state-changing call, including no-op
    undo/redo at the boundaries, ends by notifying subscribers with a copy
    of the full sequence and the current position.
    """

    def __init__(
        self,
        config: Optional[HistoryConfig] = None,
        *,
        clock: Optional[Clock] = None,
        logger_name: Optional[str] = None,
    ) -> None:
        self.config = config or HistoryConfig()
        self._clock: Clock = clock or _wall_clock_ms
        self._logger_name = logger_name or "undo_engine.history"
        self.logger = telemetry.get_logger(self._logger_name)
        self._store = HistoryStore()
        self._policy = MergePolicy(
            self.config.merge_window_ms, max_size=self.config.max_size
        )
        self._bus = HistoryBus()
        self._seed()

    @classmethod
    def from_options(
        cls,
        *,
        clock: Optional[Clock] = None,
        logger_name: Optional[str] = None,
        **options: Any,
    ) -> "UndoEngine":
        return cls(HistoryConfig(**options), clock=clock, logger_name=logger_name)

    def _seed(self) -> None:
        config = self.config
        if config.has_initial_actions:
            self._store.replace_state(
                config.initial_actions, config.initial_index, max_size=config.max_size
            )
            return
        if config.initial_value:
            self._store.commit(
                EditAction(
                    kind=INSERT_KIND,
                    value=config.initial_value,
                    timestamp=self._clock(),
                    selection_start=0,
                    selection_end=len(config.initial_value),
                ),
                max_size=config.max_size,
            )

    @property
    def position(self) -> int:
        return self._store.position

    def __len__(self) -> int:
        return len(self._store)

    def can_undo(self) -> bool:
        return self._store.can_move_back()

    def can_redo(self) -> bool:
        return self._store.can_move_forward()

    def current(self) -> RenderTarget:
        record = self._store.current
        return self._render(record, record.selection_end)

    def ingest(
        self,
        kind: str,
        value: str,
        *,
        selection_end: int,
        timestamp: Optional[int] = None,
    ) -> RenderTarget:
        """Record an edit, coalescing it into the current record when possible.

        ``selection_start`` is derived from how much the buffer grew or shrank
        relative to the record at the current position.
        """

        with telemetry.span(
            "history::ingest",
            logger_name=self._logger_name,
            component="history",
            metadata={"kind": kind},
        ) as handle:
            last = self._store.current
            stamp = self._clock() if timestamp is None else timestamp
            outcome = self._policy.apply(
                self._store,
                kind=kind,
                value=value,
                timestamp=stamp,
                selection_start=selection_end - (len(value) - len(last.value)),
                selection_end=selection_end,
            )
            handle.add_metadata("decision", outcome.decision.value)
            self._log_outcome(outcome)
            target = self._render(self._store.current, selection_end)
            self._notify()
        return target

    def undo(self) -> RenderTarget:
        """Step back one record; the caret lands where the undone edit began."""

        with telemetry.span(
            "history::undo", logger_name=self._logger_name, component="history"
        ):
            caret = self._store.current.selection_start
            moved = self._store.can_move_back()
            record = self._store.move_back()
            telemetry.record_event(
                "history.undo",
                data={"position": self._store.position, "moved": moved},
                logger_name=self._logger_name,
            )
            self._notify()
        return self._render(record, caret)

    def redo(self) -> RenderTarget:
        """Step forward one record; the caret lands where the redone edit ended."""

        with telemetry.span(
            "history::redo", logger_name=self._logger_name, component="history"
        ):
            moved = self._store.can_move_forward()
            record = self._store.move_forward()
            telemetry.record_event(
                "history.redo",
                data={"position": self._store.position, "moved": moved},
                logger_name=self._logger_name,
            )
            self._notify()
        return self._render(record, record.selection_end)

    def get_history(self) -> Tuple[List[EditAction], int]:
        return self._store.snapshot(), self._store.position

    def get_actions(self) -> List[EditAction]:
        return self._store.snapshot()

    def set_history(
        self, actions: Iterable[EditAction], position: Optional[int] = None
    ) -> None:
        """Replace the whole history; ``position`` is clamped into range.

        Histories longer than ``max_size`` lose their oldest records, as a
        commit would.

        Raises ``HistoryStateError`` for an empty sequence, leaving the
        current history untouched.
        """

        with telemetry.span(
            "history::set_history",
            logger_name=self._logger_name,
            component="history",
            metadata={"requested_position": position},
        ):
            self._store.replace_state(actions, position, max_size=self.config.max_size)
            telemetry.record_event(
                "history.replace",
                data={"length": len(self._store), "position": self._store.position},
                logger_name=self._logger_name,
            )
            self._notify()

    def reset(self) -> None:
        with telemetry.span(
            "history::reset", logger_name=self._logger_name, component="history"
        ):
            self._store.reset()
            telemetry.record_event("history.reset", logger_name=self._logger_name)
            self._notify()

    def subscribe(self, callback: HistoryCallback) -> Callable[[], None]:
        return self._bus.subscribe(callback)

    def destroy(self) -> None:
        self._bus.clear()

    def _notify(self) -> None:
        self._bus.emit(self._store.records(), self._store.position)

    def _log_outcome(self, outcome: MergeOutcome) -> None:
        data = {"position": outcome.position, "kind": outcome.record.kind}
        if outcome.coalesced:
            telemetry.record_event(
                "history.coalesce", data=data, logger_name=self._logger_name
            )
            return
        telemetry.record_event(
            "history.commit", data=data, logger_name=self._logger_name
        )
        if outcome.discarded:
            telemetry.record_event(
                "history.truncate",
                data={**data, "discarded": outcome.discarded},
                logger_name=self._logger_name,
            )
        if outcome.evicted:
            telemetry.record_event(
                "history.evict",
                level="info",
                data={**data, "evicted": outcome.evicted},
                logger_name=self._logger_name,
            )

    def _render(self, record: EditAction, caret: int) -> RenderTarget:
        return RenderTarget(
            value=record.value,
            caret=caret,
            position=self._store.position,
            kind=record.kind,
        )


__all__ = ["UndoEngine", "RenderTarget", "Clock"]
