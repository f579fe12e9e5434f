"""Construction-time configuration for the edit history."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Optional

from .actions import EditAction

ENV_PREFIX = "UNDO_ENGINE_"
DEFAULT_MERGE_WINDOW_MS = 300
MIN_BOUNDED_SIZE = 2


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(f"{ENV_PREFIX}{name}")
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class HistoryConfig:
    """Immutable settings supplied once when an engine is built.

    Parameters
    ----------
    initial_value:
        Seed content recorded after the anchor when no history is injected.
    merge_window_ms:
        Same-kind edits closer together than this coalesce into one record.
    max_size:
        Upper bound on the number of records kept, anchor included.
        ``None`` or a value below 1 keeps everything; 1 is raised to 2.
    initial_actions / initial_index:
        Previously saved history (and pointer) to resume from.
    """

    initial_value: str = ""
    merge_window_ms: int = DEFAULT_MERGE_WINDOW_MS
    max_size: Optional[int] = None
    initial_actions: Optional[tuple[EditAction, ...]] = None
    initial_index: Optional[int] = None

    def __post_init__(self) -> None:
        # zero or negative means unbounded; otherwise leave room for anchor + newest
        if self.max_size is not None:
            bound = None if self.max_size <= 0 else max(self.max_size, MIN_BOUNDED_SIZE)
            object.__setattr__(self, "max_size", bound)
        if self.initial_actions is not None:
            object.__setattr__(
                self, "initial_actions", tuple(self.initial_actions)
            )

    @property
    def has_initial_actions(self) -> bool:
        return bool(self.initial_actions)

    @classmethod
    def from_env(
        cls,
        *,
        initial_value: str = "",
        merge_window_ms: Optional[int] = None,
        max_size: Optional[int] = None,
        initial_actions: Optional[Iterable[EditAction]] = None,
        initial_index: Optional[int] = None,
    ) -> "HistoryConfig":
        """Build a config from ``UNDO_ENGINE_*`` variables; arguments win."""

        window = merge_window_ms
        if window is None:
            window = _env_int("MERGE_WINDOW_MS")
        if window is None:
            window = DEFAULT_MERGE_WINDOW_MS
        if max_size is None:
            max_size = _env_int("MAX_SIZE")
        return cls(
            initial_value=initial_value,
            merge_window_ms=window,
            max_size=max_size,
            initial_actions=tuple(initial_actions) if initial_actions else None,
            initial_index=initial_index,
        )


__all__ = ["HistoryConfig", "DEFAULT_MERGE_WINDOW_MS", "ENV_PREFIX"]
