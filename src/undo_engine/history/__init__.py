"""History store, merge policy, and change notifications."""

from .actions import INITIAL_KIND, INSERT_KIND, EditAction, anchor_action
from .bus import HistoryBus, HistoryCallback
from .config import DEFAULT_MERGE_WINDOW_MS, HistoryConfig
from .merge import MergeDecision, MergeOutcome, MergePolicy
from .persistence import (
    PersistenceError,
    dump_history,
    dumps_history,
    load_history,
    loads_history,
    read_history,
    save_history,
)
from .store import CommitReport, HistoryStateError, HistoryStore

__all__ = [
    "EditAction",
    "INITIAL_KIND",
    "INSERT_KIND",
    "anchor_action",
    "HistoryBus",
    "HistoryCallback",
    "HistoryConfig",
    "DEFAULT_MERGE_WINDOW_MS",
    "MergeDecision",
    "MergeOutcome",
    "MergePolicy",
    "HistoryStore",
    "HistoryStateError",
    "CommitReport",
    "PersistenceError",
    "dump_history",
    "load_history",
    "dumps_history",
    "loads_history",
    "save_history",
    "read_history",
]
