"""Linear, mergeable undo/redo history for a single text buffer."""

from .engine import RenderTarget, UndoEngine
from .history import EditAction, HistoryConfig, HistoryStateError

__all__ = [
    "UndoEngine",
    "RenderTarget",
    "EditAction",
    "HistoryConfig",
    "HistoryStateError",
    "adapters",
    "history",
    "runtime",
]

__version__ = "0.1.0"
