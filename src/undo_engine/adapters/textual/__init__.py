"""Textual integration for the undo engine."""

from .controller import (
    TextualUndoAdapter,
    UndoUIHooks,
    classify_edit,
    location_for_offset,
    offset_for_location,
    resolve_chord,
)

__all__ = [
    "TextualUndoAdapter",
    "UndoUIHooks",
    "classify_edit",
    "location_for_offset",
    "offset_for_location",
    "resolve_chord",
]
