"""Host-side glue that turns key chords and input events into engine calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from undo_engine.engine import RenderTarget, UndoEngine
from undo_engine.history import EditAction

Location = Tuple[int, int]  # (row, column)

_COMMAND_MODIFIERS = {"ctrl", "meta", "cmd", "super"}


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


def resolve_chord(key: str, modifiers: Iterable[str] = ()) -> Optional[str]:
    """Map a key press to ``"undo"``, ``"redo"`` or ``None``.

    Accepts Textual's combined form (``"ctrl+shift+z"``) as well as a bare key
    with a modifier tuple. ctrl/cmd+z undoes; ctrl/cmd+shift+z and ctrl/cmd+y
    redo.
    """

    parts = [part for part in key.split("+") if part]
    if not parts:
        return None
    base = parts[-1].lower()
    mods = {mod.strip().lower() for mod in (*modifiers, *parts[:-1])}
    if parts[-1] == "Z":  # shifted letter reported as uppercase
        mods.add("shift")
    if not mods & _COMMAND_MODIFIERS:
        return None
    if base == "z":
        return "redo" if "shift" in mods else "undo"
    if base == "y":
        return "redo"
    return None


def classify_edit(before: str, after: str) -> str:
    if len(after) > len(before):
        return "insertText"
    if len(after) < len(before):
        return "deleteContentBackward"
    return "insertReplacementText"


def offset_for_location(text: str, location: Location) -> int:
    lines = text.split("\n")
    row, col = location
    row = max(0, min(row, len(lines) - 1))
    offset = sum(len(line) + 1 for line in lines[:row])
    return offset + max(0, min(col, len(lines[row])))


def location_for_offset(text: str, offset: int) -> Location:
    lines = text.split("\n")
    running = 0
    for row, line in enumerate(lines):
        if offset <= running + len(line):
            return (row, max(0, offset - running))
        running += len(line) + 1
    return (len(lines) - 1, len(lines[-1]))


@dataclass(slots=True)
class UndoUIHooks:
    """Callbacks the adapter uses to update the host widgets."""

    apply_render: Callable[[RenderTarget], None]
    update_status: Callable[[str], None] = _noop
    history_changed: Callable[[List[EditAction], int], None] = _noop
    log: Callable[[str], None] = _noop


class TextualUndoAdapter:
    """Feeds a text widget's edits into an engine and renders undo/redo."""

    def __init__(self, engine: UndoEngine, hooks: UndoUIHooks) -> None:
        self.engine = engine
        self.hooks = hooks
        self._unsubscribe = engine.subscribe(self._on_history)
        self._rendered: Optional[str] = None
        self._render(engine.current())

    def handle_key(self, key: str, modifiers: Sequence[str] = ()) -> Optional[str]:
        """Run undo/redo for a recognised chord; return the command name."""

        command = resolve_chord(key, modifiers)
        if command is None:
            return None
        self.hooks.log(f"key -> {key!r} command={command}")
        target = self.engine.undo() if command == "undo" else self.engine.redo()
        self._render(target)
        self.hooks.update_status(f"{command} @ {target.position}")
        return command

    def handle_input(
        self,
        value: str,
        selection_end: int,
        *,
        kind: Optional[str] = None,
        timestamp: Optional[int] = None,
    ) -> Optional[RenderTarget]:
        """Record a widget edit; echoes of the last rendered value are ignored."""

        if value == self._rendered:
            return None
        previous = self.engine.current().value
        edit_kind = kind or classify_edit(previous, value)
        target = self.engine.ingest(
            edit_kind, value, selection_end=selection_end, timestamp=timestamp
        )
        self._rendered = value
        self.hooks.log(f"input -> kind={edit_kind} position={target.position}")
        return target

    def detach(self) -> None:
        self._unsubscribe()

    def _render(self, target: RenderTarget) -> None:
        self._rendered = target.value
        self.hooks.apply_render(target)

    def _on_history(self, actions: List[EditAction], position: int) -> None:
        self.hooks.history_changed(actions, position)


__all__ = [
    "TextualUndoAdapter",
    "UndoUIHooks",
    "classify_edit",
    "location_for_offset",
    "offset_for_location",
    "resolve_chord",
]
