"""Executable Textual app that hosts the undo engine on a TextArea."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import List, Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.widgets import Footer, Header, Static, TextArea
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use undo_engine.adapters.textual.app"
    ) from exc

from undo_engine.engine import RenderTarget, UndoEngine
from undo_engine.history import (
    EditAction,
    HistoryConfig,
    PersistenceError,
    read_history,
    save_history,
)
from undo_engine.runtime import telemetry

from .controller import (
    TextualUndoAdapter,
    UndoUIHooks,
    location_for_offset,
    offset_for_location,
)

HISTORY_PREVIEW = 12


def build_engine(
    *,
    initial_text: str = "",
    merge_window_ms: Optional[int] = None,
    max_size: Optional[int] = None,
    history_file: Optional[Path] = None,
) -> UndoEngine:
    """Create an engine, resuming from ``history_file`` when it exists."""

    actions: Optional[List[EditAction]] = None
    position: Optional[int] = None
    if history_file is not None and history_file.exists():
        try:
            actions, position = read_history(history_file)
        except PersistenceError as exc:
            telemetry.record_event(
                "history.load_failed",
                level="warning",
                data={"path": str(history_file), "reason": str(exc)},
            )
    config = HistoryConfig.from_env(
        initial_value=initial_text,
        merge_window_ms=merge_window_ms,
        max_size=max_size,
        initial_actions=actions,
        initial_index=position,
    )
    return UndoEngine(config)


class UndoEngineApp(App[None]):
    """TextArea whose undo/redo is driven by the history engine."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#editor {
		height: 1fr;
	}

	#history-view {
		height: auto;
		max-height: 14;
		border: round $accent;
		padding: 0 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        Binding("ctrl+z", "history('ctrl+z')", "Undo", priority=True),
        Binding("ctrl+y", "history('ctrl+y')", "Redo", priority=True),
        Binding("ctrl+shift+z", "history('ctrl+shift+z')", "Redo", show=False, priority=True),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        engine: UndoEngine,
        *,
        history_file: Optional[Path] = None,
    ) -> None:
        super().__init__()
        self.engine = engine
        self.adapter: TextualUndoAdapter | None = None
        self._history_file = history_file
        self._editor: TextArea | None = None
        self._status_widget: Static | None = None
        self._history_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        self._editor = TextArea("", id="editor")
        yield self._editor
        self._history_widget = Static("", id="history-view")
        yield self._history_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        hooks = UndoUIHooks(
            apply_render=self._apply_render,
            update_status=self._update_status,
            history_changed=self._show_history,
        )
        self.adapter = TextualUndoAdapter(self.engine, hooks)
        self._show_history(*self.engine.get_history())
        if self._editor:
            self._editor.focus()

    def on_unmount(self) -> None:
        if self.adapter:
            self.adapter.detach()
        if self._history_file is not None:
            save_history(self._history_file, *self.engine.get_history())
        self.engine.destroy()

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if not self.adapter:
            return
        text_area = event.text_area
        caret = offset_for_location(text_area.text, text_area.cursor_location)
        self.adapter.handle_input(text_area.text, caret)

    def action_history(self, key: str) -> None:
        if self.adapter:
            self.adapter.handle_key(key)

    def _apply_render(self, target: RenderTarget) -> None:
        if not self._editor:
            return
        if self._editor.text != target.value:
            self._editor.load_text(target.value)
        self._editor.cursor_location = location_for_offset(target.value, target.caret)

    def _update_status(self, status: str) -> None:
        if self._status_widget:
            self._status_widget.update(status)

    def _show_history(self, actions: List[EditAction], position: int) -> None:
        if not self._history_widget:
            return
        start = max(0, len(actions) - HISTORY_PREVIEW)
        lines = []
        for index in range(start, len(actions)):
            action = actions[index]
            marker = ">" if index == position else " "
            preview = action.value.replace("\n", "⏎")[:40]
            lines.append(f"{marker} {index:>3} {action.kind:<22} {preview!r}")
        self._history_widget.update("\n".join(lines))


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the undo engine Textual demo.")
    parser.add_argument(
        "--merge-window",
        type=int,
        default=None,
        help="Coalesce same-kind edits closer than this many ms "
        "(default: $UNDO_ENGINE_MERGE_WINDOW_MS or 300)",
    )
    parser.add_argument(
        "--max-size",
        type=int,
        default=None,
        help="Maximum number of history records to keep "
        "(default: $UNDO_ENGINE_MAX_SIZE or unbounded)",
    )
    parser.add_argument(
        "--history-file",
        type=Path,
        default=os.environ.get("UNDO_ENGINE_HISTORY_FILE"),
        help="JSON file used to restore and save the history",
    )
    parser.add_argument(
        "--initial-text",
        default="",
        help="Seed text when no saved history is loaded",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    history_file = Path(args.history_file) if args.history_file else None
    engine = build_engine(
        initial_text=args.initial_text,
        merge_window_ms=args.merge_window,
        max_size=args.max_size,
        history_file=history_file,
    )
    UndoEngineApp(engine, history_file=history_file).run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
