"""Edit action records stored by the history."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping

INITIAL_KIND = "initialText"
INSERT_KIND = "insertText"


@dataclass(slots=True)
class EditAction:
    """Full buffer snapshot plus the caret range that produced it.

    Records stay mutable so the merge policy can fold a burst of same-kind
    edits into the record at the current position.
    """

    kind: str
    value: str
    timestamp: int = 0
    selection_start: int = 0
    selection_end: int = 0

    @property
    def is_anchor(self) -> bool:
        return self.kind == INITIAL_KIND

    def copy(self) -> "EditAction":
        return replace(self)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "value": self.value,
            "timestamp": self.timestamp,
            "selectionStart": self.selection_start,
            "selectionEnd": self.selection_end,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "EditAction":
        kind = payload["kind"] if "kind" in payload else payload["type"]
        return cls(
            kind=str(kind),
            value=str(payload["value"]),
            timestamp=int(payload.get("timestamp", 0)),
            selection_start=int(payload.get("selectionStart", 0)),
            selection_end=int(payload.get("selectionEnd", 0)),
        )


def anchor_action() -> EditAction:
    """Return a fresh blank record marking the pristine buffer."""

    return EditAction(kind=INITIAL_KIND, value="")


__all__ = ["EditAction", "INITIAL_KIND", "INSERT_KIND", "anchor_action"]
