"""JSON layout for saving and restoring ``(actions, position)`` pairs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from .actions import EditAction


class PersistenceError(ValueError):
    """Raised when a saved history payload cannot be decoded."""


def dump_history(actions: Sequence[EditAction], position: int) -> Dict[str, Any]:
    return {
        "actions": [action.to_payload() for action in actions],
        "position": position,
    }


def load_history(payload: Mapping[str, Any]) -> Tuple[List[EditAction], int]:
    """Decode a saved payload.

    A missing ``position`` points at the newest record. Range checks are left
    to ``HistoryStore.replace_state``, which clamps.
    """

    try:
        raw_actions = payload["actions"]
        if isinstance(raw_actions, (str, bytes)) or not isinstance(raw_actions, Sequence):
            raise TypeError("'actions' must be a list")
        actions = [EditAction.from_payload(item) for item in raw_actions]
        position = int(payload.get("position", len(actions) - 1))
    except (KeyError, TypeError, ValueError) as exc:
        raise PersistenceError(f"Malformed history payload: {exc}") from exc
    return actions, position


def dumps_history(actions: Sequence[EditAction], position: int) -> str:
    return json.dumps(dump_history(actions, position), ensure_ascii=False)


def loads_history(raw: str) -> Tuple[List[EditAction], int]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PersistenceError(f"History is not valid JSON: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise PersistenceError("History payload must be a JSON object")
    return load_history(payload)


def save_history(path: Path | str, actions: Sequence[EditAction], position: int) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(dumps_history(actions, position), encoding="utf-8")
    return target


def read_history(path: Path | str) -> Tuple[List[EditAction], int]:
    return loads_history(Path(path).read_text(encoding="utf-8"))


__all__ = [
    "PersistenceError",
    "dump_history",
    "load_history",
    "dumps_history",
    "loads_history",
    "save_history",
    "read_history",
]
