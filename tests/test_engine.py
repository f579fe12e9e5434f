from typing import List, Tuple

import pytest

from undo_engine import EditAction, HistoryConfig, HistoryStateError, UndoEngine
from undo_engine.history import INITIAL_KIND


class FakeClock:
    def __init__(self, start: int = 10_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def make_engine(**options: object) -> Tuple[UndoEngine, FakeClock]:
    clock = FakeClock()
    return UndoEngine.from_options(clock=clock, **options), clock


def record_notifications(engine: UndoEngine) -> List[Tuple[List[EditAction], int]]:
    seen: List[Tuple[List[EditAction], int]] = []
    engine.subscribe(lambda actions, position: seen.append((actions, position)))
    return seen


def type_text(engine: UndoEngine, clock: FakeClock, *values: str, gap: int = 1000) -> None:
    for value in values:
        clock.advance(gap)
        engine.ingest("insertText", value, selection_end=len(value))


def assert_invariants(engine: UndoEngine) -> None:
    actions, position = engine.get_history()
    assert len(actions) >= 1
    assert 0 <= position < len(actions)


def test_initial_value_scenario() -> None:
    engine, _ = make_engine(initial_value="ab", merge_window_ms=300)

    actions, position = engine.get_history()
    assert position == 1
    assert actions[0].kind == INITIAL_KIND
    assert actions[0].value == ""
    assert actions[1].kind == "insertText"
    assert actions[1].value == "ab"
    assert (actions[1].selection_start, actions[1].selection_end) == (0, 2)

    undone = engine.undo()
    assert (undone.value, undone.caret) == ("", 0)

    redone = engine.redo()
    assert (redone.value, redone.caret) == ("ab", 2)


def test_empty_initial_value_keeps_only_anchor() -> None:
    engine, _ = make_engine()

    actions, position = engine.get_history()

    assert len(actions) == 1
    assert position == 0
    assert engine.current().value == ""


def test_initial_actions_resume_at_given_index() -> None:
    saved = (
        EditAction(kind=INITIAL_KIND, value=""),
        EditAction(kind="insertText", value="x", timestamp=5, selection_end=1),
        EditAction(kind="insertText", value="xy", timestamp=900, selection_start=1, selection_end=2),
    )
    engine, _ = make_engine(initial_value="ignored", initial_actions=saved, initial_index=1)

    assert engine.position == 1
    assert engine.current().value == "x"
    assert len(engine) == 3


def test_initial_actions_without_index_resume_at_end() -> None:
    saved = (EditAction(kind="insertText", value="x"), EditAction(kind="insertText", value="xy"))
    engine, _ = make_engine(initial_actions=saved)

    assert engine.position == 1


def test_initial_index_out_of_range_is_clamped() -> None:
    saved = (EditAction(kind="insertText", value="x"),)
    engine, _ = make_engine(initial_actions=saved, initial_index=7)

    assert engine.position == 0


def test_ingest_derives_selection_start_from_length_delta() -> None:
    engine, clock = make_engine(initial_value="hello")
    clock.advance(1000)

    target = engine.ingest("insertText", "he--llo", selection_end=4)

    record = engine.get_actions()[-1]
    assert record.selection_start == 2
    assert record.selection_end == 4
    assert target.caret == 4
    assert target.value == "he--llo"


def test_ingest_uses_clock_when_timestamp_missing() -> None:
    engine, clock = make_engine()
    clock.advance(1234)

    engine.ingest("insertText", "a", selection_end=1)

    assert engine.get_actions()[-1].timestamp == clock.now


def test_same_kind_burst_coalesces() -> None:
    engine, clock = make_engine(merge_window_ms=300)
    engine.ingest("insertText", "a", selection_end=1)
    length_after_first = len(engine)

    clock.advance(100)
    engine.ingest("insertText", "ab", selection_end=2)
    clock.advance(100)
    engine.ingest("insertText", "abc", selection_end=3)

    assert len(engine) == length_after_first
    record = engine.get_actions()[-1]
    assert record.value == "abc"
    assert record.selection_start == 0
    assert record.selection_end == 3
    assert record.timestamp == clock.now


def test_kind_change_starts_new_record() -> None:
    engine, clock = make_engine(merge_window_ms=300)
    engine.ingest("insertText", "abc", selection_end=3)
    clock.advance(50)

    engine.ingest("deleteContentBackward", "ab", selection_end=2)

    actions = engine.get_actions()
    assert len(actions) == 3
    assert actions[-1].kind == "deleteContentBackward"
    assert actions[-1].selection_start == 3


def test_branch_truncation_after_undo() -> None:
    engine, clock = make_engine()
    type_text(engine, clock, "a", "ab", "abc")
    assert engine.position == 3

    engine.undo()
    engine.undo()
    assert engine.position == 1
    clock.advance(1000)
    engine.ingest("insertText", "aE", selection_end=2)

    actions, position = engine.get_history()
    assert [action.value for action in actions] == ["", "a", "aE"]
    assert position == 2
    assert not engine.can_redo()


def test_capacity_eviction_reinstates_anchor() -> None:
    engine, clock = make_engine(max_size=3)
    type_text(engine, clock, "a", "ab")
    assert engine.position == 2

    type_text(engine, clock, "abc")

    actions, position = engine.get_history()
    assert len(actions) == 3
    assert actions[0].kind == INITIAL_KIND
    assert actions[0].value == ""
    assert actions[-1].value == "abc"
    assert position == 2


def test_zero_max_size_keeps_every_record() -> None:
    engine, clock = make_engine(max_size=0)

    type_text(engine, clock, "a", "ab", "abc", "abcd", "abcde")

    assert len(engine) == 6
    assert engine.position == 5


def test_max_size_of_one_keeps_anchor_and_newest() -> None:
    engine, clock = make_engine(max_size=1)

    type_text(engine, clock, "a", "ab", "abc")

    actions, position = engine.get_history()
    assert len(actions) == 2
    assert position == 1
    assert actions[0].is_anchor
    assert actions[1].value == "abc"


def test_history_stays_bounded_under_many_edits() -> None:
    engine, clock = make_engine(max_size=4)

    type_text(engine, clock, *["x" * n for n in range(1, 20)])

    actions, position = engine.get_history()
    assert len(actions) == 4
    assert position == 3
    assert actions[0].kind == INITIAL_KIND
    assert actions[-1].value == "x" * 19


def test_undo_at_start_is_idempotent_but_notifies() -> None:
    engine, _ = make_engine()
    seen = record_notifications(engine)
    before = engine.get_history()

    for _ in range(3):
        target = engine.undo()

    assert engine.get_history() == before
    assert target.value == ""
    assert target.caret == 0
    assert len(seen) == 3


def test_redo_at_end_is_noop_but_notifies() -> None:
    engine, _ = make_engine(initial_value="ab")
    seen = record_notifications(engine)

    target = engine.redo()

    assert engine.position == 1
    assert (target.value, target.caret) == ("ab", 2)
    assert seen == [(engine.get_actions(), 1)]


def test_undo_caret_uses_start_of_undone_edit() -> None:
    engine, clock = make_engine(initial_value="hello")
    clock.advance(1000)
    engine.ingest("insertText", "hello world", selection_end=11)

    target = engine.undo()

    assert target.value == "hello"
    assert target.caret == 5


def test_every_operation_notifies_with_position() -> None:
    engine, clock = make_engine()
    seen = record_notifications(engine)

    type_text(engine, clock, "a")
    engine.undo()
    engine.redo()
    engine.set_history(engine.get_actions(), 0)
    engine.reset()

    assert [position for _, position in seen] == [1, 0, 1, 0, 0]
    assert len(seen[-1][0]) == 1


def test_notification_snapshot_not_altered_by_later_coalesce() -> None:
    engine, clock = make_engine(merge_window_ms=300)
    seen = record_notifications(engine)

    engine.ingest("insertText", "a", selection_end=1)
    clock.advance(10)
    engine.ingest("insertText", "ab", selection_end=2)

    assert seen[0][0][-1].value == "a"
    assert seen[1][0][-1].value == "ab"


def test_observer_mutation_does_not_reach_engine() -> None:
    engine, clock = make_engine()
    engine.subscribe(lambda actions, position: actions.clear())

    type_text(engine, clock, "a")

    assert len(engine) == 2
    assert_invariants(engine)


def test_get_history_returns_independent_copies() -> None:
    engine, _ = make_engine(initial_value="ab")

    actions, _ = engine.get_history()
    actions[1].value = "zz"
    actions.pop()

    assert engine.get_actions()[1].value == "ab"


def test_set_history_round_trip_is_noop() -> None:
    engine, clock = make_engine(initial_value="ab")
    type_text(engine, clock, "abc", "abcd")
    engine.undo()
    before = engine.get_history()

    engine.set_history(*engine.get_history())

    assert engine.get_history() == before


def test_set_history_clamps_position() -> None:
    engine, _ = make_engine()
    actions = [EditAction(kind=INITIAL_KIND, value=""), EditAction(kind="insertText", value="q")]

    engine.set_history(actions, 99)

    assert engine.position == 1
    assert engine.current().value == "q"


def test_set_history_trims_to_max_size() -> None:
    engine, _ = make_engine(max_size=3)
    saved = [EditAction(kind=INITIAL_KIND, value="")]
    saved.extend(
        EditAction(kind="insertText", value="x" * n, selection_end=n) for n in range(1, 5)
    )

    engine.set_history(saved, 3)

    actions, position = engine.get_history()
    assert len(actions) == 3
    assert actions[0].is_anchor
    assert [action.value for action in actions[1:]] == ["xxx", "xxxx"]
    assert position == 1
    assert engine.current().value == "xxx"


def test_oversized_initial_actions_are_trimmed_on_seed() -> None:
    saved = tuple(
        EditAction(kind="insertText", value="y" * n, selection_end=n) for n in range(5)
    )

    engine, _ = make_engine(max_size=2, initial_actions=saved)

    actions, position = engine.get_history()
    assert len(actions) == 2
    assert actions[0].is_anchor
    assert actions[1].value == "yyyy"
    assert position == 1


def test_set_history_rejects_empty_sequence() -> None:
    engine, _ = make_engine(initial_value="ab")
    seen = record_notifications(engine)

    with pytest.raises(HistoryStateError):
        engine.set_history([], 0)

    assert engine.position == 1
    assert engine.current().value == "ab"
    assert seen == []


def test_reset_collapses_to_anchor() -> None:
    engine, clock = make_engine(initial_value="ab")
    type_text(engine, clock, "abc")

    engine.reset()

    actions, position = engine.get_history()
    assert [action.kind for action in actions] == [INITIAL_KIND]
    assert position == 0
    assert not engine.can_undo()


def test_destroy_drops_subscribers() -> None:
    engine, clock = make_engine()
    seen = record_notifications(engine)

    engine.destroy()
    type_text(engine, clock, "a")

    assert seen == []
    assert engine.current().value == "a"


def test_reentrant_callback_runs_sequentially() -> None:
    engine, clock = make_engine()
    positions: List[int] = []

    def undo_once(actions: List[EditAction], position: int) -> None:
        positions.append(position)
        if len(positions) == 1:
            engine.undo()

    engine.subscribe(undo_once)
    clock.advance(1000)
    target = engine.ingest("insertText", "hello", selection_end=5)

    assert positions == [1, 0]
    assert engine.position == 0
    assert (target.value, target.caret, target.position) == ("hello", 5, 1)
    assert target.caret <= len(target.value)
    assert_invariants(engine)


def test_invariants_hold_across_mixed_operations() -> None:
    engine, clock = make_engine(max_size=5, merge_window_ms=300)
    kinds = ["insertText", "deleteContentBackward"]
    value = ""
    for step in range(40):
        if step % 7 == 3:
            engine.undo()
        elif step % 11 == 5:
            engine.redo()
        else:
            value = value + "x" if step % 2 else value[:-1]
            clock.advance(150 if step % 3 else 500)
            engine.ingest(kinds[step % 2], value, selection_end=len(value))
        assert_invariants(engine)
        assert len(engine) <= 5


def test_config_object_is_accepted_directly() -> None:
    engine = UndoEngine(HistoryConfig(initial_value="z"), clock=lambda: 1)

    assert engine.config.merge_window_ms == 300
    assert engine.current().value == "z"
    assert engine.get_actions()[1].timestamp == 1
