import pytest

from snapframe.controllers.history import EditHistory, RedoUnavailableError


def test_push_and_undo_restore_previous_snapshot():
    history = EditHistory("original")
    history.push("cropped")
    history.push("resized")
    assert len(history) == 3
    assert history.undo() == "cropped"
    assert history.current == "cropped"
    assert history.can_redo


def test_undo_at_original_is_idempotent():
    history = EditHistory("original")
    history.push("edit")
    history.undo()
    assert history.undo() == "original"
    assert history.undo() == "original"
    assert len(history) == 1
    assert history.original == "original"


def test_redo_reapplies_and_raises_when_empty():
    history = EditHistory("original")
    history.push("edit")
    history.undo()
    assert history.redo() == "edit"
    with pytest.raises(RedoUnavailableError):
        history.redo()


def test_push_after_undo_discards_redo_branch():
    history = EditHistory(0)
    history.push(1)
    history.push(2)
    history.undo()
    history.push(3)
    assert not history.can_redo
    assert history.undo() == 1


def test_reset_starts_over():
    history = EditHistory("a")
    history.push("b")
    history.reset("z")
    assert history.current == "z"
    assert not history.can_undo
