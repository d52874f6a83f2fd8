from __future__ import annotations

from ultimate_ttt.board import GameState, Mark


def board(text):
    """'OO.XX....' -> sub-board tuple, '.' for empty."""
    assert len(text) == 9, text
    return tuple(None if ch == "." else Mark(ch) for ch in text)


def make_state(boards=None, **kwargs):
    full = [board(".........")] * 9
    for index, text in (boards or {}).items():
        full[index] = board(text)
    return GameState(boards=tuple(full), **kwargs)


# Decided sub-boards whose winners form no super-board line:
#   X O X / X O O / O X X
NO_LINE_PATTERN = "XOXXOOOXX"
WON_BY = {"X": "XXX......", "O": "OOO......"}
