"""Rules engine: win detection, legal moves and move application.

All functions are pure. ``apply_move`` validates first and only then builds
the successor :class:`GameState`, so a rejected move never leaves a partial
update behind.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional, Sequence, Tuple

from .board import EMPTY_BOARD, Cell, GameState, Mark, Move, Phase
from .errors import (
    GameTerminalError,
    IllegalBoardTargetError,
    InvalidMoveShapeError,
    OccupiedCellError,
    SubBoardAlreadyWonError,
    WrongTurnError,
)

LOGGER = logging.getLogger("ultimate_ttt.logic")

WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


@lru_cache(maxsize=None)
def _scan(marks: Tuple[Cell, ...]):
    for a, b, c in WIN_LINES:
        if marks[a] is not None and marks[a] == marks[b] == marks[c]:
            return marks[a], (a, b, c)
    return None, None


def line_winner(marks: Sequence[Cell]) -> Optional[Mark]:
    """Mark owning a completed line in a 9-cell sequence, else None.

    Works for a sub-board's cells and for the vector of sub-board winners.
    """
    return _scan(tuple(marks))[0]


def winning_line(marks: Sequence[Cell]) -> Optional[Tuple[int, int, int]]:
    return _scan(tuple(marks))[1]


def is_full(board: Sequence[Cell]) -> bool:
    return None not in board


def sub_board_winners(state: GameState) -> Tuple[Cell, ...]:
    return tuple(line_winner(board) for board in state.boards)


def super_winner(state: GameState) -> Optional[Mark]:
    return line_winner(sub_board_winners(state))


def _open_boards(boards, winners):
    return tuple(i for i in range(9) if winners[i] is None and not is_full(boards[i]))


def allowed_boards(state: GameState) -> Tuple[int, ...]:
    """Sub-boards the next move may target, in index order."""
    if state.is_terminal:
        return ()
    open_boards = _open_boards(state.boards, sub_board_winners(state))
    if state.active_board is not None and state.active_board in open_boards:
        return (state.active_board,)
    # a won (or, defensively, full) active board frees the mover
    return open_boards


def legal_moves(state: GameState) -> Tuple[Move, ...]:
    """Every legal move, ordered by (sub_board, cell)."""
    return tuple(
        Move(b, c)
        for b in allowed_boards(state)
        for c in range(9)
        if state.boards[b][c] is None
    )


def _valid_index(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 8


def check_move(state: GameState, move: Move, mark: Mark) -> None:
    """Raise the MoveError that ``apply_move`` would raise, or return None."""
    if state.is_terminal:
        raise GameTerminalError(f"game is over ({state.phase.name})", move)
    if not isinstance(move, Move) or not (_valid_index(move.sub_board) and _valid_index(move.cell)):
        raise InvalidMoveShapeError(f"move indices must be 0-8: {move!r}", move)
    if mark is not state.turn:
        raise WrongTurnError(f"it is {state.turn}'s turn, not {mark}'s", move)
    if line_winner(state.boards[move.sub_board]) is not None:
        raise SubBoardAlreadyWonError(f"sub-board {move.sub_board} is already won", move)
    if move.sub_board not in allowed_boards(state):
        raise IllegalBoardTargetError(
            f"sub-board {move.sub_board} not playable, must play in {state.active_board}", move)
    if state.boards[move.sub_board][move.cell] is not None:
        raise OccupiedCellError(f"cell {move} is occupied", move)


def apply_move(state: GameState, move: Move, mark: Mark) -> GameState:
    check_move(state, move, mark)
    b, c = move.sub_board, move.cell

    board = list(state.boards[b])
    board[c] = mark
    if line_winner(board) is None and is_full(board):
        LOGGER.debug("sub_board_reset", extra={"sub_board": b})
        board = list(EMPTY_BOARD)
    boards = state.boards[:b] + (tuple(board),) + state.boards[b + 1:]

    winners = tuple(line_winner(bd) for bd in boards)
    next_active = None if winners[c] is not None else c
    move_count = state.move_count + 1

    winner = line_winner(winners)
    if winner is not None:
        phase = Phase.WON
    elif not _open_boards(boards, winners):
        phase = Phase.DRAWN
    elif state.move_limit is not None and move_count >= state.move_limit:
        LOGGER.info("move_limit_reached", extra={"move_limit": state.move_limit})
        phase = Phase.DRAWN
    else:
        phase = Phase.IN_PROGRESS

    return GameState(
        boards=boards,
        active_board=next_active,
        turn=mark.opponent(),
        phase=phase,
        winner=winner,
        move_count=move_count,
        move_limit=state.move_limit,
        last_move=move,
    )
