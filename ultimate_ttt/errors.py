"""Error taxonomy for move validation and state handling.

Every MoveError is raised before a successor state is built, so a caller
that catches one still holds the untouched original state.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    OCCUPIED_CELL = "occupied_cell"
    ILLEGAL_BOARD_TARGET = "illegal_board_target"
    SUB_BOARD_ALREADY_WON = "sub_board_already_won"
    WRONG_TURN = "wrong_turn"
    GAME_TERMINAL = "game_terminal"
    INVALID_MOVE_SHAPE = "invalid_move_shape"


class MoveError(ValueError):
    kind: ErrorKind

    def __init__(self, message, move=None):
        super().__init__(message)
        self.move = move


class OccupiedCellError(MoveError):
    kind = ErrorKind.OCCUPIED_CELL


class IllegalBoardTargetError(MoveError):
    kind = ErrorKind.ILLEGAL_BOARD_TARGET


class SubBoardAlreadyWonError(MoveError):
    kind = ErrorKind.SUB_BOARD_ALREADY_WON


class WrongTurnError(MoveError):
    kind = ErrorKind.WRONG_TURN


class GameTerminalError(MoveError):
    kind = ErrorKind.GAME_TERMINAL


class InvalidMoveShapeError(MoveError):
    kind = ErrorKind.INVALID_MOVE_SHAPE


class MalformedStateError(ValueError):
    """State or payload that could not have come from legal play."""


class SearchInProgressError(RuntimeError):
    """A bot search is already outstanding for this game."""
