"""Board data model: nine sub-boards of nine cells plus the active-board pointer.

Cells are ``None`` (empty) or a :class:`Mark`. Indices are row-major 0-8 at
both levels, so a cell index doubles as the index of the sub-board the
opponent is sent to.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .errors import MalformedStateError


class Mark(Enum):
    X = "X"
    O = "O"

    def opponent(self) -> "Mark":
        return Mark.O if self is Mark.X else Mark.X

    def __str__(self) -> str:
        return self.value


class Phase(Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAWN = "drawn"


Cell = Optional[Mark]
SubBoard = Tuple[Cell, ...]

EMPTY_BOARD: SubBoard = (None,) * 9
DEFAULT_MOVE_LIMIT = 300

_CELL_VALUES = frozenset({None, Mark.X, Mark.O})


@dataclass(frozen=True, order=True)
class Move:
    sub_board: int
    cell: int

    @classmethod
    def parse(cls, text: str) -> "Move":
        """Parse ``"b,c"`` / ``"b c"`` into a Move (shape is checked by the rules)."""
        parts = text.replace(",", " ").split()
        if len(parts) != 2:
            raise ValueError(f"Bad move: {text!r}")
        return cls(int(parts[0]), int(parts[1]))

    def __str__(self) -> str:
        return f"{self.sub_board},{self.cell}"


@dataclass(frozen=True)
class GameState:
    boards: Tuple[SubBoard, ...] = (EMPTY_BOARD,) * 9
    active_board: Optional[int] = None
    turn: Mark = Mark.X
    phase: Phase = Phase.IN_PROGRESS
    winner: Optional[Mark] = None
    move_count: int = 0
    move_limit: Optional[int] = DEFAULT_MOVE_LIMIT
    last_move: Optional[Move] = None

    def __post_init__(self) -> None:
        boards = self.boards
        if not isinstance(boards, (list, tuple)) or len(boards) != 9:
            raise MalformedStateError("boards must hold exactly 9 sub-boards")
        normalised = []
        for i, board in enumerate(boards):
            if not isinstance(board, (list, tuple)) or len(board) != 9:
                raise MalformedStateError(f"sub-board {i} must hold exactly 9 cells")
            if not _CELL_VALUES.issuperset(board):
                raise MalformedStateError(f"sub-board {i} holds a cell that is neither Mark nor None")
            normalised.append(tuple(board))
        object.__setattr__(self, "boards", tuple(normalised))

        if self.active_board is not None and (
            not isinstance(self.active_board, int) or isinstance(self.active_board, bool)
            or not 0 <= self.active_board <= 8
        ):
            raise MalformedStateError(f"active board out of range: {self.active_board!r}")
        if not isinstance(self.turn, Mark):
            raise MalformedStateError(f"turn must be a Mark, got {self.turn!r}")
        if (self.phase is Phase.WON) != (self.winner is not None):
            raise MalformedStateError(f"phase {self.phase.name} inconsistent with winner {self.winner}")
        if self.move_limit is not None and self.move_limit <= 0:
            raise MalformedStateError("move limit must be positive")

    @property
    def is_terminal(self) -> bool:
        return self.phase is not Phase.IN_PROGRESS

    def cell(self, sub_board: int, cell: int) -> Cell:
        return self.boards[sub_board][cell]


def new_game(move_limit: Optional[int] = DEFAULT_MOVE_LIMIT) -> GameState:
    return GameState(move_limit=move_limit)


def ascii_board(state: GameState) -> str:
    """Render the full 9x9 grid, sub-boards separated by rules."""
    rows = []
    for big_row in range(3):
        for small_row in range(3):
            chunks = []
            for big_col in range(3):
                board = state.boards[big_row * 3 + big_col]
                chunk = board[small_row * 3: small_row * 3 + 3]
                chunks.append(" ".join(c.value if c else "." for c in chunk))
            rows.append(" | ".join(chunks))
        if big_row < 2:
            rows.append("------+-------+------")
    return "\n".join(rows)
