"""Ultimate Tic Tac Toe core.

- board: immutable game state and value types
- logic: rules engine (win detection, legal moves, move application)
- ai: minimax / alpha-beta bot with difficulty tiers
- controller: turn orchestration and background bot search
- serde: JSON payload translation for storage / transport collaborators
"""

from .board import GameState, Mark, Move, Phase, new_game, ascii_board
from .errors import (
    ErrorKind,
    MoveError,
    OccupiedCellError,
    IllegalBoardTargetError,
    SubBoardAlreadyWonError,
    WrongTurnError,
    GameTerminalError,
    InvalidMoveShapeError,
    MalformedStateError,
    SearchInProgressError,
)
from .logic import WIN_LINES, line_winner, winning_line, legal_moves, allowed_boards, apply_move, check_move
from .ai import DIFFICULTIES, DifficultyTier, choose_move, evaluate, search
from .config import Settings
from .controller import GameController
from .serde import state_to_dict, state_from_dict, move_to_dict, move_from_dict

__version__ = "1.0.0"

__all__ = [
    "GameState", "Mark", "Move", "Phase", "new_game", "ascii_board",
    "ErrorKind", "MoveError", "OccupiedCellError", "IllegalBoardTargetError",
    "SubBoardAlreadyWonError", "WrongTurnError", "GameTerminalError",
    "InvalidMoveShapeError", "MalformedStateError", "SearchInProgressError",
    "WIN_LINES", "line_winner", "winning_line", "legal_moves", "allowed_boards",
    "apply_move", "check_move",
    "DIFFICULTIES", "DifficultyTier", "choose_move", "evaluate", "search",
    "Settings", "GameController",
    "state_to_dict", "state_from_dict", "move_to_dict", "move_from_dict",
]
