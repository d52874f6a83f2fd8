"""Translation to and from the JSON payload stored / broadcast by collaborators.

Payload shape::

    {"boards": [[ "X" | "O" | None ] * 9] * 9,
     "activeBoard": 0-8 | None,
     "miniBoardWinners": [ "X" | "O" | None ] * 9}

``turn`` and ``status`` travel outside the payload. Winners are always
recomputed from the cells when loading. A completed game with no super-board
line loads as a draw unless the stored winner is passed in (a resignation
leaves no line on the board).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .board import DEFAULT_MOVE_LIMIT, GameState, Mark, Move, Phase
from .errors import MalformedStateError
from .logic import legal_moves, line_winner, sub_board_winners

LOGGER = logging.getLogger("ultimate_ttt.serde")

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"


def _mark_to_str(mark: Optional[Mark]) -> Optional[str]:
    return None if mark is None else mark.value


def _str_to_mark(raw: Any) -> Optional[Mark]:
    if raw is None:
        return None
    try:
        return Mark(raw)
    except ValueError:
        raise MalformedStateError(f"Bad mark: {raw!r}") from None


def state_to_dict(state: GameState) -> Dict[str, Any]:
    return {
        "boards": [[_mark_to_str(c) for c in board] for board in state.boards],
        "activeBoard": state.active_board,
        "miniBoardWinners": [_mark_to_str(w) for w in sub_board_winners(state)],
    }


def state_from_dict(payload: Dict[str, Any], turn: str, status: str = STATUS_ACTIVE,
                    move_limit: Optional[int] = DEFAULT_MOVE_LIMIT,
                    winner: Optional[str] = None) -> GameState:
    """Rebuild a GameState from a stored payload plus the externally tracked turn / status."""
    try:
        raw_boards = payload["boards"]
    except (KeyError, TypeError):
        raise MalformedStateError("payload has no 'boards'") from None
    if not isinstance(raw_boards, list) or len(raw_boards) != 9:
        raise MalformedStateError("'boards' must be a list of 9 sub-boards")
    boards = []
    for raw in raw_boards:
        if not isinstance(raw, list) or len(raw) != 9:
            raise MalformedStateError("each sub-board must be a list of 9 cells")
        boards.append(tuple(_str_to_mark(c) for c in raw))

    active = payload.get("activeBoard")
    turn_mark = _str_to_mark(turn)
    if turn_mark is None:
        raise MalformedStateError("turn must be 'X' or 'O'")

    winners = [line_winner(b) for b in boards]
    stored = payload.get("miniBoardWinners")
    if stored is not None and [_str_to_mark(w) for w in stored] != winners:
        LOGGER.warning("mini_board_winners_mismatch", extra={"stored": stored})

    stored_winner = _str_to_mark(winner)
    winner = line_winner(winners)
    if winner is not None and stored_winner not in (None, winner):
        raise MalformedStateError(f"stored winner {stored_winner} contradicts the board ({winner} has a line)")
    if winner is None and status == STATUS_COMPLETED:
        winner = stored_winner
    move_count = sum(1 for b in boards for c in b if c is not None)
    unfinished = GameState(boards=tuple(boards), active_board=active, turn=turn_mark,
                           move_count=move_count, move_limit=move_limit)
    if winner is not None:
        phase = Phase.WON
    elif status == STATUS_COMPLETED or not legal_moves(unfinished):
        phase = Phase.DRAWN
    else:
        phase = Phase.IN_PROGRESS
    return GameState(boards=tuple(boards), active_board=active, turn=turn_mark,
                     phase=phase, winner=winner, move_count=move_count, move_limit=move_limit)


def status_of(state: GameState) -> str:
    return STATUS_COMPLETED if state.is_terminal else STATUS_ACTIVE


def move_to_dict(move: Move) -> Dict[str, int]:
    return {"boardIndex": move.sub_board, "squareIndex": move.cell}


def move_from_dict(payload: Dict[str, Any]) -> Move:
    try:
        return Move(int(payload["boardIndex"]), int(payload["squareIndex"]))
    except (KeyError, TypeError, ValueError):
        raise MalformedStateError(f"Bad move payload: {payload!r}") from None
