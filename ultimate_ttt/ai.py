"""Bot for Ultimate Tic Tac Toe: easy / medium / hard difficulties.

SEARCH
──────
Depth-limited minimax with alpha-beta pruning over the rules engine's
``legal_moves`` / ``apply_move``. Every node is a fresh GameState produced by
``apply_move``; the caller's state is never touched. Depth counts the
plies searched after each candidate move, so even easy sees the reply.

1. Terminal positions score ``±WIN_SCORE`` adjusted by plies from the root,
   so quicker wins and slower losses are preferred. Draws score 0.
2. At the depth cutoff the heuristic sums, over undecided sub-boards, a
   per-line pattern score (opponent threats weigh more than our own),
   plus won sub-boards and a bonus for owning the center / corner boards.
3. Root moves are tried in (sub_board, cell) order and only a strictly
   better score replaces the incumbent, so medium and hard are
   deterministic for a given state.
4. Easy plays a uniformly random legal move with probability 0.7.
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Tuple, Union

from .board import GameState, Mark, Move, Phase
from .errors import WrongTurnError
from .logic import WIN_LINES, apply_move, legal_moves, line_winner, sub_board_winners

LOGGER = logging.getLogger("ultimate_ttt.ai")


# ── Difficulty tiers ──────────────────────────────────────────────────────────
@dataclass(frozen=True)
class DifficultyTier:
    name: str
    depth: int
    random_rate: float = 0.0


DIFFICULTIES = {
    'easy':   DifficultyTier('easy', depth=1, random_rate=0.7),
    'medium': DifficultyTier('medium', depth=2),
    'hard':   DifficultyTier('hard', depth=3),
}


def resolve_difficulty(difficulty: Union[str, DifficultyTier],
                       depths: Optional[Mapping[str, int]] = None,
                       random_rate: Optional[float] = None) -> DifficultyTier:
    """Look up a tier by name, applying optional depth / randomness overrides."""
    if isinstance(difficulty, DifficultyTier):
        tier = difficulty
    else:
        try:
            tier = DIFFICULTIES[difficulty]
        except KeyError:
            raise ValueError(f"Unknown difficulty: {difficulty!r}") from None
    if depths and tier.name in depths:
        tier = replace(tier, depth=int(depths[tier.name]))
    if random_rate is not None and tier.random_rate:
        tier = replace(tier, random_rate=random_rate)
    if tier.depth < 1:
        raise ValueError(f"Search depth must be at least 1, got {tier.depth}")
    return tier


# ── Scoring ───────────────────────────────────────────────────────────────────
WIN_SCORE = 1_000_000

# Two-in-a-row with the third cell empty. Blocking outweighs advancing.
_ADVANCE_TWO, _BLOCK_TWO = 10, 15
_ADVANCE_ONE, _BLOCK_ONE = 2, 3

_BOARD_WON     = 200
_CENTER_BOARD  = 4
_CORNER_BOARDS = frozenset({0, 2, 6, 8})
_CENTER_BONUS  = 50
_CORNER_BONUS  = 30


def _mini_threats(board, mark, opp):
    """Line-pattern score of one undecided sub-board from ``mark``'s side."""
    score = 0
    for a, b, c in WIN_LINES:
        line = (board[a], board[b], board[c])
        mine, theirs = line.count(mark), line.count(opp)
        if theirs == 0:
            if mine == 2:   score += _ADVANCE_TWO
            elif mine == 1: score += _ADVANCE_ONE
        elif mine == 0:
            if theirs == 2:   score -= _BLOCK_TWO
            elif theirs == 1: score -= _BLOCK_ONE
    return score


def evaluate(state: GameState, mark: Mark) -> int:
    """Heuristic value of a non-terminal state. Positive = good for ``mark``."""
    opp = mark.opponent()
    score = 0
    for i, owner in enumerate(sub_board_winners(state)):
        if owner is None:
            score += _mini_threats(state.boards[i], mark, opp)
            continue
        sign = 1 if owner is mark else -1
        score += sign * _BOARD_WON
        if i == _CENTER_BOARD:
            score += sign * _CENTER_BONUS
        elif i in _CORNER_BOARDS:
            score += sign * _CORNER_BONUS
    return score


# ── Move ordering ─────────────────────────────────────────────────────────────
def _move_priority(state, move):
    """Try sub-board wins first, then blocks; only affects pruning, not results."""
    board = list(state.boards[move.sub_board])
    board[move.cell] = state.turn
    if line_winner(board) is not None:
        return 2
    board[move.cell] = state.turn.opponent()
    return 1 if line_winner(board) is not None else 0


# ── Alpha-Beta ────────────────────────────────────────────────────────────────
class _SearchStats:
    __slots__ = ('nodes', 'cutoffs')

    def __init__(self):
        self.nodes = 0
        self.cutoffs = 0


def _terminal_score(state, mark, ply):
    if state.phase is Phase.WON:
        return WIN_SCORE - ply if state.winner is mark else -WIN_SCORE + ply
    return 0


def _alphabeta(state, depth, ply, alpha, beta, mark, stats):
    stats.nodes += 1
    if state.is_terminal:
        return _terminal_score(state, mark, ply)
    if depth == 0:
        return evaluate(state, mark)
    moves = legal_moves(state)
    if not moves:
        return 0

    ordered = sorted(moves, key=lambda m: _move_priority(state, m), reverse=True)
    mover = state.turn
    if mover is mark:
        best_val = -math.inf
        for move in ordered:
            val = _alphabeta(apply_move(state, move, mover), depth - 1, ply + 1, alpha, beta, mark, stats)
            best_val = max(best_val, val)
            alpha = max(alpha, best_val)
            if beta <= alpha:
                stats.cutoffs += 1
                break
    else:
        best_val = math.inf
        for move in ordered:
            val = _alphabeta(apply_move(state, move, mover), depth - 1, ply + 1, alpha, beta, mark, stats)
            best_val = min(best_val, val)
            beta = min(beta, best_val)
            if beta <= alpha:
                stats.cutoffs += 1
                break
    return best_val


def search(state: GameState, mark: Mark, depth: int) -> Tuple[float, Optional[Move]]:
    """Best (score, move) for ``mark``, searching ``depth`` plies past each candidate move."""
    if depth < 1:
        raise ValueError(f"Search depth must be at least 1, got {depth}")
    moves = legal_moves(state)
    if not moves:
        return _terminal_score(state, mark, 0), None

    stats = _SearchStats()
    best_val, best_move = -math.inf, None
    alpha = -math.inf
    for move in moves:
        val = _alphabeta(apply_move(state, move, mark), depth, 1, alpha, math.inf, mark, stats)
        if val > best_val:
            best_val, best_move = val, move
        alpha = max(alpha, best_val)

    LOGGER.debug("search_done", extra={
        "mark": mark.value, "depth": depth, "score": best_val, "move": str(best_move),
        "nodes": stats.nodes, "cutoffs": stats.cutoffs,
    })
    return best_val, best_move


# ── Public API ────────────────────────────────────────────────────────────────
def choose_move(state: GameState, mark: Mark,
                difficulty: Union[str, DifficultyTier] = 'medium',
                rng: Optional[random.Random] = None,
                depths: Optional[Mapping[str, int]] = None,
                random_rate: Optional[float] = None) -> Optional[Move]:
    """Pick a move for ``mark``; None only when no legal move exists."""
    tier = resolve_difficulty(difficulty, depths, random_rate)
    moves = legal_moves(state)
    if not moves:
        return None
    if mark is not state.turn:
        raise WrongTurnError(f"it is {state.turn}'s turn, not {mark}'s")

    rng = rng or random
    if tier.random_rate and rng.random() < tier.random_rate:
        move = rng.choice(moves)
        LOGGER.debug("random_move", extra={"mark": mark.value, "tier": tier.name, "move": str(move)})
        return move
    _, move = search(state, mark, tier.depth)
    return move
