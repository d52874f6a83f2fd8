"""Turn orchestration for one game: humans, the bot and remote updates.

``submit_move`` is the only path through which a move reaches the game
state. The bot's search runs on a one-worker gevent thread pool so the
event loop keeps serving input while it thinks; its result is checked
against the current state before it is submitted.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

import gevent
from gevent.threadpool import ThreadPool

from .ai import choose_move
from .board import GameState, Mark, Move, Phase, new_game
from .config import Settings
from .errors import GameTerminalError, MoveError, SearchInProgressError, WrongTurnError
from .logic import apply_move, legal_moves
from .serde import state_from_dict, state_to_dict, status_of

LOGGER = logging.getLogger("ultimate_ttt.controller")


class GameController:
    def __init__(self, bot_mark: Optional[Mark] = None, difficulty: Optional[str] = None,
                 state: Optional[GameState] = None, settings: Optional[Settings] = None,
                 rng=None):
        self.settings = settings or Settings.from_env()
        self.bot_mark = bot_mark
        self.difficulty = difficulty or self.settings.difficulty
        self._rng = rng
        self._state = state or new_game(self.settings.move_limit)
        self.history: List[Tuple[Mark, Move]] = []
        self._pool: Optional[ThreadPool] = None
        self._pending: Optional[gevent.Greenlet] = None
        # bumped whenever an outstanding bot result must be thrown away
        self._generation = 0

    # ── Inspection ───────────────────────────────────────────────────────────
    @property
    def state(self) -> GameState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state.is_terminal

    @property
    def search_pending(self) -> bool:
        return self._pending is not None

    def legal_moves(self) -> Tuple[Move, ...]:
        return legal_moves(self._state)

    def status_text(self) -> str:
        s = self._state
        if s.phase is Phase.WON:
            return f"{s.winner} wins"
        if s.phase is Phase.DRAWN:
            return "Draw"
        where = "any board" if s.active_board is None else f"board {s.active_board}"
        text = f"{s.turn} to move ({where})"
        if self.search_pending:
            text += ", bot is thinking"
        return text

    # ── Moves ────────────────────────────────────────────────────────────────
    def submit_move(self, mover: Mark, move: Move) -> GameState:
        if self._pending is not None:
            raise WrongTurnError(f"{mover} cannot move while the bot is thinking", move)
        return self._apply(mover, move)

    def _apply(self, mover, move):
        try:
            new_state = apply_move(self._state, move, mover)
        except MoveError as exc:
            LOGGER.info("move_rejected", extra={"kind": exc.kind.value, "mover": str(mover), "move": str(move)})
            raise
        self._state = new_state
        self.history.append((mover, move))
        if new_state.is_terminal:
            LOGGER.info("game_over", extra={"phase": new_state.phase.value,
                                            "winner": getattr(new_state.winner, "value", None)})
            self._generation += 1
        return new_state

    def request_bot_move(self, difficulty: Optional[str] = None) -> Optional[Move]:
        """Search synchronously and return the bot's move; the caller submits it."""
        if self.bot_mark is None:
            raise RuntimeError("this game has no bot player")
        return self._search(self._state, difficulty)

    def start_bot_turn(self, difficulty: Optional[str] = None) -> gevent.Greenlet:
        """Search in the background and submit the result; returns the waiting greenlet.

        The greenlet's value is the applied Move, or None if the result was
        discarded because the game ended or was reset meanwhile.
        """
        if self.bot_mark is None:
            raise RuntimeError("this game has no bot player")
        if self._pending is not None:
            raise SearchInProgressError("a bot search is already running for this game")
        if self._state.is_terminal:
            raise GameTerminalError(f"game is over ({self._state.phase.name})")
        if self._state.turn is not self.bot_mark:
            raise WrongTurnError(f"it is {self._state.turn}'s turn, not the bot's")
        if self._pool is None:
            self._pool = ThreadPool(1)
        self._pending = gevent.spawn(self._run_bot_turn, self._generation, self._state, difficulty)
        return self._pending

    def _search(self, state, difficulty):
        return choose_move(state, self.bot_mark, difficulty or self.difficulty, rng=self._rng,
                           depths=self.settings.depths, random_rate=self.settings.easy_random_rate)

    def _run_bot_turn(self, generation, snapshot, difficulty):
        try:
            return self._finish_bot_turn(generation, snapshot, difficulty)
        finally:
            if self._pending is gevent.getcurrent():
                self._pending = None

    def _discarded(self, generation, move):
        if generation != self._generation or self._state.is_terminal:
            reason = "cancelled"
        elif self._state.turn is not self.bot_mark:
            reason = "turn_changed"
        else:
            return False
        LOGGER.warning("bot_result_discarded", extra={"move": str(move), "reason": reason})
        return True

    def _finish_bot_turn(self, generation, snapshot, difficulty):
        move = self._pool.spawn(self._search, snapshot, difficulty).get()
        if self._discarded(generation, move):
            return None
        if move not in legal_moves(self._state):
            LOGGER.warning("stale_bot_result", extra={"move": str(move)})
            move = self._pool.spawn(self._search, self._state, difficulty).get()
            if move is None or self._discarded(generation, move):
                return None
        try:
            self._apply(self.bot_mark, move)
        except MoveError as exc:
            LOGGER.warning("bot_result_discarded", extra={"move": str(move), "reason": exc.kind.value})
            return None
        return move

    # ── Lifecycle ────────────────────────────────────────────────────────────
    def sync_state(self, state: GameState) -> None:
        """Adopt a state pushed by a remote collaborator."""
        self._state = state
        if state.is_terminal:
            self._generation += 1

    def resign(self, mark: Mark) -> GameState:
        if self._state.is_terminal:
            raise GameTerminalError(f"game is over ({self._state.phase.name})")
        self._state = replace(self._state, phase=Phase.WON, winner=mark.opponent())
        self._generation += 1
        LOGGER.info("resigned", extra={"mover": mark.value})
        return self._state

    def reset(self) -> GameState:
        self._generation += 1
        self._pending = None
        self._state = new_game(self.settings.move_limit)
        self.history = []
        return self._state

    def close(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.kill(block=False)
            self._pending = None
        if self._pool is not None:
            self._pool.kill()
            self._pool = None

    # ── Boundary ─────────────────────────────────────────────────────────────
    def to_dict(self) -> Dict[str, Any]:
        return {
            "game_state": state_to_dict(self._state),
            "current_turn": self._state.turn.value,
            "status": status_of(self._state),
        }

    def load(self, game_state: Dict[str, Any], current_turn: str, status: str,
             winner: Optional[str] = None) -> GameState:
        self.sync_state(state_from_dict(game_state, current_turn, status, self.settings.move_limit, winner))
        return self._state
