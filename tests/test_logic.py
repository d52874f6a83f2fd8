from __future__ import annotations

import random
import unittest

from ultimate_ttt.board import EMPTY_BOARD, GameState, Mark, Move, Phase, new_game
from ultimate_ttt.errors import (
    ErrorKind,
    GameTerminalError,
    IllegalBoardTargetError,
    InvalidMoveShapeError,
    MalformedStateError,
    OccupiedCellError,
    SubBoardAlreadyWonError,
    WrongTurnError,
)
from ultimate_ttt.logic import (
    allowed_boards,
    apply_move,
    legal_moves,
    line_winner,
    sub_board_winners,
    super_winner,
    winning_line,
)

from .helpers import NO_LINE_PATTERN, WON_BY, board, make_state

X, O = Mark.X, Mark.O


class LineWinnerTests(unittest.TestCase):
    def test_rows_columns_and_diagonals(self) -> None:
        self.assertIs(line_winner(board("XXX......")), X)
        self.assertIs(line_winner(board(".O..O..O.")), O)
        self.assertIs(line_winner(board("..X.X.X..")), X)
        self.assertIsNone(line_winner(board("XOXXOOOXX")))
        self.assertIsNone(line_winner(EMPTY_BOARD))

    def test_winning_line_reports_cells(self) -> None:
        self.assertEqual(winning_line(board("O...O...O")), (0, 4, 8))
        self.assertIsNone(winning_line(board("XO.......")))

    def test_same_check_applies_to_sub_board_winners(self) -> None:
        state = make_state({0: WON_BY["X"], 4: WON_BY["X"], 8: WON_BY["X"]})
        self.assertEqual(sub_board_winners(state), (X, None, None, None, X, None, None, None, X))
        self.assertIs(super_winner(state), X)


class LegalMovesTests(unittest.TestCase):
    def test_initial_state_allows_every_cell(self) -> None:
        moves = legal_moves(new_game())
        self.assertEqual(len(moves), 81)
        self.assertEqual(moves[0], Move(0, 0))
        self.assertEqual(moves[-1], Move(8, 8))

    def test_active_board_restricts_moves(self) -> None:
        state = apply_move(new_game(), Move(4, 4), X)
        self.assertEqual(allowed_boards(state), (4,))
        self.assertEqual(set(legal_moves(state)), {Move(4, c) for c in range(9) if c != 4})

    def test_won_active_board_falls_back_to_open_boards(self) -> None:
        state = make_state({3: WON_BY["O"]}, active_board=3)
        self.assertEqual(allowed_boards(state), (0, 1, 2, 4, 5, 6, 7, 8))
        self.assertEqual(len(legal_moves(state)), 72)

    def test_terminal_state_has_no_moves(self) -> None:
        state = make_state({0: WON_BY["X"], 1: WON_BY["X"], 2: WON_BY["X"]},
                           phase=Phase.WON, winner=X)
        self.assertEqual(legal_moves(state), ())


class ApplyMoveTests(unittest.TestCase):
    def test_center_opening_then_occupied_cell(self) -> None:
        start = new_game()
        after = apply_move(start, Move(4, 4), X)
        self.assertEqual(after.active_board, 4)
        self.assertIs(after.turn, O)
        self.assertIs(after.cell(4, 4), X)
        self.assertIsNone(start.cell(4, 4))

        with self.assertRaises(OccupiedCellError) as ctx:
            apply_move(after, Move(4, 4), O)
        self.assertIs(ctx.exception.kind, ErrorKind.OCCUPIED_CELL)
        self.assertIs(after.cell(4, 4), X)
        self.assertIs(after.turn, O)

    def test_rejections(self) -> None:
        state = apply_move(new_game(), Move(4, 0), X)
        with self.assertRaises(WrongTurnError):
            apply_move(state, Move(0, 0), X)
        with self.assertRaises(IllegalBoardTargetError):
            apply_move(state, Move(1, 0), O)
        with self.assertRaises(InvalidMoveShapeError):
            apply_move(state, Move(0, 9), O)
        with self.assertRaises(InvalidMoveShapeError):
            apply_move(state, Move(-1, 0), O)

    def test_won_sub_board_rejected(self) -> None:
        state = make_state({0: WON_BY["X"]}, turn=O)
        with self.assertRaises(SubBoardAlreadyWonError):
            apply_move(state, Move(0, 5), O)

    def test_move_into_won_target_frees_next_player(self) -> None:
        state = make_state({0: WON_BY["X"]}, turn=O)
        after = apply_move(state, Move(4, 0), O)
        self.assertIsNone(after.active_board)

    def test_drawn_sub_board_resets(self) -> None:
        state = make_state({0: "XOXXOOOX."}, active_board=0)
        after = apply_move(state, Move(0, 8), X)
        self.assertEqual(after.boards[0], EMPTY_BOARD)
        self.assertIsNone(sub_board_winners(after)[0])
        self.assertEqual(after.active_board, 8)

        after = apply_move(after, Move(8, 0), O)
        self.assertEqual(after.active_board, 0)
        self.assertEqual(set(legal_moves(after)), {Move(0, c) for c in range(9)})

    def test_reset_sub_board_can_be_sent_to_itself(self) -> None:
        state = make_state({4: "XOXO.XOXO"}, active_board=4)
        after = apply_move(state, Move(4, 4), X)
        self.assertEqual(after.boards[4], EMPTY_BOARD)
        self.assertEqual(after.active_board, 4)
        self.assertEqual(len(legal_moves(after)), 9)

    def test_super_board_win_ends_game(self) -> None:
        state = make_state({0: WON_BY["X"], 4: WON_BY["X"], 8: "XX.OO...."}, active_board=8)
        after = apply_move(state, Move(8, 2), X)
        self.assertIs(after.phase, Phase.WON)
        self.assertIs(after.winner, X)
        self.assertEqual(winning_line(sub_board_winners(after)), (0, 4, 8))
        with self.assertRaises(GameTerminalError):
            apply_move(after, Move(1, 0), O)

    def test_all_sub_boards_decided_without_line_is_a_draw(self) -> None:
        boards = {i: WON_BY[ch] for i, ch in enumerate(NO_LINE_PATTERN)}
        boards[8] = "XX.OO...."
        state = make_state(boards, active_board=8)
        after = apply_move(state, Move(8, 2), X)
        self.assertIs(after.phase, Phase.DRAWN)
        self.assertIsNone(after.winner)
        self.assertEqual(legal_moves(after), ())

    def test_move_limit_forces_draw(self) -> None:
        state = apply_move(new_game(move_limit=2), Move(0, 0), X)
        self.assertIs(state.phase, Phase.IN_PROGRESS)
        state = apply_move(state, Move(0, 4), O)
        self.assertIs(state.phase, Phase.DRAWN)
        self.assertEqual(state.move_count, 2)

    def test_no_move_limit_keeps_playing(self) -> None:
        state = new_game(move_limit=None)
        for move, mark in ((Move(0, 0), X), (Move(0, 4), O), (Move(4, 0), X)):
            state = apply_move(state, move, mark)
        self.assertIs(state.phase, Phase.IN_PROGRESS)

    def test_malformed_state_aborts(self) -> None:
        with self.assertRaises(MalformedStateError):
            GameState(boards=(EMPTY_BOARD,) * 8)
        with self.assertRaises(MalformedStateError):
            GameState(boards=(EMPTY_BOARD,) * 8 + (("X",) * 9,))
        with self.assertRaises(MalformedStateError):
            GameState(active_board=9)
        with self.assertRaises(MalformedStateError):
            GameState(active_board=True)
        with self.assertRaises(MalformedStateError):
            GameState(phase=Phase.WON)


class RandomPlayPropertyTests(unittest.TestCase):
    def test_invariants_hold_over_random_games(self) -> None:
        for seed in range(6):
            rng = random.Random(seed)
            state = new_game()
            expected_turn = X
            while not state.is_terminal:
                self.assertIs(state.turn, expected_turn)
                before = sub_board_winners(state)
                move = rng.choice(legal_moves(state))
                state = apply_move(state, move, state.turn)
                after = sub_board_winners(state)

                for i in range(9):
                    if before[i] is not None:
                        self.assertIs(after[i], before[i])
                    if after[i] is None:
                        self.assertIn(None, state.boards[i])
                expected_active = None if after[move.cell] is not None else move.cell
                self.assertEqual(state.active_board, expected_active)
                self.assertEqual(state.winner, line_winner(after))
                expected_turn = expected_turn.opponent()
            self.assertIs(state.turn, expected_turn)


if __name__ == "__main__":
    unittest.main()
