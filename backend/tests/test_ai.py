import random
import unittest
from backend.app.engine.ai import GomokuAI, select_move
from backend.app.engine.board import Board, NoLegalMove
from backend.app.models.enums import Side
from backend.app.schemas.game_schema import AIParameters
from backend.tests.fixtures import board_with, drawn_matrix

def params(depth=1, mistake_rate=0.0):
    return AIParameters(
        search_depth=depth,
        aggressiveness=0.4 + depth * 0.2,
        defensiveness=0.5 + depth * 0.25,
        mistake_rate=mistake_rate,
    )

CORNERS = [(0, 0), (0, 14), (14, 0)]

class TestMoveSelector(unittest.TestCase):
    def setUp(self):
        self.ai = GomokuAI(Side.COMPUTER, random.Random(1))

    def test_immediate_win(self):
        """
        Scenario: computer has four in row 7 (cols 3-6), both ends open.
        Row-major scan finds (7,2) before (7,7).
        """
        board = board_with(
            computer=[(7, 3), (7, 4), (7, 5), (7, 6)],
            human=[(0, 0), (0, 2), (14, 14), (14, 12)],
        )
        decision = self.ai.decide(board, params())
        self.assertEqual(decision.cell, (7, 2))
        self.assertEqual(decision.reasoning, "win")

    def test_win_takes_priority_over_block(self):
        """Both sides have four; the human's cell comes first in row order but winning wins."""
        board = board_with(
            computer=[(7, 3), (7, 4), (7, 5), (7, 6)],
            human=[(3, 3), (3, 4), (3, 5), (3, 6)],
        )
        self.assertEqual(self.ai.select_move(board, params()), (7, 2))

    def test_immediate_block(self):
        """Scenario: human has an open four in row 5, computer has nothing."""
        board = board_with(
            human=[(5, 5), (5, 6), (5, 7), (5, 8)],
            computer=[(10, 1), (12, 3), (9, 12)],
        )
        decision = self.ai.decide(board, params())
        self.assertEqual(decision.cell, (5, 4))
        self.assertEqual(decision.reasoning, "block")

    def test_vertical_block(self):
        board = board_with(
            human=[(3, 10), (4, 10), (5, 10), (6, 10)],
            computer=[(7, 10), (8, 9)],
        )
        self.assertEqual(self.ai.select_move(board, params()), (2, 10))

    def test_depth_two_finds_double_threat(self):
        """
        Scenario: computer open three at (7,5..7). Playing (7,4) makes an open
        four that no single reply can stop; (7,3) leaves a single gap that can.
        """
        board = board_with(computer=[(7, 5), (7, 6), (7, 7)], human=CORNERS)
        self.assertIsNone(self.ai.find_winning_move(board, Side.COMPUTER, 1))
        self.assertEqual(self.ai.find_winning_move(board, Side.COMPUTER, 2), (7, 4))

        decision = self.ai.decide(board, params(depth=2))
        self.assertEqual(decision.cell, (7, 4))
        self.assertEqual(decision.reasoning, "win")

    def test_depth_two_blocks_double_threat(self):
        board = board_with(human=[(7, 5), (7, 6), (7, 7)], computer=CORNERS)
        decision = self.ai.decide(board, params(depth=2))
        self.assertEqual(decision.cell, (7, 4))
        self.assertEqual(decision.reasoning, "block")

    def test_win_search_leaves_board_untouched(self):
        board = board_with(computer=[(7, 5), (7, 6), (7, 7)], human=CORNERS)
        before = board.snapshot()
        self.ai.find_winning_move(board, Side.COMPUTER, 2)
        self.ai.find_winning_move(board, Side.HUMAN, 2)
        self.assertEqual(board.snapshot(), before)
        self.assertEqual(board.stone_count(), 6)

    def test_depth_three_with_two_open_threes(self):
        """
        Scenario: computer has open threes in rows 3 and 11. One reply can
        spoil only one of them, so at depth 3 the first searched cell (1,3)
        already wins; depth 2 needs the open-four cell (3,4).
        """
        board = board_with(computer=[(3, 5), (3, 6), (3, 7), (11, 5), (11, 6), (11, 7)])
        before = board.snapshot()

        self.assertEqual(self.ai.find_winning_move(board, Side.COMPUTER, 2), (3, 4))
        self.assertEqual(self.ai.find_winning_move(board, Side.COMPUTER, 3), (1, 3))
        self.assertEqual(board.snapshot(), before)

    def test_depth_three_finds_nothing_from_a_pair(self):
        """
        Scenario: computer has only (7,6),(7,7). Whatever third stone it adds,
        a reply next to it leaves no open four to make.
        """
        board = board_with(computer=[(7, 6), (7, 7)], human=[(6, 6)])
        before = board.snapshot()

        self.assertIsNone(self.ai.find_winning_move(board, Side.COMPUTER, 3))
        self.assertEqual(board.snapshot(), before)
        self.assertEqual(board.stone_count(), 3)

    def test_empty_board_goes_to_center(self):
        decision = self.ai.decide(Board(), params())
        self.assertEqual(decision.cell, (7, 7))

    def test_mistake_branch_short_circuits(self):
        """With mistake_rate 1 even a winning position yields a random cell."""
        board = board_with(computer=[(7, 3), (7, 4), (7, 5), (7, 6)], human=CORNERS)
        decision = self.ai.decide(board, params(mistake_rate=1.0))
        self.assertEqual(decision.reasoning, "mistake")
        self.assertTrue(board.is_empty(*decision.cell))

    def test_seeded_rng_is_reproducible(self):
        board = board_with(human=[(7, 7)])
        first = GomokuAI(Side.COMPUTER, random.Random(42)).select_move(board, params(mistake_rate=1.0))
        second = GomokuAI(Side.COMPUTER, random.Random(42)).select_move(board, params(mistake_rate=1.0))
        self.assertEqual(first, second)

    def test_full_board_raises(self):
        board = Board.from_matrix(drawn_matrix())
        with self.assertRaises(NoLegalMove):
            self.ai.select_move(board, params())
        with self.assertRaises(NoLegalMove):
            select_move(board, params(), random.Random(0))

    def test_last_empty_cell(self):
        matrix = drawn_matrix()
        matrix[14][14] = 0
        board = Board.from_matrix(matrix)
        self.assertEqual(self.ai.select_move(board, params()), (14, 14))
        self.assertEqual(self.ai.select_move(board, params(depth=2)), (14, 14))

    def test_never_picks_an_occupied_cell(self):
        """Plays a short game against random human moves."""
        board = Board()
        human_rng = random.Random(3)
        ai = GomokuAI(Side.COMPUTER, random.Random(7))
        for _ in range(25):
            row, col = human_rng.choice(board.empty_cells())
            board.place(row, col, Side.HUMAN)
            if board.check_win(row, col, Side.HUMAN):
                break
            move = ai.select_move(board, params(mistake_rate=0.2))
            self.assertTrue(board.is_empty(*move))
            board.place(*move, Side.COMPUTER)
            if board.check_win(*move, Side.COMPUTER):
                break

if __name__ == '__main__':
    unittest.main()
