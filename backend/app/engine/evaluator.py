"""
Pattern scoring for candidate cells.

Scores are one-ply: each empty cell is rated by the runs a mark placed there
would extend along the four axes, plus a centre bias and a star-point bonus.
"""

import math
from typing import List

from backend.app.engine.board import Board, BOARD_SIZE, CENTER, DIRECTIONS
from backend.app.models.enums import Side
from backend.app.schemas.game_schema import AIParameters

SCAN_LENGTH = 4

# Pattern scores
FIVE_SCORE = 100000
OPEN_FOUR_SCORE = 10000
OPEN_THREE_SCORE = 1000
OPEN_TWO_SCORE = 100
POTENTIAL_SCORE = 500

STAR_POINTS = frozenset(
    (r, c)
    for r in (3, CENTER, 11)
    for c in (3, CENTER, 11)
    if (r, c) != (CENTER, CENTER)
)
STAR_POINT_BONUS = 5


def distance_to_center(row: int, col: int) -> float:
    return math.sqrt((row - CENTER) ** 2 + (col - CENTER) ** 2)


def evaluate_direction(board: Board, row: int, col: int, dx: int, dy: int, side: Side, depth: int = 1) -> float:
    """Scores the axis (dx, dy) through (row, col) as if `side` played there."""
    grid = board.grid
    side_count = 0
    empty_count = 0
    potential = 0

    for direction in (-1, 1):
        run_side = 0
        run_empty = 0
        blocked = False

        for step in range(1, SCAN_LENGTH + 1):
            r = row + step * direction * dx
            c = col + step * direction * dy
            if not (0 <= r < BOARD_SIZE and 0 <= c < BOARD_SIZE):
                blocked = True
                break
            cell = grid[r][c]
            if cell == side:
                run_side += 1
            elif cell == Side.EMPTY:
                run_empty += 1
                # Gap right after a same-side run
                if step > 1 and grid[r - direction * dx][c - direction * dy] == side:
                    potential += 1
                break
            else:
                blocked = True
                break

        if not blocked:
            side_count += run_side
            empty_count += run_empty

    if side_count >= 4:
        score = FIVE_SCORE
    elif side_count == 3 and empty_count >= 1:
        score = OPEN_FOUR_SCORE
    elif side_count == 2 and empty_count >= 2:
        score = OPEN_THREE_SCORE
    elif side_count == 1 and empty_count >= 3:
        score = OPEN_TWO_SCORE
    elif potential >= 2:
        score = POTENTIAL_SCORE
    else:
        score = 0

    if depth > 1 and score > 0:
        return score * (1 + depth * 0.2)
    return float(score)


def evaluate_board(board: Board, side: Side, params: AIParameters) -> List[List[float]]:
    """
    Returns a 15x15 score grid for `side`. Occupied cells stay at 0 and
    must not be treated as candidates. The board is only read.
    """
    depth = params.search_depth
    scores = [[0.0] * BOARD_SIZE for _ in range(BOARD_SIZE)]

    for r in range(BOARD_SIZE):
        for c in range(BOARD_SIZE):
            if board.grid[r][c] != Side.EMPTY:
                continue
            score = (14 - distance_to_center(r, c)) * (1 + depth * 0.1)
            for dx, dy in DIRECTIONS:
                score += evaluate_direction(board, r, c, dx, dy, side, depth)
            if (r, c) in STAR_POINTS:
                score += STAR_POINT_BONUS * depth
            scores[r][c] = score

    return scores
