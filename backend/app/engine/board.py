import logging
from contextlib import contextmanager
from typing import Iterator, List, Sequence, Set, Tuple

from backend.app.models.enums import Side

# Logger setup
logger = logging.getLogger(__name__)

BOARD_SIZE = 15
WIN_LENGTH = 5
CENTER = BOARD_SIZE // 2

# Directions: Horizontal, Vertical, Diagonal \, Diagonal /
DIRECTIONS = [(0, 1), (1, 0), (1, 1), (1, -1)]


class InvalidMove(ValueError):
    """Placement on an occupied or out-of-range cell."""


class NoLegalMove(Exception):
    """The board is full; no cell is left to play."""


class Board:
    def __init__(self):
        """
        Board uses (row, col) indexing, row 0 is the TOP.
        Values: 0=Empty, 1=Human, 2=Computer
        """
        self.grid: List[List[int]] = [[Side.EMPTY] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        self._stones = 0

    @classmethod
    def from_matrix(cls, matrix: Sequence[Sequence[int]]) -> "Board":
        """Build a board from a 15x15 matrix of 0/1/2 values (test fixtures, restores)."""
        if len(matrix) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in matrix):
            raise ValueError(f"Matrix must be {BOARD_SIZE}x{BOARD_SIZE}")
        board = cls()
        for r, row in enumerate(matrix):
            for c, val in enumerate(row):
                side = Side(val)
                if side != Side.EMPTY:
                    board.grid[r][c] = side
                    board._stones += 1
        return board

    @staticmethod
    def in_bounds(row: int, col: int) -> bool:
        return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE

    def get(self, row: int, col: int) -> int:
        return self.grid[row][col]

    def is_empty(self, row: int, col: int) -> bool:
        return self.in_bounds(row, col) and self.grid[row][col] == Side.EMPTY

    def place(self, row: int, col: int, side: Side) -> None:
        """
        Places a mark for `side`. Raises InvalidMove if the cell is
        occupied or off the board. Touches nothing but that single cell.
        """
        if side == Side.EMPTY:
            raise InvalidMove("Cannot place an empty mark")
        if not self.in_bounds(row, col):
            raise InvalidMove(f"Cell ({row}, {col}) is off the board")
        if self.grid[row][col] != Side.EMPTY:
            raise InvalidMove(f"Cell ({row}, {col}) is already occupied")
        self.grid[row][col] = side
        self._stones += 1

    @contextmanager
    def probe(self, row: int, col: int, side: Side) -> Iterator[None]:
        """Hypothetical placement, reverted to Empty when the block exits."""
        self.grid[row][col] = side
        self._stones += 1
        try:
            yield
        finally:
            self.grid[row][col] = Side.EMPTY
            self._stones -= 1

    def check_win(self, row: int, col: int, side: Side) -> bool:
        """Checks for 5-in-a-row running through (row, col) for `side`."""
        grid = self.grid
        for dr, dc in DIRECTIONS:
            count = 1
            # Check positive direction
            for i in range(1, WIN_LENGTH):
                nr, nc = row + dr * i, col + dc * i
                if 0 <= nr < BOARD_SIZE and 0 <= nc < BOARD_SIZE and grid[nr][nc] == side:
                    count += 1
                else:
                    break
            # Check negative direction
            for i in range(1, WIN_LENGTH):
                nr, nc = row - dr * i, col - dc * i
                if 0 <= nr < BOARD_SIZE and 0 <= nc < BOARD_SIZE and grid[nr][nc] == side:
                    count += 1
                else:
                    break

            if count >= WIN_LENGTH:
                return True
        return False

    def is_full(self) -> bool:
        return self._stones >= BOARD_SIZE * BOARD_SIZE

    def stone_count(self) -> int:
        return self._stones

    def empty_cells(self) -> List[Tuple[int, int]]:
        """Empty cells in row-major order."""
        return [
            (r, c)
            for r in range(BOARD_SIZE)
            for c in range(BOARD_SIZE)
            if self.grid[r][c] == Side.EMPTY
        ]

    def neighbors(self, distance: int = 2) -> Set[Tuple[int, int]]:
        """Empty cells within `distance` (king moves) of any stone."""
        cand: Set[Tuple[int, int]] = set()
        for r in range(BOARD_SIZE):
            for c in range(BOARD_SIZE):
                if self.grid[r][c] == Side.EMPTY:
                    continue
                for dr in range(-distance, distance + 1):
                    for dc in range(-distance, distance + 1):
                        nr, nc = r + dr, c + dc
                        if 0 <= nr < BOARD_SIZE and 0 <= nc < BOARD_SIZE and self.grid[nr][nc] == Side.EMPTY:
                            cand.add((nr, nc))
        return cand

    def snapshot(self) -> List[List[int]]:
        """Plain-int copy of the grid, safe to hand to observers."""
        return [[int(v) for v in row] for row in self.grid]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.grid == other.grid

    # --- Formatting ---

    def get_visual_board(self) -> str:
        """Generates an ASCII grid representation."""
        symbols = {Side.EMPTY: ".", Side.HUMAN: "X", Side.COMPUTER: "O"}
        header = "   " + " ".join(f"{c:x}" for c in range(BOARD_SIZE))
        rows_str = []
        for r in range(BOARD_SIZE):
            cells = " ".join(symbols[self.grid[r][c]] for c in range(BOARD_SIZE))
            rows_str.append(f"{r:2d} {cells}")
        return header + "\n" + "\n".join(rows_str)
