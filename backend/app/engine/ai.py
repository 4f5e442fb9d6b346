import asyncio
import logging
import random
from typing import Iterable, List, Optional, Tuple
from pydantic import BaseModel, Field

from backend.app.engine.board import Board, NoLegalMove, BOARD_SIZE, DIRECTIONS, WIN_LENGTH
from backend.app.engine.evaluator import distance_to_center, evaluate_board
from backend.app.models.enums import Side
from backend.app.schemas.game_schema import AIParameters

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]

CENTER_BIAS_RADIUS = 3
EARLY_GAME_STONES = 10
EARLY_CENTER_MULTIPLIER = 5
SEARCH_RADIUS = 2

# --- 1. Structured Output ---
class MoveDecision(BaseModel):
    reasoning: str = Field(description="Which branch of the decision chain picked the cell.")
    row: int
    col: int

    @property
    def cell(self) -> Cell:
        return (self.row, self.col)


def _touches(grid: List[List[int]], row: int, col: int, side: Side) -> bool:
    """True if any of the 8 surrounding cells holds `side`."""
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            if dr == 0 and dc == 0:
                continue
            nr, nc = row + dr, col + dc
            if 0 <= nr < BOARD_SIZE and 0 <= nc < BOARD_SIZE and grid[nr][nc] == side:
                return True
    return False


class GomokuAI:
    """
    Picks one cell per computer turn. The decision chain is:
    mistake -> immediate win -> immediate block -> strategic score -> fallback.

    Randomness comes only from `rng`, so seeding it makes a game reproducible.
    """

    def __init__(self, player_id: Side = Side.COMPUTER, rng: Optional[random.Random] = None):
        self.player_id = player_id
        self.opponent_id = player_id.opponent()
        self.rng = rng or random.Random()

    def select_move(self, board: Board, params: AIParameters) -> Cell:
        return self.decide(board, params).cell

    async def decide_async(self, board: Board, params: AIParameters) -> MoveDecision:
        """
        Runs `decide` in a worker thread so a deep search does not stall the
        event loop. The search probes `board` in place: pass a copy if
        anything else can read it meanwhile.
        """
        return await asyncio.to_thread(self.decide, board, params)

    def decide(self, board: Board, params: AIParameters) -> MoveDecision:
        if board.is_full():
            raise NoLegalMove("Board is full")

        # 1. Deliberate imperfection, may override a winning move
        if self.rng.random() < params.mistake_rate:
            return self._decision("mistake", self._weighted_random_move(board))

        # 2. Immediate win
        move = self.find_winning_move(board, self.player_id, params.search_depth)
        if move:
            return self._decision("win", move)

        # 3. Block the opponent's win
        move = self.find_winning_move(board, self.opponent_id, params.search_depth)
        if move:
            return self._decision("block", move)

        # 4. Strategic scoring
        strategic = self._find_strategic_move(board, params)
        if strategic:
            return self._decision(*strategic)

        # 5. Nothing stood out
        return self._decision("fallback", self._select_optimal_move(board, params))

    def _decision(self, reasoning: str, move: Cell) -> MoveDecision:
        logger.debug("AI %s plays %s (%s)", self.player_id.name, move, reasoning)
        return MoveDecision(reasoning=reasoning, row=move[0], col=move[1])

    # --- Win search ---

    def find_winning_move(self, board: Board, side: Side, depth: int = 1) -> Optional[Cell]:
        """
        Returns the first cell (row-major) that wins for `side`.

        With depth > 1, a cell also counts as winning when, for every opponent
        reply, `side` still has a winning move at depth - 1. The recursive call
        keeps the same `side`. Hypothetical cells are limited to the
        neighbourhood of existing stones; depth stays <= 3 so the search is
        a bounded heuristic rather than a proof.
        """
        move = self._immediate_win(board, side)
        if move:
            return move
        if depth <= 1:
            return None

        opponent = side.opponent()
        candidates = self._search_cells(board)
        for r, c in candidates:
            with board.probe(r, c, side):
                # No immediate win existed, so a new one has to run through (r, c)
                if depth == 2 and not board.is_full() and not self._threat_through(board, r, c, side):
                    continue
                can_win = True
                for x, y in self._reply_cells(board, candidates, (r, c)):
                    with board.probe(x, y, opponent):
                        if self.find_winning_move(board, side, depth - 1) is None:
                            can_win = False
                    if not can_win:
                        break
            if can_win:
                return (r, c)
        return None

    def _immediate_win(self, board: Board, side: Side) -> Optional[Cell]:
        grid = board.grid
        for r in range(BOARD_SIZE):
            for c in range(BOARD_SIZE):
                # check_win only reads the cells around (r, c)
                if grid[r][c] == Side.EMPTY and _touches(grid, r, c, side) and board.check_win(r, c, side):
                    return (r, c)
        return None

    def _threat_through(self, board: Board, row: int, col: int, side: Side) -> bool:
        """True if `side` has a winning empty cell on a line through (row, col)."""
        grid = board.grid
        for dr, dc in DIRECTIONS:
            for step in range(-(WIN_LENGTH - 1), WIN_LENGTH):
                r, c = row + dr * step, col + dc * step
                if step == 0 or not (0 <= r < BOARD_SIZE and 0 <= c < BOARD_SIZE):
                    continue
                if grid[r][c] == Side.EMPTY and board.check_win(r, c, side):
                    return True
        return False

    def _search_cells(self, board: Board) -> List[Cell]:
        cells = sorted(board.neighbors(SEARCH_RADIUS))
        if not cells and board.stone_count():
            return board.empty_cells()
        return cells

    def _reply_cells(self, board: Board, candidates: Iterable[Cell], placed: Cell) -> List[Cell]:
        """Neighbourhood after `placed` went down, in row-major order."""
        cells = {cell for cell in candidates if board.is_empty(*cell)}
        pr, pc = placed
        for dr in range(-SEARCH_RADIUS, SEARCH_RADIUS + 1):
            for dc in range(-SEARCH_RADIUS, SEARCH_RADIUS + 1):
                if board.is_empty(pr + dr, pc + dc):
                    cells.add((pr + dr, pc + dc))
        if not cells and not board.is_full():
            return board.empty_cells()
        return sorted(cells)

    # --- Strategic scoring ---

    def _find_strategic_move(self, board: Board, params: AIParameters) -> Optional[Tuple[str, Cell]]:
        attack_scores = evaluate_board(board, self.player_id, params)
        defense_scores = evaluate_board(board, self.opponent_id, params)

        max_attack = float("-inf")
        max_defense = float("-inf")
        best_attack_move = None
        best_defense_move = None

        for r, c in board.empty_cells():
            attack = attack_scores[r][c] * params.aggressiveness
            defense = defense_scores[r][c] * params.defensiveness
            if attack > max_attack:
                max_attack = attack
                best_attack_move = (r, c)
            if defense > max_defense:
                max_defense = defense
                best_defense_move = (r, c)

        if best_attack_move is None:
            return None

        attack_weight = 0.4 + params.aggressiveness * 0.4
        defense_weight = 0.6 + params.defensiveness * 0.3
        if max_attack * attack_weight >= max_defense * defense_weight:
            return "attack", best_attack_move
        return "defense", best_defense_move

    def _select_optimal_move(self, board: Board, params: AIParameters) -> Cell:
        scores = evaluate_board(board, self.player_id, params)
        max_score = float("-inf")
        best_moves: List[Cell] = []

        for r, c in board.empty_cells():
            if scores[r][c] > max_score:
                max_score = scores[r][c]
                best_moves = [(r, c)]
            elif scores[r][c] == max_score:
                best_moves.append((r, c))

        if best_moves:
            return self.rng.choice(best_moves)
        return self._weighted_random_move(board)

    def _weighted_random_move(self, board: Board) -> Cell:
        """Random empty cell, biased toward the centre (more so early on)."""
        cells = board.empty_cells()
        if not cells:
            raise NoLegalMove("Board is full")

        early = board.stone_count() < EARLY_GAME_STONES
        weights = []
        for r, c in cells:
            dist = distance_to_center(r, c)
            weight = 10 / (1 + dist)
            if early and dist <= CENTER_BIAS_RADIUS:
                weight *= EARLY_CENTER_MULTIPLIER
            weights.append(weight)

        return self.rng.choices(cells, weights=weights, k=1)[0]


def select_move(board: Board, params: AIParameters, rng: Optional[random.Random] = None) -> Cell:
    """Engine entry point: one legal cell for the computer."""
    return GomokuAI(Side.COMPUTER, rng).select_move(board, params)
