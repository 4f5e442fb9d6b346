"""
Game Service - Centralized Game Logic

This service is the single source of truth for all game state modifications.
It handles:
- Session creation (restoring the player's stored ratings)
- Move processing (human and AI)
- The AI thinking delay
- Rating updates and persistence on game completion
- Forced results requested by the session-abuse detector

Used by the HTTP API and by the console client.
"""

import asyncio
import itertools
import logging
import random
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.events import CompleteEvent, GameEvents, MoveEvent, game_events
from backend.app.core.settings import EngineSettings, ThinkingConfig, settings
from backend.app.engine.ai import GomokuAI, MoveDecision
from backend.app.engine.board import Board, NoLegalMove
from backend.app.engine.elo import RatingController
from backend.app.models.enums import GameStatus, Side
from backend.app.schemas.game_schema import AIParameters, GameResponse, MoveRecord, RatingView
from backend.app.services import rating_store

logger = logging.getLogger(__name__)


def thinking_time_ms(params: AIParameters, config: ThinkingConfig, rng: random.Random) -> float:
    """Minimum time the computer appears to think, grows with search depth."""
    if not config.enabled:
        return 0.0
    return config.base_ms + params.search_depth * config.per_depth_ms + rng.random() * config.jitter_ms


class GameSession:
    """
    One human against the adaptive computer. Owns the current Board and
    the RatingController; the human always moves first.
    """

    def __init__(self, session_id: int, player_name: str = "guest",
                 controller: Optional[RatingController] = None,
                 rng: Optional[random.Random] = None):
        self.session_id = session_id
        self.player_name = player_name
        self.controller = controller or RatingController(settings.elo)
        self.rng = rng or random.Random()
        self.ai = GomokuAI(Side.COMPUTER, self.rng)
        self.created_at = datetime.now(timezone.utc)
        self.games_played = 0
        self.scores: Dict[Side, int] = {Side.HUMAN: 0, Side.COMPUTER: 0}
        self.new_game()

    def new_game(self):
        """Discards the previous board; ratings carry over."""
        self.board = Board()
        self.current_turn = Side.HUMAN
        self.winner: Optional[Side] = None
        self.status = GameStatus.IN_PROGRESS
        self.finish_reason: Optional[str] = None
        self.result_reported = False
        self.history: List[MoveRecord] = []
        self.last_move_time = time.monotonic()

    @property
    def is_over(self) -> bool:
        return self.status != GameStatus.IN_PROGRESS

    def board_snapshot(self) -> List[List[int]]:
        return self.board.snapshot()

    def board_copy(self) -> Board:
        """Detached copy for the move search to probe on."""
        return Board.from_matrix(self.board.snapshot())

    def _require_turn(self, side: Side):
        if self.is_over:
            raise ValueError("Game is already finished")
        if self.current_turn != side:
            raise ValueError(f"Not {side.name}'s turn")

    def play_human(self, row: int, col: int) -> MoveRecord:
        """Applies a human move. InvalidMove propagates on a bad cell."""
        self._require_turn(Side.HUMAN)
        now = time.monotonic()
        self.board.place(row, col, Side.HUMAN)
        record = MoveRecord(player=Side.HUMAN, row=row, col=col,
                            duration=round(now - self.last_move_time, 3))
        self.last_move_time = now
        self._after_move(record)
        return record

    def choose_computer_move(self) -> Optional[MoveDecision]:
        """
        Runs the move selector against the current board without applying
        the result. Returns None (and ends the game as a draw) on a full board.
        """
        self._require_turn(Side.COMPUTER)
        params = self.controller.get_ai_parameters()
        try:
            return self.ai.decide(self.board_copy(), params)
        except NoLegalMove:
            self._finish(None, "board full")
            return None

    async def think(self, params: AIParameters) -> Optional[MoveDecision]:
        """choose_computer_move with the search in a worker thread."""
        self._require_turn(Side.COMPUTER)
        try:
            return await self.ai.decide_async(self.board_copy(), params)
        except NoLegalMove:
            self._finish(None, "board full")
            return None

    def apply_computer_move(self, decision: MoveDecision, duration: float = 0.0) -> MoveRecord:
        self._require_turn(Side.COMPUTER)
        self.board.place(decision.row, decision.col, Side.COMPUTER)
        record = MoveRecord(player=Side.COMPUTER, row=decision.row, col=decision.col,
                            duration=round(duration, 3))
        self.last_move_time = time.monotonic()
        self._after_move(record)
        return record

    def play_computer(self) -> Optional[MoveRecord]:
        decision = self.choose_computer_move()
        if decision is None:
            return None
        return self.apply_computer_move(decision)

    def force_result(self, winner: Side, reason: str = "forced"):
        """Ends the game as if `winner` had won on the board."""
        if self.is_over:
            raise ValueError("Game is already finished")
        if winner not in (Side.HUMAN, Side.COMPUTER):
            raise ValueError(f"Forced winner must be HUMAN or COMPUTER, got {winner!r}")
        self._finish(winner, reason)

    def _after_move(self, record: MoveRecord):
        self.history.append(record)
        side = record.player
        if self.board.check_win(record.row, record.col, side):
            self._finish(side, "five in a row")
        elif self.board.is_full():
            self._finish(None, "board full")
        else:
            self.current_turn = side.opponent()

    def _finish(self, winner: Optional[Side], reason: str):
        self.winner = winner
        self.finish_reason = reason
        self.status = GameStatus.COMPLETED if winner else GameStatus.DRAW
        self.games_played += 1
        if winner:
            self.scores[winner] += 1
            self.controller.record_result(winner)
        logger.info("Session %s game over: %s (%s)", self.session_id,
                    winner.name if winner else "draw", reason)

    def ratings(self) -> RatingView:
        c = self.controller
        return RatingView(
            human_rating=c.get_rating(Side.HUMAN),
            computer_rating=c.get_rating(Side.COMPUTER),
            difficulty=round(c.get_difficulty(), 3),
            human_streak=c.human_streak,
            computer_streak=c.computer_streak,
        )

    def to_response(self) -> GameResponse:
        return GameResponse(
            session_id=self.session_id,
            player_name=self.player_name,
            status=self.status,
            winner=self.winner,
            current_turn=self.current_turn,
            board=self.board_snapshot(),
            history=list(self.history),
            last_move=self.history[-1] if self.history else None,
            ratings=self.ratings(),
            games_played=self.games_played,
            created_at=self.created_at,
        )


class GameService:
    """Centralized service for all game operations"""

    def __init__(self, engine_settings: Optional[EngineSettings] = None,
                 events: Optional[GameEvents] = None):
        self.settings = engine_settings or settings
        self.events = events or game_events
        self.sessions: Dict[int, GameSession] = {}
        self._ids = itertools.count(1)

    async def create_session(self, db: Optional[AsyncSession], player_name: str = "guest",
                             seed: Optional[int] = None) -> GameSession:
        """Opens a session, restoring the player's ratings when a DB is given."""
        if db is not None:
            snapshot = await rating_store.load_snapshot(db, player_name)
            controller = RatingController.from_snapshot(snapshot, self.settings.elo)
        else:
            controller = RatingController(self.settings.elo)

        session_id = next(self._ids)
        session = GameSession(session_id, player_name, controller, random.Random(seed))
        self.sessions[session_id] = session
        logger.info("Session %s opened for %s (difficulty %.3f)",
                    session_id, player_name, controller.get_difficulty())
        return session

    def get_session(self, session_id: int) -> GameSession:
        session = self.sessions.get(session_id)
        if not session:
            raise KeyError(f"Session {session_id} not found")
        return session

    def close_session(self, session_id: int):
        self.sessions.pop(session_id, None)

    def new_game(self, session_id: int) -> GameSession:
        session = self.get_session(session_id)
        if not session.is_over and session.history:
            raise ValueError("Current game is still in progress")
        session.new_game()
        return session

    async def process_human_move(self, db: Optional[AsyncSession], session_id: int,
                                 row: int, col: int) -> GameSession:
        """Process a human move, then let the computer answer."""
        session = self.get_session(session_id)
        elapsed_ms = (time.monotonic() - session.last_move_time) * 1000
        session.play_human(row, col)

        # Observers (abuse detector) may end the game from here
        await self.events.notify_move(MoveEvent(
            session_id=session_id,
            row=row,
            col=col,
            elapsed_ms=round(elapsed_ms, 1),
            board=session.board_snapshot(),
            current_turn=session.current_turn,
        ))

        if session.is_over:
            await self._on_complete(db, session)
            return session

        return await self.step_ai_turn(db, session_id)

    async def step_ai_turn(self, db: Optional[AsyncSession], session_id: int) -> GameSession:
        """Execute one AI turn, padded to the thinking-time floor."""
        session = self.get_session(session_id)
        if session.is_over or session.current_turn != Side.COMPUTER:
            return session

        # --- TIMER START ---
        start_time = time.monotonic()
        game_token = session.games_played
        params = session.controller.get_ai_parameters()
        floor_ms = thinking_time_ms(params, self.settings.thinking, session.rng)

        # THINK (slow, off the event loop)
        decision = await session.think(params)
        if decision is None:
            await self._on_complete(db, session)
            return session

        remaining = floor_ms / 1000 - (time.monotonic() - start_time)
        if remaining > 0:
            await asyncio.sleep(remaining)

        # Re-verification: the game may have been forced over, or replaced by a new one
        if session.is_over or session.games_played != game_token:
            logger.info("Session %s finished while AI was thinking.", session_id)
            return session

        session.apply_computer_move(decision, time.monotonic() - start_time)
        if session.is_over:
            await self._on_complete(db, session)
        return session

    async def force_result(self, db: Optional[AsyncSession], session_id: int,
                           winner: Side, reason: str = "forced") -> GameSession:
        """Ends the current game on behalf of an external observer."""
        session = self.get_session(session_id)
        session.force_result(winner, reason)
        await self._on_complete(db, session)
        return session

    async def _on_complete(self, db: Optional[AsyncSession], session: GameSession):
        if session.result_reported:
            return
        session.result_reported = True
        if db is not None:
            await rating_store.save_result(db, session.player_name,
                                           session.controller.snapshot(), session.winner)
        await self.events.notify_complete(CompleteEvent(
            session_id=session.session_id,
            winner=session.winner,
            reason=session.finish_reason or "normal",
        ))


# Singleton instance
game_service = GameService()
