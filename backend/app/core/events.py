import logging
from typing import Awaitable, Callable, List, Optional
from pydantic import BaseModel

from backend.app.models.enums import Side

logger = logging.getLogger(__name__)

class MoveEvent(BaseModel):
    """Published after every human move. Observers must not mutate game state."""
    session_id: int
    row: int
    col: int
    elapsed_ms: float
    board: List[List[int]]
    current_turn: Side

class CompleteEvent(BaseModel):
    session_id: int
    winner: Optional[Side] = None
    reason: str = "normal"

MoveListener = Callable[[MoveEvent], Awaitable[None]]
CompleteListener = Callable[[CompleteEvent], Awaitable[None]]

class GameEvents:
    def __init__(self):
        self._on_move_listeners: List[MoveListener] = []
        self._on_complete_listeners: List[CompleteListener] = []

    def subscribe_move(self, callback: MoveListener):
        self._on_move_listeners.append(callback)

    def subscribe_complete(self, callback: CompleteListener):
        self._on_complete_listeners.append(callback)

    def clear(self):
        self._on_move_listeners.clear()
        self._on_complete_listeners.clear()

    async def notify_move(self, event: MoveEvent):
        for listener in list(self._on_move_listeners):
            try:
                await listener(event)
            except Exception:
                logger.exception("Move listener failed for session %s", event.session_id)

    async def notify_complete(self, event: CompleteEvent):
        for listener in list(self._on_complete_listeners):
            try:
                await listener(event)
            except Exception:
                logger.exception("Complete listener failed for session %s", event.session_id)

game_events = GameEvents()
