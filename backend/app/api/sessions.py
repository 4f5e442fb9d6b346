from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.database import get_db
from backend.app.engine.board import InvalidMove
from backend.app.schemas.game_schema import ForfeitRequest, GameResponse, MoveRequest, SessionCreate
from backend.app.services.game_service import GameSession, game_service

router = APIRouter()

def _get_session(session_id: int) -> GameSession:
    try:
        return game_service.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Session not found")

@router.post("", response_model=GameResponse, status_code=status.HTTP_201_CREATED)
async def create_session(payload: SessionCreate, db: AsyncSession = Depends(get_db)):
    """Opens a session; the player's stored ratings decide the starting difficulty."""
    session = await game_service.create_session(db, payload.player_name)
    return session.to_response()

@router.get("/{session_id}", response_model=GameResponse)
async def get_session(session_id: int):
    return _get_session(session_id).to_response()

@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(session_id: int):
    _get_session(session_id)
    game_service.close_session(session_id)

@router.post("/{session_id}/games", response_model=GameResponse)
async def start_game(session_id: int):
    """Starts the next game of the session (human moves first)."""
    _get_session(session_id)
    try:
        session = game_service.new_game(session_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.to_response()

@router.post("/{session_id}/moves", response_model=GameResponse)
async def play_move(session_id: int, move: MoveRequest, db: AsyncSession = Depends(get_db)):
    """Plays the human move and returns the state after the computer's reply."""
    _get_session(session_id)
    try:
        session = await game_service.process_human_move(db, session_id, move.row, move.col)
    except InvalidMove as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.to_response()

@router.post("/{session_id}/forfeit", response_model=GameResponse)
async def forfeit(session_id: int, payload: ForfeitRequest, db: AsyncSession = Depends(get_db)):
    """
    Ends the running game with a forced winner. Used by the abuse detector;
    the result is rated like any other game.
    """
    _get_session(session_id)
    try:
        session = await game_service.force_result(db, session_id, payload.winner, payload.reason)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.to_response()
