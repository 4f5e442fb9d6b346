from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from backend.app.core.database import get_db
from backend.app.schemas.game_schema import HistoryPoint, ProfileResponse
from backend.app.services import rating_store

router = APIRouter()

# --- Endpoints ---

@router.get("/profiles/{player_name}", response_model=ProfileResponse)
async def get_profile(player_name: str, db: AsyncSession = Depends(get_db)):
    """Stored ratings and win/loss counters for one player."""
    profile = await rating_store.get_profile(db, player_name)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile

@router.get("/profiles/{player_name}/history", response_model=List[HistoryPoint])
async def get_profile_history(player_name: str, limit: int = 100, db: AsyncSession = Depends(get_db)):
    """Rating and difficulty after each finished game, oldest first (for graphs)."""
    return await rating_store.get_history(db, player_name, limit)
