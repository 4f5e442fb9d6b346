"""
Rating Store - persistence of a player's rating state

The engine keeps ratings in memory only. This service saves the
rating/streak/history triple after each finished game and restores it when
the player opens a new session.
"""

import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from backend.app.models.enums import Side
from backend.app.models.rating_model import PlayerProfile, RatingHistory
from backend.app.schemas.game_schema import RatingSnapshot

logger = logging.getLogger(__name__)


async def get_or_create_profile(db: AsyncSession, player_name: str) -> PlayerProfile:
    result = await db.execute(select(PlayerProfile).where(PlayerProfile.player_name == player_name))
    profile = result.scalar_one_or_none()
    if not profile:
        defaults = RatingSnapshot()
        profile = PlayerProfile(
            player_name=player_name,
            human_rating=defaults.human_rating,
            computer_rating=defaults.computer_rating,
            human_streak=0,
            computer_streak=0,
            history=[],
            difficulty=defaults.difficulty,
            games_played=0,
            human_wins=0,
            computer_wins=0,
            draws=0,
        )
        db.add(profile)
        # We don't commit here, we let the caller commit transactionally
    return profile


async def get_profile(db: AsyncSession, player_name: str) -> Optional[PlayerProfile]:
    result = await db.execute(select(PlayerProfile).where(PlayerProfile.player_name == player_name))
    return result.scalar_one_or_none()


async def load_snapshot(db: AsyncSession, player_name: str) -> RatingSnapshot:
    """Returns the stored rating state, or a fresh one for unknown players."""
    profile = await get_profile(db, player_name)
    if not profile:
        return RatingSnapshot()
    return RatingSnapshot(
        human_rating=profile.human_rating,
        computer_rating=profile.computer_rating,
        human_streak=profile.human_streak or 0,
        computer_streak=profile.computer_streak or 0,
        history=list(profile.history or []),
        difficulty=profile.difficulty,
    )


async def save_result(db: AsyncSession, player_name: str, snapshot: RatingSnapshot, winner: Optional[Side]):
    """
    Stores the post-game rating state and appends a history point.
    winner: Side.HUMAN, Side.COMPUTER, or None (Draw)
    """
    try:
        profile = await get_or_create_profile(db, player_name)

        profile.human_rating = snapshot.human_rating
        profile.computer_rating = snapshot.computer_rating
        profile.human_streak = snapshot.human_streak
        profile.computer_streak = snapshot.computer_streak
        profile.history = [int(side) for side in snapshot.history]
        profile.difficulty = snapshot.difficulty

        # Safely handle nullable counters
        profile.games_played = (profile.games_played or 0) + 1
        if winner == Side.HUMAN:
            profile.human_wins = (profile.human_wins or 0) + 1
        elif winner == Side.COMPUTER:
            profile.computer_wins = (profile.computer_wins or 0) + 1
        else:
            profile.draws = (profile.draws or 0) + 1

        db.add(RatingHistory(
            player_name=player_name,
            human_rating=snapshot.human_rating,
            computer_rating=snapshot.computer_rating,
            difficulty=snapshot.difficulty,
            winner=int(winner) if winner else None,
        ))

        await db.commit()
    except Exception as e:
        logger.error("Rating save failed for %s: %s", player_name, e)
        await db.rollback()
        raise ValueError(f"Failed to save rating: {e}")


async def get_history(db: AsyncSession, player_name: str, limit: int = 100) -> List[RatingHistory]:
    query = (
        select(RatingHistory)
        .where(RatingHistory.player_name == player_name)
        .order_by(RatingHistory.id.asc())
        .limit(limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all())
