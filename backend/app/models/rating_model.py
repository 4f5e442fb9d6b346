from sqlalchemy import Column, Integer, String, Float, DateTime, JSON
from sqlalchemy.sql import func
from backend.app.core.database import Base

class PlayerProfile(Base):
    """
    Persisted rating state for one human player, so difficulty carries
    over between sessions.
    """
    __tablename__ = "player_profiles"

    player_name = Column(String, primary_key=True, index=True)
    human_rating = Column(Float, default=1500.0)
    computer_rating = Column(Float, default=1500.0)
    human_streak = Column(Integer, default=0)
    computer_streak = Column(Integer, default=0)
    history = Column(JSON, default=list)  # last results as Side ints
    difficulty = Column(Float, default=1.0)

    games_played = Column(Integer, default=0)
    human_wins = Column(Integer, default=0)
    computer_wins = Column(Integer, default=0)
    draws = Column(Integer, default=0)

    last_updated = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

class RatingHistory(Base):
    """
    Time-series data for the graph.
    A row is inserted every time a game of this player finishes.
    """
    __tablename__ = "rating_history"

    id = Column(Integer, primary_key=True, index=True)
    player_name = Column(String, index=True)
    human_rating = Column(Float)
    computer_rating = Column(Float)
    difficulty = Column(Float)
    winner = Column(Integer, nullable=True)  # None for draws
    timestamp = Column(DateTime(timezone=True), server_default=func.now())
