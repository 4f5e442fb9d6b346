import os
import yaml
from pathlib import Path
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from typing import Optional

load_dotenv()

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "engine.yaml"
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./gomoku.db"

class EloConfig(BaseModel):
    initial_human_rating: float = 1500.0
    initial_computer_rating: float = 1500.0
    k_factor: float = 32.0
    min_rating: float = 1000.0
    max_rating: float = 2500.0
    base_difficulty: float = 1.0
    max_difficulty: float = 3.0
    win_streak_bonus: float = 0.2
    loss_streak_penalty: float = 0.15
    history_size: int = Field(default=10, ge=1)
    k_window: int = Field(default=5, ge=1)

class ThinkingConfig(BaseModel):
    """Artificial delay so the computer's reply does not look instantaneous."""
    enabled: bool = True
    base_ms: float = 300.0
    per_depth_ms: float = 400.0
    jitter_ms: float = 500.0

class EngineSettings(BaseModel):
    elo: EloConfig = Field(default_factory=EloConfig)
    thinking: ThinkingConfig = Field(default_factory=ThinkingConfig)
    database_url: str = DEFAULT_DATABASE_URL

def _env_flag(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip().lower() in ("1", "true", "yes", "on")

def load_settings(config_path: Optional[str] = None) -> EngineSettings:
    """
    Reads the yaml config (if present) and applies environment overrides.
    """
    path = Path(config_path or os.getenv("GOMOKU_CONFIG") or DEFAULT_CONFIG_PATH)
    data = {}
    if path.exists():
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

    data["database_url"] = os.getenv("DATABASE_URL", data.get("database_url", DEFAULT_DATABASE_URL))
    settings = EngineSettings(**data)

    thinking_enabled = _env_flag("GOMOKU_THINKING_ENABLED")
    if thinking_enabled is not None:
        settings.thinking.enabled = thinking_enabled
    return settings

# Singleton instance
settings = load_settings()
