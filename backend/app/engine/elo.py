import logging
import math
from collections import deque
from typing import Deque, Optional

from backend.app.core.settings import EloConfig
from backend.app.models.enums import Side
from backend.app.schemas.game_schema import AIParameters, RatingSnapshot

logger = logging.getLogger(__name__)

K_FACTOR = 32
HOT_WIN_RATE = 0.7
COLD_WIN_RATE = 0.3
HOT_K_MULTIPLIER = 1.5
COLD_K_MULTIPLIER = 0.7
STREAK_THRESHOLD = 2

def calculate_expected_score(rating_a: float, rating_b: float) -> float:
    return 1 / (1 + 10 ** ((rating_b - rating_a) / 400))

def sigmoid(x: float) -> float:
    return 1 / (1 + math.exp(-x))


class RatingController:
    """
    Tracks human vs computer skill across games and turns it into a
    difficulty scalar. Owned by one game session; not thread safe.
    """

    def __init__(self, config: Optional[EloConfig] = None):
        self.config = config or EloConfig()
        self.human_rating = self.config.initial_human_rating
        self.computer_rating = self.config.initial_computer_rating
        self.human_streak = 0
        self.computer_streak = 0
        self.history: Deque[Side] = deque(maxlen=self.config.history_size)
        self.difficulty = self.config.base_difficulty

    @classmethod
    def from_snapshot(cls, snapshot: RatingSnapshot, config: Optional[EloConfig] = None) -> "RatingController":
        controller = cls(config)
        controller.human_rating = controller._clamp_rating(snapshot.human_rating)
        controller.computer_rating = controller._clamp_rating(snapshot.computer_rating)
        controller.human_streak = snapshot.human_streak
        controller.computer_streak = snapshot.computer_streak
        controller.history.extend(snapshot.history)
        # Difficulty is derived; an unplayed profile keeps the base value
        if controller.history:
            controller._adjust_difficulty()
        return controller

    def snapshot(self) -> RatingSnapshot:
        return RatingSnapshot(
            human_rating=self.human_rating,
            computer_rating=self.computer_rating,
            human_streak=self.human_streak,
            computer_streak=self.computer_streak,
            history=list(self.history),
            difficulty=self.difficulty,
        )

    # --- Accessors ---

    def get_difficulty(self) -> float:
        return self.difficulty

    def get_rating(self, side: Side) -> int:
        if side == Side.HUMAN:
            return round(self.human_rating)
        if side == Side.COMPUTER:
            return round(self.computer_rating)
        raise ValueError(f"No rating for {side!r}")

    def get_ai_parameters(self) -> AIParameters:
        return AIParameters.from_difficulty(self.difficulty)

    # --- Updates ---

    def record_result(self, winner: Side) -> None:
        """
        Updates streaks, history, both ratings and the difficulty.
        winner: Side.HUMAN or Side.COMPUTER (draws are not rated)
        """
        if winner not in (Side.HUMAN, Side.COMPUTER):
            raise ValueError(f"Winner must be HUMAN or COMPUTER, got {winner!r}")

        # 1. Streaks and history
        self._update_streak(winner)
        self.history.append(winner)

        # 2. Expected scores
        k_factor = self.dynamic_k_factor()
        expected_human = calculate_expected_score(self.human_rating, self.computer_rating)
        expected_computer = calculate_expected_score(self.computer_rating, self.human_rating)

        # 3. Update ratings, the streak term moves both sides by the same amount
        if winner == Side.HUMAN:
            bonus = self.config.win_streak_bonus * self.human_streak if self.human_streak > STREAK_THRESHOLD else 0.0
            self.human_rating += k_factor * (1 - expected_human + bonus)
            self.computer_rating += k_factor * (0 - expected_computer - bonus)
        else:
            bonus = self.config.loss_streak_penalty * self.computer_streak if self.computer_streak > STREAK_THRESHOLD else 0.0
            self.human_rating += k_factor * (0 - expected_human - bonus)
            self.computer_rating += k_factor * (1 - expected_computer + bonus)

        self.human_rating = self._clamp_rating(self.human_rating)
        self.computer_rating = self._clamp_rating(self.computer_rating)

        # 4. Difficulty for the next game
        self._adjust_difficulty()
        logger.info(
            "Result %s: human=%.1f computer=%.1f difficulty=%.3f (k=%.1f)",
            winner.name, self.human_rating, self.computer_rating, self.difficulty, k_factor,
        )

    def dynamic_k_factor(self) -> float:
        recent = list(self.history)[-self.config.k_window:]
        if len(recent) < 3:
            return self.config.k_factor

        win_rate = sum(1 for r in recent if r == Side.HUMAN) / len(recent)
        if win_rate > HOT_WIN_RATE:
            return self.config.k_factor * HOT_K_MULTIPLIER
        if win_rate < COLD_WIN_RATE:
            return self.config.k_factor * COLD_K_MULTIPLIER
        return self.config.k_factor

    def _update_streak(self, winner: Side) -> None:
        if winner == Side.HUMAN:
            self.human_streak = max(0, self.human_streak) + 1
            self.computer_streak = min(0, self.computer_streak) - 1
        else:
            self.computer_streak = max(0, self.computer_streak) + 1
            self.human_streak = min(0, self.human_streak) - 1

    def _adjust_difficulty(self) -> None:
        cfg = self.config
        rating_diff = self.human_rating - self.computer_rating
        base = 1 + sigmoid(rating_diff / 200) * (cfg.max_difficulty - 1)

        if self.human_streak > STREAK_THRESHOLD:
            adjustment = cfg.win_streak_bonus * self.human_streak
        elif self.computer_streak > STREAK_THRESHOLD:
            adjustment = -cfg.loss_streak_penalty * self.computer_streak
        else:
            adjustment = 0.0

        self.difficulty = min(cfg.max_difficulty, max(cfg.base_difficulty, base + adjustment))

    def _clamp_rating(self, rating: float) -> float:
        return max(self.config.min_rating, min(self.config.max_rating, rating))
