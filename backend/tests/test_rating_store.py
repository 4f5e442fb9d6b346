import unittest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app.core.database import init_models
from backend.app.core.events import GameEvents
from backend.app.core.settings import EngineSettings, ThinkingConfig
from backend.app.models.enums import Side
from backend.app.schemas.game_schema import HistoryPoint, ProfileResponse, RatingSnapshot
from backend.app.services import rating_store
from backend.app.services.game_service import GameService

class TestRatingStore(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
        await init_models(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, class_=AsyncSession, expire_on_commit=False)
        self.service = GameService(EngineSettings(thinking=ThinkingConfig(enabled=False)), GameEvents())

    async def asyncTearDown(self):
        await self.engine.dispose()

    async def test_unknown_player_gets_defaults(self):
        async with self.SessionLocal() as db:
            snapshot = await rating_store.load_snapshot(db, "nobody")
            self.assertEqual(snapshot, RatingSnapshot())
            self.assertIsNone(await rating_store.get_profile(db, "nobody"))

    async def test_save_and_restore(self):
        snapshot = RatingSnapshot(
            human_rating=1620.5,
            computer_rating=1380.0,
            human_streak=3,
            computer_streak=-3,
            history=[Side.HUMAN, Side.HUMAN, Side.HUMAN],
            difficulty=2.9,
        )
        async with self.SessionLocal() as db:
            await rating_store.save_result(db, "dana", snapshot, Side.HUMAN)

        async with self.SessionLocal() as db:
            restored = await rating_store.load_snapshot(db, "dana")
            profile = await rating_store.get_profile(db, "dana")
            history = await rating_store.get_history(db, "dana")

        self.assertEqual(restored, snapshot)
        self.assertEqual(profile.games_played, 1)
        self.assertEqual(profile.human_wins, 1)
        self.assertEqual(profile.computer_wins, 0)
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].winner, int(Side.HUMAN))

        # Response models read straight off the ORM rows
        self.assertTrue(ProfileResponse.model_config["from_attributes"])
        view = ProfileResponse.model_validate(profile)
        self.assertEqual(view.human_wins, 1)
        point = HistoryPoint.model_validate(history[0])
        self.assertEqual(point.winner, Side.HUMAN)

    async def test_draw_counts(self):
        async with self.SessionLocal() as db:
            await rating_store.save_result(db, "erin", RatingSnapshot(), None)
            profile = await rating_store.get_profile(db, "erin")
            history = await rating_store.get_history(db, "erin")
        self.assertEqual(profile.draws, 1)
        self.assertIsNone(history[0].winner)

    async def test_session_resumes_stored_ratings(self):
        """A second session for the same player starts from the saved state."""
        async with self.SessionLocal() as db:
            first = await self.service.create_session(db, "frank")
            await self.service.force_result(db, first.session_id, Side.HUMAN)
            self.service.new_game(first.session_id)
            await self.service.force_result(db, first.session_id, Side.HUMAN)

        async with self.SessionLocal() as db:
            second = await self.service.create_session(db, "frank")
            profile = await rating_store.get_profile(db, "frank")

        self.assertEqual(second.controller.human_rating, first.controller.human_rating)
        self.assertEqual(second.controller.human_streak, 2)
        self.assertEqual(list(second.controller.history), [Side.HUMAN, Side.HUMAN])
        self.assertAlmostEqual(second.controller.get_difficulty(), first.controller.get_difficulty())
        self.assertEqual(profile.games_played, 2)
        self.assertEqual(profile.human_wins, 2)

if __name__ == '__main__':
    unittest.main()
