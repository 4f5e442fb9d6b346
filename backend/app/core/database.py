from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from backend.app.core.settings import settings

DATABASE_URL = settings.database_url

def get_database_url():
    """Helper to retrieve DB URL in scripts context"""
    return DATABASE_URL

def build_engine(url: str) -> AsyncEngine:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        # In-memory databases live as long as their single connection
        if parsed.database in (None, "", ":memory:"):
            return create_async_engine(url, echo=False, poolclass=StaticPool)
        return create_async_engine(url, echo=False)
    return create_async_engine(
        url,
        echo=False,
        pool_size=20,
        max_overflow=20
    )

engine = build_engine(DATABASE_URL)
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)

Base = declarative_base()

async def init_models(bind: AsyncEngine = engine):
    """Safe create (only creates tables that are missing)"""
    # Models must be imported so they register on Base.metadata
    from backend.app.models import rating_model  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

# Dependency for API routes
async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
