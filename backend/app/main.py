import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api.sessions import router as sessions_router
from backend.app.api.stats import router as stats_router
from backend.app.core.database import engine, init_models
from backend.app.core.settings import settings

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# --- LIFESPAN MANAGER ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: make sure the rating tables exist
    await init_models()
    logger.info("Rating store ready (thinking delay %s)",
                "on" if settings.thinking.enabled else "off")
    yield
    await engine.dispose()
# -------------------------

app = FastAPI(title="Adaptive Gomoku", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"], # Allow Vite (5173) and React default (3000)
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(sessions_router, prefix="/sessions", tags=["Sessions"])
app.include_router(stats_router, prefix="/stats", tags=["Stats"])

@app.get("/health")
async def health():
    return {"status": "ok"}
