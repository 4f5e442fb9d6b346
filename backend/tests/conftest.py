import os

# Must run before backend.app is imported: in-memory rating store, no AI delay
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("GOMOKU_THINKING_ENABLED", "false")
