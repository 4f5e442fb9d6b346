import asyncio
from backend.app.core.database import engine, init_models, get_database_url

async def main():
    # Safe create (only creates if missing)
    await init_models(engine)
    await engine.dispose()
    print(f"Database tables updated at {get_database_url()}.")

if __name__ == "__main__":
    asyncio.run(main())
