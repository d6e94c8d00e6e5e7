from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from config.settings import settings

from app.db.base import Base

# --- 1. Create the Async Engine ---
# It uses the DATABASE_URL from our config/settings.py file.
engine = create_async_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # Test connections before using them
    echo=settings.DEBUG, # Log SQL queries if in debug mode
)

# --- 2. Create the Async SessionMaker ---
# A new session is opened for every store call.
AsyncSessionLocal = async_sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

async def init_models(bind: AsyncEngine = engine) -> None:
    """
    Creates any missing tables. Safe to call on every startup.
    """
    # Register the table definitions on Base.metadata
    from app.db import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

