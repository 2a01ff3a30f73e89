import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlmodel import SQLModel

from valkyrie.core.config import settings
import valkyrie.models  # noqa: F401  registers the tables

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.DATABASE_URL,
    # echo=settings.DEPLOY_PHASE == "local",
)

async_session = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Async DB session for FastAPI dependency injection"""
    session = async_session()
    try:
        yield session
    finally:
        await session.close()


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables ready")
