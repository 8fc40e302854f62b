from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from libs.db.config import AsyncSessionLocal


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an async database session.

    The session connects with service credentials, so row-level security
    does not apply; routes enforce ownership themselves.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
