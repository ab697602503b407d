"""Request-scoped database session."""
import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from .engine import get_session_factory

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request.

    Services commit their own writes; anything still pending when the route
    raises is rolled back.
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            logger.debug("Rolling back session after request error")
            await session.rollback()
            raise
