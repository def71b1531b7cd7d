"""
SQLAlchemy Implementation of Unit of Work
Manages database transactions with async SQLAlchemy sessions
"""
from __future__ import annotations

from contextlib import AsyncExitStack
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class SQLAlchemyUnitOfWork:
    """
    SQLAlchemy-based Unit of Work implementation.

    Opens a fresh session on enter, so one instance == one transaction.
    Subclasses attach their repositories in `_bind_repositories`.

    Attributes:
        session: Async SQLAlchemy session (only while inside the context)
        _committed: Flag tracking if transaction was committed
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: Optional[AsyncSession] = None
        self._committed = False
        self._exit_stack: Optional[AsyncExitStack] = None

    def _bind_repositories(self, session: AsyncSession) -> None:
        """Hook for subclasses."""

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        # entered as a context so serialized sessions take the engine gate
        self._exit_stack = AsyncExitStack()
        self.session = await self._exit_stack.enter_async_context(self._session_factory())
        self._committed = False
        self._bind_repositories(self.session)
        logger.debug("unit_of_work_started")
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
                logger.debug(
                    "unit_of_work_rolled_back",
                    reason=exc_type.__name__,
                )
            elif not self._committed:
                await self.rollback()
                logger.debug("unit_of_work_rolled_back", reason="not_committed")
        finally:
            if self._exit_stack is not None:
                await self._exit_stack.aclose()
            self._exit_stack = None
            self.session = None

    async def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            Exception: If commit fails (after rolling back)
        """
        assert self.session is not None, "commit() outside of unit of work"
        try:
            await self.session.commit()
            self._committed = True
            logger.debug("unit_of_work_committed")
        except Exception as e:
            await self.rollback()
            logger.error("unit_of_work_commit_failed", error=str(e))
            raise

    async def rollback(self) -> None:
        if self.session is None:
            return
        await self.session.rollback()
        self._committed = False
