"""SQLAlchemy unit of work — one AsyncSession, one transaction."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dispatch.adapters.persistence.repositories import (
    SqlAssignmentHistoryRepository,
    SqlAssignmentRepository,
    SqlTaskRepository,
)
from dispatch.application.ports.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> SqlUnitOfWork:
        self._session = self._session_factory()
        self.tasks = SqlTaskRepository(self._session)
        self.assignments = SqlAssignmentRepository(self._session)
        self.history = SqlAssignmentHistoryRepository(self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            await self._session.close()
            self._session = None

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        logger.debug("Rolling back unit of work")
        await self._session.rollback()
