import logging
from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(UnitOfWork):
    def __init__(self, session: AsyncSession, timeout_seconds: float = 30):
        self.session = session
        self.timeout_seconds = timeout_seconds

    async def begin(self):
        bind = self.session.bind
        if bind is None or bind.dialect.name != "postgresql" or not self.timeout_seconds:
            return
        timeout_ms = int(self.timeout_seconds * 1000)
        # SET LOCAL lasts until the current transaction ends
        await self.session.execute(text(f"SET LOCAL statement_timeout = {timeout_ms}"))
        await self.session.execute(text(f"SET LOCAL lock_timeout = {timeout_ms}"))
        logger.debug(f"Transaction started with {timeout_ms}ms timeout")

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
