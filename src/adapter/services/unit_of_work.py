from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """
    Transaction boundary over one AsyncSession

    Every use case opens at most one short transaction per step; commit and
    rollback end it so the next step starts a fresh one.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        # Nothing to undo when no statement has opened a transaction yet
        if self.session.in_transaction():
            await self.session.rollback()
