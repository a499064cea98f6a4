from typing import List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.event_audit_repository import EventAuditRepository
from src.domain.event_audit_entry import EventAuditEntry


class SqlAlchemyEventAuditRepository(EventAuditRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: EventAuditEntry) -> EventAuditEntry:
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def get_by_target(self, target_id: str) -> List[EventAuditEntry]:
        stmt = (
            select(EventAuditEntry)
            .where(EventAuditEntry.target_id == target_id)
            .order_by(EventAuditEntry.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
