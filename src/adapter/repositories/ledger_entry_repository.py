"""SQLAlchemy implementation of LedgerEntryRepository

Provides persistence for LedgerEntry entities with idempotency enforcement
via the unique (tenant_id, kind, entry_type, idempotency_token) constraint.
"""

from typing import List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.errors import DuplicateKeyError
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.credit_balance import CreditKind
from src.domain.ledger_entry import EntryType, LedgerEntry


class SqlAlchemyLedgerEntryRepository(LedgerEntryRepository):
    """
    SQLAlchemy implementation of LedgerEntryRepository

    Features:
    - Idempotency enforcement via unique constraint
    - Immutable append-only entries
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Append a ledger entry

        Raises:
            DuplicateKeyError: If the idempotency key already exists (concurrent retry)
        """
        self.session.add(entry)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateKeyError(
                f"Ledger entry exists for token {entry.idempotency_token} ({entry.entry_type})"
            ) from e
        await self.session.refresh(entry)
        return entry

    async def get_by_token(
        self,
        tenant_id: str,
        kind: CreditKind,
        entry_type: EntryType,
        idempotency_token: str,
    ) -> Optional[LedgerEntry]:
        stmt = select(LedgerEntry).where(
            LedgerEntry.tenant_id == tenant_id,
            LedgerEntry.kind == kind,
            LedgerEntry.entry_type == entry_type,
            LedgerEntry.idempotency_token == idempotency_token,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_tenant_id(
        self,
        tenant_id: str,
        kind: Optional[CreditKind] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[LedgerEntry], int]:
        conditions = [LedgerEntry.tenant_id == tenant_id]
        if kind is not None:
            conditions.append(LedgerEntry.kind == kind)

        count_stmt = select(func.count()).select_from(LedgerEntry).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(LedgerEntry)
            .where(*conditions)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def get_delta_sum(self, tenant_id: str, kind: CreditKind) -> int:
        stmt = select(func.coalesce(func.sum(LedgerEntry.delta), 0)).where(
            LedgerEntry.tenant_id == tenant_id,
            LedgerEntry.kind == kind,
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
