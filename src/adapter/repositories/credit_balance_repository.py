"""SQLAlchemy implementation of CreditBalanceRepository

Provides persistence for CreditBalance entities with pessimistic locking support
to prevent race conditions during concurrent debit operations.
"""

from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.credit_balance_repository import CreditBalanceRepository
from src.app.repositories.errors import DuplicateKeyError
from src.domain.base import utcnow
from src.domain.credit_balance import CreditBalance, CreditKind


class SqlAlchemyCreditBalanceRepository(CreditBalanceRepository):
    """
    SQLAlchemy implementation of CreditBalanceRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Atomic balance updates
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(
        self, tenant_id: str, kind: CreditKind, for_update: bool = False
    ) -> Optional[CreditBalance]:
        """
        Retrieve balance row with optional row-level locking

        Args:
            tenant_id: Tenant identifier
            kind: Credit kind
            for_update: If True, locks the row with SELECT FOR UPDATE (prevents concurrent modifications)

        Returns:
            CreditBalance if found, None otherwise
        """
        stmt = select(CreditBalance).where(
            CreditBalance.tenant_id == tenant_id,
            CreditBalance.kind == kind,
        )

        if for_update:
            # Refresh identity-mapped rows with the values read under the lock
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, balance_id: int) -> Optional[CreditBalance]:
        stmt = select(CreditBalance).where(CreditBalance.id == balance_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_tenant_id(self, tenant_id: str) -> List[CreditBalance]:
        stmt = (
            select(CreditBalance)
            .where(CreditBalance.tenant_id == tenant_id)
            .order_by(CreditBalance.kind)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_all(self) -> List[CreditBalance]:
        stmt = select(CreditBalance).order_by(CreditBalance.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, balance: CreditBalance) -> CreditBalance:
        """
        Insert a balance row inside a savepoint

        Raises:
            DuplicateKeyError: If a concurrent transaction created the row first;
                only the savepoint is rolled back
        """
        try:
            async with self.session.begin_nested():
                self.session.add(balance)
                await self.session.flush()
        except IntegrityError as e:
            raise DuplicateKeyError(
                f"Balance row exists for tenant {balance.tenant_id} ({balance.kind.value})"
            ) from e
        await self.session.refresh(balance)
        return balance

    async def update_balance(self, balance_id: int, new_balance: int) -> None:
        """
        Update balance and updated_at timestamp

        Note:
            Should be called within a transaction with the row already locked
        """
        balance = await self.get_by_id(balance_id)
        if balance:
            balance.balance = new_balance
            balance.updated_at = utcnow()
            self.session.add(balance)
            await self.session.flush()
