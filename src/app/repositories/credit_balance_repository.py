"""Credit Balance Repository Interface

Defines the contract for credit balance persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.credit_balance import CreditBalance, CreditKind


class CreditBalanceRepository(ABC):
    """
    Repository interface for CreditBalance persistence

    Methods use pessimistic locking (SELECT FOR UPDATE) to ensure
    consistency during concurrent debit/credit operations.
    """

    @abstractmethod
    async def get(
        self, tenant_id: str, kind: CreditKind, for_update: bool = False
    ) -> Optional[CreditBalance]:
        """
        Retrieve the balance row of one credit kind for a tenant

        Args:
            tenant_id: Tenant identifier
            kind: Credit kind
            for_update: If True, lock the row with SELECT FOR UPDATE (pessimistic lock)

        Returns:
            CreditBalance if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_tenant_id(self, tenant_id: str) -> List[CreditBalance]:
        """Retrieve every balance row of a tenant"""
        pass

    @abstractmethod
    async def get_all(self) -> List[CreditBalance]:
        """Retrieve every balance row (used by ledger reconciliation)"""
        pass

    @abstractmethod
    async def create(self, balance: CreditBalance) -> CreditBalance:
        """
        Create a new balance row

        Args:
            balance: CreditBalance entity to persist

        Returns:
            Created CreditBalance with generated ID

        Raises:
            DuplicateKeyError: If the (tenant, kind) row already exists
        """
        pass

    @abstractmethod
    async def update_balance(self, balance_id: int, new_balance: int) -> None:
        """
        Update balance value

        Args:
            balance_id: Balance row ID
            new_balance: New balance value
        """
        pass
