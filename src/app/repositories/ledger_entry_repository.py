"""Ledger Entry Repository Interface

Defines the contract for ledger entry persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from src.domain.credit_balance import CreditKind
from src.domain.ledger_entry import EntryType, LedgerEntry


class LedgerEntryRepository(ABC):
    """
    Repository interface for LedgerEntry persistence

    Entries are immutable and append-only. Idempotency is enforced by the
    unique (tenant_id, kind, entry_type, idempotency_token) key.
    """

    @abstractmethod
    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Append a new ledger entry

        Raises:
            DuplicateKeyError: If an entry with the same idempotency key exists
        """
        pass

    @abstractmethod
    async def get_by_token(
        self,
        tenant_id: str,
        kind: CreditKind,
        entry_type: EntryType,
        idempotency_token: str,
    ) -> Optional[LedgerEntry]:
        """
        Retrieve the entry written for an idempotency token

        Returns:
            LedgerEntry if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_tenant_id(
        self,
        tenant_id: str,
        kind: Optional[CreditKind] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[LedgerEntry], int]:
        """
        Paginated history of a tenant, newest first

        Returns:
            (entries, total count)
        """
        pass

    @abstractmethod
    async def get_delta_sum(self, tenant_id: str, kind: CreditKind) -> int:
        """Sum of all deltas recorded for a tenant's credit kind"""
        pass
