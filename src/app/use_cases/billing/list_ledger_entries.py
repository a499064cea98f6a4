"""
List Ledger Entries Use Case

Retrieves ledger history for a tenant with pagination.
"""
from typing import Optional
from libs.result import Result, Return
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.credit_balance import CreditKind
from .dtos import LedgerEntryDTO, ListLedgerEntriesResponseDTO


class ListLedgerEntries:
    """
    Use case: View ledger history

    Entries are ordered by created_at DESC (most recent first).
    """

    def __init__(self, entry_repo: LedgerEntryRepository):
        self.entry_repo = entry_repo

    async def execute(
        self,
        tenant_id: str,
        kind: Optional[CreditKind] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Result[ListLedgerEntriesResponseDTO]:
        """
        List ledger entries for a tenant with pagination.

        Args:
            tenant_id: Tenant identifier
            kind: Restrict to one credit kind (all kinds when None)
            limit: Maximum number of entries to return (default 20)
            offset: Number of entries to skip (default 0)
        """
        entries, total = await self.entry_repo.get_by_tenant_id(
            tenant_id=tenant_id,
            kind=kind,
            limit=limit,
            offset=offset,
        )

        entry_dtos = [
            LedgerEntryDTO(
                id=entry.id,
                kind=entry.kind,
                entry_type=entry.entry_type.value if hasattr(entry.entry_type, "value") else entry.entry_type,
                delta=entry.delta,
                balance_after=entry.balance_after,
                idempotency_token=entry.idempotency_token,
                description=entry.description,
                created_at=entry.created_at,
            )
            for entry in entries
        ]

        return Return.ok(
            ListLedgerEntriesResponseDTO(
                entries=entry_dtos,
                total=total,
                limit=limit,
                offset=offset,
            )
        )
