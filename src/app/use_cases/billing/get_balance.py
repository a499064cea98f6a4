"""Get Balance Use Case

Retrieves a tenant's current credit balances.
"""

from libs.result import Result, Return, Error
from src.app.repositories.credit_balance_repository import CreditBalanceRepository
from src.app.use_cases.billing.dtos import BalanceResponseDTO, TenantBalancesResponseDTO
from src.domain.credit_balance import CreditKind


class GetBalance:
    """
    Get Balance Use Case

    Read-only operation. A tenant without a balance row for a kind has a
    zero balance of that kind, not an error.
    """

    def __init__(self, balance_repo: CreditBalanceRepository):
        """
        Initialize GetBalance use case

        Args:
            balance_repo: Repository for accessing credit balances
        """
        self.balance_repo = balance_repo

    async def execute(self, tenant_id: str, kind: CreditKind) -> Result[BalanceResponseDTO]:
        """
        Execute get balance operation for one credit kind

        Errors:
            BALANCE_LOOKUP_FAILED: The store could not be read
        """
        try:
            balance = await self.balance_repo.get(tenant_id, kind)
        except Exception as e:
            return Return.err(
                Error(
                    code="BALANCE_LOOKUP_FAILED",
                    message=f"Failed to read balance for tenant {tenant_id}",
                    reason=str(e),
                )
            )

        if not balance:
            return Return.ok(BalanceResponseDTO(tenant_id=tenant_id, kind=kind, balance=0))

        return Return.ok(
            BalanceResponseDTO(
                tenant_id=balance.tenant_id,
                kind=balance.kind,
                balance=balance.balance,
                last_updated=balance.updated_at,
            )
        )

    async def execute_all(self, tenant_id: str) -> Result[TenantBalancesResponseDTO]:
        """Balances of every credit kind, zero-filled"""
        try:
            rows = await self.balance_repo.get_by_tenant_id(tenant_id)
        except Exception as e:
            return Return.err(
                Error(
                    code="BALANCE_LOOKUP_FAILED",
                    message=f"Failed to read balances for tenant {tenant_id}",
                    reason=str(e),
                )
            )

        by_kind = {CreditKind(row.kind): row for row in rows}
        balances = []
        for kind in CreditKind:
            row = by_kind.get(kind)
            balances.append(
                BalanceResponseDTO(
                    tenant_id=tenant_id,
                    kind=kind,
                    balance=row.balance if row else 0,
                    last_updated=row.updated_at if row else None,
                )
            )

        return Return.ok(TenantBalancesResponseDTO(tenant_id=tenant_id, balances=balances))
