"""Billing API Routes

FastAPI routes for credit balances and ledger history.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.billing_request import TopUpRequestSchema
from src.app.use_cases.billing.dtos import (
    BalanceResponseDTO,
    CreditCommandDTO,
    LedgerMutationResponseDTO,
    ListLedgerEntriesResponseDTO,
    TenantBalancesResponseDTO,
)
from src.app.use_cases.billing.credit_quota import CreditQuota
from src.app.use_cases.billing.get_balance import GetBalance
from src.app.use_cases.billing.list_ledger_entries import ListLedgerEntries
from src.adapter.repositories.credit_balance_repository import SqlAlchemyCreditBalanceRepository
from src.adapter.repositories.ledger_entry_repository import SqlAlchemyLedgerEntryRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.api.error import raise_for_error
from src.domain.credit_balance import CreditKind

router = APIRouter(prefix="/billing/credits", tags=["Billing"])


@router.post(
    "/top-up",
    response_model=LedgerMutationResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Invalid amount or token",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_AMOUNT",
                            "message": "Amount must be a positive integer"
                        }
                    }
                }
            }
        }
    }
)
async def top_up_credits(
    request: TopUpRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """
    Add credits to a tenant's balance.

    Retrying with the same idempotency_token returns the original entry
    without adding credits twice. The balance row is created on first use.

    **Returns:**
    - 200: Credits added (or replayed)
    - 400: Invalid amount or token
    """
    uow = SqlAlchemyUnitOfWork(session)
    balance_repo = SqlAlchemyCreditBalanceRepository(session)
    entry_repo = SqlAlchemyLedgerEntryRepository(session)

    command = CreditCommandDTO(
        tenant_id=request.tenant_id,
        kind=request.kind,
        amount=request.amount,
        idempotency_token=request.idempotency_token,
        description=request.description or "Top-up",
    )

    use_case = CreditQuota(uow, balance_repo, entry_repo)
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/{tenant_id}",
    response_model=TenantBalancesResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_balances(
    tenant_id: str,
    session: AsyncSession = Depends(get_session)
):
    """
    Current balance of every credit kind for a tenant.

    Kinds the tenant never received credits for are reported as 0.
    """
    use_case = GetBalance(SqlAlchemyCreditBalanceRepository(session))
    result = await use_case.execute_all(tenant_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/{tenant_id}/balance/{kind}",
    response_model=BalanceResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_balance(
    tenant_id: str,
    kind: CreditKind,
    session: AsyncSession = Depends(get_session)
):
    """
    Current balance of one credit kind.

    **Example response:**
    ```json
    {
      "tenant_id": "workspace_42",
      "kind": "phone_reveal",
      "balance": 25,
      "last_updated": "2024-01-01T00:00:00Z"
    }
    ```
    """
    use_case = GetBalance(SqlAlchemyCreditBalanceRepository(session))
    result = await use_case.execute(tenant_id, kind)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/{tenant_id}/entries",
    response_model=ListLedgerEntriesResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def list_ledger_entries(
    tenant_id: str,
    kind: Optional[CreditKind] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session)
):
    """
    Ledger history for a tenant, newest first.

    Each metered action appears as a debit and, when it failed, a credit
    with the same idempotency_token.
    """
    use_case = ListLedgerEntries(SqlAlchemyLedgerEntryRepository(session))
    result = await use_case.execute(tenant_id, kind=kind, limit=limit, offset=offset)

    return result.value
