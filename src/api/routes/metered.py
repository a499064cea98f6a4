"""Metered action routes

Each action debits credits before the external call and refunds them when
the call fails.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.error import raise_for_error
from src.api.schemas.metered_request import LeadSearchRequestSchema, PhoneRevealRequestSchema
from src.adapter.repositories.credit_balance_repository import SqlAlchemyCreditBalanceRepository
from src.adapter.repositories.ledger_entry_repository import SqlAlchemyLedgerEntryRepository
from src.adapter.repositories.reconciliation_target_repository import SqlAlchemyEnrichmentJobRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.lead_search_service import LeadSearchService
from src.app.services.phone_enrichment_service import PhoneEnrichmentService
from src.app.use_cases.billing.credit_quota import CreditQuota
from src.app.use_cases.billing.debit_quota import DebitQuota
from src.app.use_cases.metering.dtos import (
    LeadSearchCommandDTO,
    MeteredActionResponseDTO,
    PhoneRevealCommandDTO,
)
from src.app.use_cases.metering.reveal_phone import RevealPhone
from src.app.use_cases.metering.run_metered_action import MeteredActionOrchestrator
from src.app.use_cases.metering.start_lead_search import StartLeadSearch
from src.depends import get_config, get_lead_search_service, get_phone_enrichment_service, get_session

router = APIRouter(prefix="/metered", tags=["Metered actions"])

_ERROR_RESPONSES = {
    402: {
        "description": "Insufficient credits",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INSUFFICIENT_CREDIT",
                        "message": "Insufficient lead_search credits. Required: 25, Available: 10"
                    }
                }
            }
        }
    },
    500: {
        "description": "External action failed (credits refunded) or refund failed",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "EXTERNAL_ACTION_FAILED",
                        "message": "Actor platform error: 503 - Service Unavailable"
                    }
                }
            }
        }
    },
}


def _build_orchestrator(uow: SqlAlchemyUnitOfWork, session: AsyncSession, config) -> MeteredActionOrchestrator:
    balance_repo = SqlAlchemyCreditBalanceRepository(session)
    entry_repo = SqlAlchemyLedgerEntryRepository(session)
    return MeteredActionOrchestrator(
        debit_quota=DebitQuota(uow, balance_repo, entry_repo),
        credit_quota=CreditQuota(uow, balance_repo, entry_repo),
        timeout_seconds=config.EXTERNAL_CALL_TIMEOUT_SECONDS,
    )


@router.post(
    "/lead-search",
    response_model=MeteredActionResponseDTO,
    status_code=status.HTTP_200_OK,
    responses=_ERROR_RESPONSES,
)
async def start_lead_search(
    request: LeadSearchRequestSchema,
    session: AsyncSession = Depends(get_session),
    lead_search_service: LeadSearchService = Depends(get_lead_search_service),
    config=Depends(get_config),
):
    """
    Start a paid lead search run.

    Debits fetch_count lead_search credits, starts the actor run and returns
    its run id together with the idempotency token of the debit. The run's
    completion arrives later as an ACTOR.RUN.* webhook.

    **Returns:**
    - 200: Run started
    - 400: Invalid fetch_count
    - 402: Insufficient credits
    - 500: Actor platform failure (credits refunded)
    """
    uow = SqlAlchemyUnitOfWork(session)

    use_case = StartLeadSearch(
        uow=uow,
        orchestrator=_build_orchestrator(uow, session, config),
        lead_search_service=lead_search_service,
        job_repo=SqlAlchemyEnrichmentJobRepository(session),
        default_fetch_count=config.DEFAULT_LEAD_FETCH_COUNT,
    )
    result = await use_case.execute(
        LeadSearchCommandDTO(
            tenant_id=request.tenant_id,
            filters=request.filters,
            fetch_count=request.fetch_count,
        )
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/phone-reveal",
    response_model=MeteredActionResponseDTO,
    status_code=status.HTTP_200_OK,
    responses=_ERROR_RESPONSES,
)
async def reveal_phone(
    request: PhoneRevealRequestSchema,
    session: AsyncSession = Depends(get_session),
    phone_service: PhoneEnrichmentService = Depends(get_phone_enrichment_service),
    config=Depends(get_config),
):
    """
    Reveal a contact's phone number for one phone_reveal credit.

    **Returns:**
    - 200: Phone found
    - 402: Insufficient credits
    - 404: No phone found (credit refunded)
    - 500: Enrichment API failure (credit refunded)
    """
    uow = SqlAlchemyUnitOfWork(session)

    use_case = RevealPhone(
        orchestrator=_build_orchestrator(uow, session, config),
        phone_service=phone_service,
    )
    result = await use_case.execute(
        PhoneRevealCommandDTO(tenant_id=request.tenant_id, email=request.email)
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value
